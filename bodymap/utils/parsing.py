from __future__ import annotations

from datetime import datetime, timezone

from bodymap.core.errors import ValidationError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now_iso() -> str:
    """현재 시각을 UTC ISO8601 문자열로 반환"""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def clean_text(value: object, max_length: int = 200) -> str | None:
    """문자열 정리와 길이 제한

    Args:
        value: 원본 값
        max_length: 최대 길이

    Returns:
        정리된 문자열 또는 None
    """
    if value is None:
        return None
    text = str(value).strip()
    if text == "":
        return None
    return text[:max_length]


def parse_coordinate(value: str | int | float | None, field: str) -> float:
    """다이어그램 좌표(0~100)를 파싱

    Args:
        value: 원본 값
        field: 에러 메시지에 사용할 필드명

    Returns:
        파싱된 좌표 값

    Raises:
        ValidationError: 값이 없거나 범위를 벗어난 경우
    """
    if value is None:
        raise ValidationError(field, "값이 필요함")
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise ValidationError(field, f"실수가 아님: {value}") from exc
    if not 0.0 <= number <= 100.0:
        raise ValidationError(field, f"0~100 범위를 벗어남: {value}")
    return number


def parse_confidence(value: str | int | float | None) -> float | None:
    """신뢰도 점수(0~1)를 파싱

    Args:
        value: 원본 값

    Returns:
        파싱된 신뢰도 또는 None

    Raises:
        ValidationError: 범위를 벗어난 경우
    """
    if value is None or str(value).strip() == "":
        return None
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise ValidationError("confidence_score", f"실수가 아님: {value}") from exc
    if not 0.0 <= number <= 1.0:
        raise ValidationError("confidence_score", f"0~1 범위를 벗어남: {value}")
    return number


def timestamp_key(value: str | None) -> datetime:
    """정렬용 타임스탬프 변환, 해석 불가 값은 epoch로 취급

    Args:
        value: ISO8601 타임스탬프 문자열

    Returns:
        시간대가 있는 datetime
    """
    if not value:
        return EPOCH
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
