"""자유 텍스트 언급을 마커 타입으로 해석

매칭 규칙: 키워드가 입력의 부분 문자열이면 일치한다. 여러 항목이 일치하면
가장 긴 키워드를 가진 항목이 이기고, 길이가 같으면 카탈로그 순서를 따른다.
일치 항목이 없으면 None을 반환하며 예외를 던지지 않는다.
"""

from __future__ import annotations

import re

from bodymap.catalog.marker_types import DEFAULT_MARKER_CATALOG, MarkerTypeCatalog
from bodymap.catalog.regions import DEFAULT_REGION_INDEX, RegionIndex
from bodymap.core.errors import NotFoundError
from bodymap.models.catalog import BodyView, MarkerTypeDefinition
from bodymap.models.display import ResolvedType
from bodymap.models.marker import MarkerCreateRequest, MarkerSource

_LATERALITY_PATTERN = re.compile(r"\b(left|right)\b")


def _normalize(text: str | None) -> str:
    if text is None:
        return ""
    return " ".join(str(text).lower().split())


def _detect_laterality(normalized: str) -> str | None:
    """입력에서 처음 나오는 좌/우 단서를 반환"""
    match = _LATERALITY_PATTERN.search(normalized)
    return match.group(1) if match else None


def _longest_keyword(definition: MarkerTypeDefinition, normalized: str) -> str | None:
    best: str | None = None
    for keyword in definition.keywords:
        if keyword and keyword in normalized:
            if best is None or len(keyword) > len(best):
                best = keyword
    return best


def resolve_type(
    text: str | None, catalog: MarkerTypeCatalog = DEFAULT_MARKER_CATALOG
) -> ResolvedType | None:
    """자유 텍스트를 카탈로그 항목으로 해석

    Args:
        text: 추출된 키워드/문구
        catalog: 마커 타입 카탈로그

    Returns:
        해석 결과 또는 None
    """
    normalized = _normalize(text)
    if not normalized:
        return None

    matched: MarkerTypeDefinition | None = None
    matched_keyword = ""
    for definition in catalog:
        keyword = _longest_keyword(definition, normalized)
        if keyword is not None and len(keyword) > len(matched_keyword):
            matched = definition
            matched_keyword = keyword
    if matched is None:
        return None

    position = matched.default_position
    region = matched.default_body_region
    laterality = _detect_laterality(normalized)
    applied: str | None = None
    if laterality and matched.laterality_adjustments:
        adjustment = matched.laterality_adjustments.get(laterality)
        if adjustment is not None:
            position = adjustment.position
            region = adjustment.body_region or region
            applied = laterality

    return ResolvedType(
        type=matched.type,
        display_name=matched.display_name,
        category=matched.category,
        body_region=region,
        body_view=matched.default_body_view,
        adjusted_position=position,
        matched_keyword=matched_keyword,
        laterality=applied,
    )


def draft_from_mention(
    patient_id: str,
    text: str | None,
    source: MarkerSource = "smartscribe",
    confidence_score: float | None = None,
    catalog: MarkerTypeCatalog = DEFAULT_MARKER_CATALOG,
) -> MarkerCreateRequest | None:
    """언급 문구로 생성 요청 초안을 구성

    Args:
        patient_id: 환자 식별자
        text: 추출된 문구
        source: 마커 출처
        confidence_score: AI 신뢰도(선택)
        catalog: 마커 타입 카탈로그

    Returns:
        생성 요청 또는 None(수동 선택으로 대체해야 함)
    """
    resolved = resolve_type(text, catalog)
    if resolved is None:
        return None
    return MarkerCreateRequest(
        patient_id=patient_id,
        category=resolved.category,
        marker_type=resolved.type,
        display_name=resolved.display_name,
        body_region=resolved.body_region,
        position_x=resolved.adjusted_position.x,
        position_y=resolved.adjusted_position.y,
        body_view=resolved.body_view,
        source=source,
        confidence_score=confidence_score,
        details={"source_text": str(text).strip()},
    )


def draft_from_type(
    patient_id: str,
    marker_type: str,
    source: MarkerSource = "manual",
    catalog: MarkerTypeCatalog = DEFAULT_MARKER_CATALOG,
) -> MarkerCreateRequest:
    """알려진 타입의 기본 배치로 생성 요청 초안을 구성

    Raises:
        NotFoundError: 카탈로그에 없는 타입
    """
    definition = catalog.get(marker_type)
    if definition is None:
        raise NotFoundError("marker_type", marker_type)
    return MarkerCreateRequest(
        patient_id=patient_id,
        category=definition.category,
        marker_type=definition.type,
        display_name=definition.display_name,
        body_region=definition.default_body_region,
        position_x=definition.default_position.x,
        position_y=definition.default_position.y,
        body_view=definition.default_body_view,
        source=source,
    )


def place_at_point(
    request: MarkerCreateRequest,
    x: float,
    y: float,
    view: BodyView,
    regions: RegionIndex = DEFAULT_REGION_INDEX,
) -> MarkerCreateRequest:
    """명시 좌표로 배치를 보정하고 최근접 부위를 채움

    Args:
        request: 생성 요청
        x: 가로 좌표
        y: 세로 좌표
        view: 앞/뒤 보기
        regions: 부위 색인

    Returns:
        보정된 생성 요청
    """
    closest = regions.find_closest(x, y, view)
    return request.model_copy(
        update={
            "position_x": x,
            "position_y": y,
            "body_view": view,
            "body_region": closest.id if closest else None,
        }
    )
