from __future__ import annotations

import logging

from bodymap.core.telemetry import TelemetryStore
from bodymap.utils.parsing import utc_now_iso


def log_event(
    event: str,
    level: str,
    patient_id: str | None,
    action: str,
    message: str,
    marker_id: str | None = None,
    error_code: str | None = None,
    record_count: int | None = None,
) -> None:
    """이벤트를 표준 로깅과 DuckDB에 기록

    Args:
        event: 이벤트 이름
        level: 로깅 레벨 문자열
        patient_id: 환자 식별자
        action: 수명주기 동작(create, confirm 등)
        message: 로그 메시지
        marker_id: 마커 식별자(선택)
        error_code: 에러 코드(선택)
        record_count: 레코드 수(선택)
    """
    logger = logging.getLogger("bodymap")
    extra = {
        "event": event,
        "patient_id": patient_id or "-",
        "marker_id": marker_id or "-",
    }
    logger.log(getattr(logging, level.upper(), logging.INFO), message, extra=extra)

    TelemetryStore().insert_log(
        {
            "timestamp": utc_now_iso(),
            "level": level.upper(),
            "event": event,
            "patient_id": patient_id,
            "action": action,
            "marker_id": marker_id,
            "error_code": error_code,
            "message": message,
            "record_count": record_count,
        }
    )


def record_patient_status(
    patient_id: str, active_count: int, pending_count: int, attention_count: int
) -> None:
    """환자별 마커 집계를 텔레메트리에 반영

    Args:
        patient_id: 환자 식별자
        active_count: 활성 마커 수
        pending_count: 확인 대기 마커 수
        attention_count: 주의 필요 마커 수
    """
    TelemetryStore().update_status(
        {
            "patient_id": patient_id,
            "updated_at": utc_now_iso(),
            "active_count": active_count,
            "pending_count": pending_count,
            "attention_count": attention_count,
        }
    )
