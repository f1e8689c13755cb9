from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from bodymap.core.auth import require_admin
from bodymap.core.telemetry import TelemetryStore

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/logs")
def admin_logs(
    event: str | None = None,
    patient_id: str | None = None,
    marker_id: str | None = None,
    limit: int = Query(500, ge=1, le=5000),
) -> list[dict]:
    """감사 로그 조회

    Args:
        event: 이벤트 이름 필터(선택)
        patient_id: 환자 식별자 필터(선택)
        marker_id: 마커 식별자 필터(선택)
        limit: 최대 행 수

    Returns:
        시간순 로그 목록
    """
    return TelemetryStore().query_logs(
        event=event, patient_id=patient_id, marker_id=marker_id, limit=limit
    )


@router.get("/status")
def admin_status() -> list[dict]:
    """환자별 활성, 대기, 주의 마커 집계 조회"""
    return TelemetryStore().query_status()
