from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bodymap.api.deps import EngineServices, get_services
from bodymap.core.auth import get_acting_user
from bodymap.models.marker import MarkerCreateRequest, MarkerUpdate
from bodymap.services.resolver import place_at_point

router = APIRouter()


class MarkerCreateBody(BaseModel):
    """마커 생성 요청 본문, 좌표만 주면 최근접 부위로 배치"""

    marker: MarkerCreateRequest
    snap_to_region: bool = False


def _transition_body(result) -> dict:
    return {
        "marker": result.marker.model_dump(),
        "action": result.action,
        "pending_delta": result.pending_delta,
    }


@router.get("/patients/{patient_id}/markers")
async def list_markers(
    patient_id: str,
    view: Literal["front", "back"] | None = None,
    services: EngineServices = Depends(get_services),
) -> dict:
    """보이는 마커를 우선순위 순으로 반환

    Args:
        patient_id: 환자 식별자
        view: 앞/뒤 보기(선택)
        services: 서비스 의존성

    Returns:
        마커 목록과 집계
    """
    repository = services.repository(patient_id)
    await repository.refresh()
    return {
        "markers": [marker.model_dump() for marker in repository.visible(view)],
        "by_category": {
            category: [marker.id for marker in markers]
            for category, markers in repository.by_category().items()
        },
        "active_count": repository.active_count,
        "pending_count": repository.pending_count,
        "attention_count": repository.attention_count,
    }


@router.post("/patients/{patient_id}/markers", status_code=201)
async def create_marker(
    patient_id: str,
    body: MarkerCreateBody,
    services: EngineServices = Depends(get_services),
    acting_user: str | None = Depends(get_acting_user),
) -> dict:
    """마커를 생성"""
    request = body.marker.model_copy(update={"patient_id": patient_id})
    if (
        body.snap_to_region
        and request.position_x is not None
        and request.position_y is not None
    ):
        request = place_at_point(
            request, request.position_x, request.position_y, request.body_view
        )
    marker = await services.manager.create(request, acting_user)
    return marker.model_dump()


@router.get("/patients/{patient_id}/badges")
async def list_badges(
    patient_id: str, services: EngineServices = Depends(get_services)
) -> dict:
    """상태 배지 그룹과 슬롯 좌표를 반환"""
    repository = services.repository(patient_id)
    await repository.refresh()
    return repository.badges().model_dump()


@router.post("/patients/{patient_id}/markers/confirm-all")
async def confirm_all(
    patient_id: str,
    services: EngineServices = Depends(get_services),
    acting_user: str | None = Depends(get_acting_user),
) -> dict:
    """환자의 확인 대기 마커를 모두 확인"""
    count = await services.manager.confirm_all_pending(patient_id, acting_user)
    return {"confirmed": count}


@router.patch("/markers/{marker_id}")
async def update_marker(
    marker_id: str,
    patch: MarkerUpdate,
    services: EngineServices = Depends(get_services),
    acting_user: str | None = Depends(get_acting_user),
) -> dict:
    """마커를 수정"""
    marker = await services.manager.update(marker_id, patch, acting_user)
    return marker.model_dump()


@router.post("/markers/{marker_id}/confirm")
async def confirm_marker(
    marker_id: str,
    services: EngineServices = Depends(get_services),
    acting_user: str | None = Depends(get_acting_user),
) -> dict:
    result = await services.manager.confirm(marker_id, acting_user)
    return _transition_body(result)


@router.post("/markers/{marker_id}/reject")
async def reject_marker(
    marker_id: str,
    services: EngineServices = Depends(get_services),
    acting_user: str | None = Depends(get_acting_user),
) -> dict:
    result = await services.manager.reject(marker_id, acting_user)
    return _transition_body(result)


@router.post("/markers/{marker_id}/deactivate")
async def deactivate_marker(
    marker_id: str,
    services: EngineServices = Depends(get_services),
    acting_user: str | None = Depends(get_acting_user),
) -> dict:
    result = await services.manager.deactivate(marker_id, acting_user)
    return _transition_body(result)


@router.get("/markers/{marker_id}/history")
async def marker_history(
    marker_id: str, services: EngineServices = Depends(get_services)
) -> list[dict]:
    """마커 변경 이력을 반환"""
    entries = await services.manager.history(marker_id)
    return [entry.model_dump() for entry in entries]
