from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bodymap.api.deps import EngineServices, get_services
from bodymap.models.avatar import GenderPresentation, SkinTone

router = APIRouter()


class AvatarUpdateBody(BaseModel):
    skin_tone: SkinTone | None = None
    gender_presentation: GenderPresentation | None = None


@router.get("/patients/{patient_id}/avatar")
async def get_avatar(
    patient_id: str, services: EngineServices = Depends(get_services)
) -> dict:
    """아바타 외형 설정을 반환"""
    preferences = await services.avatars.get(patient_id)
    return preferences.model_dump()


@router.put("/patients/{patient_id}/avatar")
async def update_avatar(
    patient_id: str,
    body: AvatarUpdateBody,
    services: EngineServices = Depends(get_services),
) -> dict:
    """아바타 외형 설정을 변경"""
    preferences = await services.avatars.update(
        patient_id, body.skin_tone, body.gender_presentation
    )
    return preferences.model_dump()
