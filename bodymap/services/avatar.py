from __future__ import annotations

import asyncio

from bodymap.core.logger import log_event
from bodymap.models.avatar import AvatarPreferences, GenderPresentation, SkinTone
from bodymap.stores.base import AvatarStore


class AvatarPreferenceService:
    """환자 아바타 외형 설정 조회/변경"""

    def __init__(self, store: AvatarStore) -> None:
        self._store = store

    async def get(self, patient_id: str) -> AvatarPreferences:
        """저장된 설정을 반환, 없으면 기본값"""
        stored = await self._store.get(patient_id)
        return stored or AvatarPreferences(patient_id=patient_id)

    async def update(
        self,
        patient_id: str,
        skin_tone: SkinTone | None = None,
        gender_presentation: GenderPresentation | None = None,
    ) -> AvatarPreferences:
        """지정한 항목만 변경해 저장

        Args:
            patient_id: 환자 식별자
            skin_tone: 피부톤(선택)
            gender_presentation: 성별 표현(선택)

        Returns:
            저장된 설정
        """
        current = await self.get(patient_id)
        changes = {}
        if skin_tone is not None:
            changes["skin_tone"] = skin_tone
        if gender_presentation is not None:
            changes["gender_presentation"] = gender_presentation
        saved = await self._store.save(current.model_copy(update=changes))
        await asyncio.to_thread(
            log_event,
            "avatar_updated",
            "INFO",
            patient_id,
            "avatar",
            f"아바타 설정 변경 fields={','.join(sorted(changes)) or '-'}",
        )
        return saved
