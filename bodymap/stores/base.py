from __future__ import annotations

from typing import Protocol

from bodymap.models.avatar import AvatarPreferences
from bodymap.models.marker import (
    MarkerDraft,
    MarkerHistoryEntry,
    PatientMarker,
    PatientMarkerSnapshot,
)


class MarkerStore(Protocol):
    """마커 저장소 경계 계약

    실패는 StoreError로 보고한다.
    """

    async def get(self, patient_id: str) -> PatientMarkerSnapshot: ...

    async def get_marker(self, marker_id: str) -> PatientMarker | None: ...

    async def create(
        self, request: MarkerDraft, acting_user_id: str | None
    ) -> PatientMarker: ...

    async def update(
        self, marker_id: str, patch: dict, acting_user_id: str | None
    ) -> PatientMarker: ...

    async def confirm(self, marker_id: str, acting_user_id: str | None) -> bool: ...

    async def reject(self, marker_id: str, acting_user_id: str | None) -> bool: ...

    async def deactivate(self, marker_id: str, acting_user_id: str | None) -> bool: ...

    async def confirm_all_pending(
        self, patient_id: str, acting_user_id: str | None
    ) -> int: ...


class HistoryStore(Protocol):
    """마커 이력 저장소 경계 계약(추가 전용)"""

    async def append(self, entry: MarkerHistoryEntry) -> MarkerHistoryEntry: ...

    async def get_for_marker(self, marker_id: str) -> list[MarkerHistoryEntry]: ...


class AvatarStore(Protocol):
    """아바타 외형 설정 저장소 경계 계약"""

    async def get(self, patient_id: str) -> AvatarPreferences | None: ...

    async def save(self, preferences: AvatarPreferences) -> AvatarPreferences: ...
