"""프로세스 내 메모리 저장소

로컬 실행과 테스트에 사용한다. 반환값은 복사본이므로 호출자가 수정해도
저장된 레코드에 영향을 주지 않는다.
"""

from __future__ import annotations

import uuid

from bodymap.core.errors import NotFoundError
from bodymap.models.avatar import AvatarPreferences
from bodymap.models.marker import (
    MarkerDraft,
    MarkerHistoryEntry,
    PatientMarker,
    PatientMarkerSnapshot,
)
from bodymap.utils.parsing import utc_now_iso


class InMemoryMarkerStore:
    """메모리 기반 마커 저장소"""

    def __init__(self) -> None:
        self._markers: dict[str, PatientMarker] = {}

    async def get(self, patient_id: str) -> PatientMarkerSnapshot:
        markers = [
            marker.model_copy(deep=True)
            for marker in self._markers.values()
            if marker.patient_id == patient_id
        ]
        return PatientMarkerSnapshot.from_markers(markers)

    async def get_marker(self, marker_id: str) -> PatientMarker | None:
        marker = self._markers.get(marker_id)
        return marker.model_copy(deep=True) if marker else None

    async def create(
        self, request: MarkerDraft, acting_user_id: str | None
    ) -> PatientMarker:
        now = utc_now_iso()
        data = request.model_dump()
        data.update({"id": str(uuid.uuid4()), "created_at": now, "updated_at": now})
        marker = PatientMarker(**data)
        self._markers[marker.id] = marker
        return marker.model_copy(deep=True)

    async def update(
        self, marker_id: str, patch: dict, acting_user_id: str | None
    ) -> PatientMarker:
        current = self._markers.get(marker_id)
        if current is None:
            raise NotFoundError("marker", marker_id)
        merged = current.model_dump()
        merged.update(patch)
        merged["updated_at"] = utc_now_iso()
        marker = PatientMarker(**merged)
        self._markers[marker_id] = marker
        return marker.model_copy(deep=True)

    def _set(self, marker_id: str, **changes: object) -> bool:
        current = self._markers.get(marker_id)
        if current is None:
            return False
        changes["updated_at"] = utc_now_iso()
        self._markers[marker_id] = current.model_copy(update=changes)
        return True

    async def confirm(self, marker_id: str, acting_user_id: str | None) -> bool:
        return self._set(marker_id, status="confirmed", requires_attention=False)

    async def reject(self, marker_id: str, acting_user_id: str | None) -> bool:
        return self._set(marker_id, status="rejected")

    async def deactivate(self, marker_id: str, acting_user_id: str | None) -> bool:
        return self._set(marker_id, is_active=False)

    async def confirm_all_pending(
        self, patient_id: str, acting_user_id: str | None
    ) -> int:
        pending = [
            marker.id
            for marker in self._markers.values()
            if marker.patient_id == patient_id
            and marker.is_visible
            and marker.status == "pending_confirmation"
        ]
        for marker_id in pending:
            self._set(marker_id, status="confirmed", requires_attention=False)
        return len(pending)


class InMemoryHistoryStore:
    """메모리 기반 마커 이력 저장소"""

    def __init__(self) -> None:
        self._entries: list[MarkerHistoryEntry] = []

    async def append(self, entry: MarkerHistoryEntry) -> MarkerHistoryEntry:
        stored = entry.model_copy(update={"id": entry.id or str(uuid.uuid4())})
        self._entries.append(stored)
        return stored.model_copy(deep=True)

    async def get_for_marker(self, marker_id: str) -> list[MarkerHistoryEntry]:
        return [
            entry.model_copy(deep=True)
            for entry in self._entries
            if entry.marker_id == marker_id
        ]


class InMemoryAvatarStore:
    """메모리 기반 아바타 설정 저장소"""

    def __init__(self) -> None:
        self._preferences: dict[str, AvatarPreferences] = {}

    async def get(self, patient_id: str) -> AvatarPreferences | None:
        preferences = self._preferences.get(patient_id)
        return preferences.model_copy() if preferences else None

    async def save(self, preferences: AvatarPreferences) -> AvatarPreferences:
        stored = preferences.model_copy(update={"updated_at": utc_now_iso()})
        self._preferences[stored.patient_id] = stored
        return stored.model_copy()
