"""환자 마커 목록의 로컬 미러

저장소 응답이 성공한 뒤에만 캐시를 갱신한다. 실패하면 캐시는 이전 상태로
남는다. 이력 기록만 실패한 경우에는 저장소에서 다시 읽는다.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from bodymap.core.errors import HistoryWriteError
from bodymap.core.logger import record_patient_status
from bodymap.models.display import BadgeGroups
from bodymap.models.marker import (
    MarkerCreateRequest,
    MarkerUpdate,
    PatientMarker,
    PatientMarkerSnapshot,
    TransitionResult,
)
from bodymap.services.classifier import (
    classify_badges,
    group_by_category,
    prioritize,
    visible_markers,
)
from bodymap.services.lifecycle import MarkerLifecycleManager
from bodymap.stores.base import MarkerStore


class PatientMarkerRepository:
    """한 환자의 마커 목록과 집계를 저장소와 동기화"""

    def __init__(
        self,
        patient_id: str,
        store: MarkerStore,
        manager: MarkerLifecycleManager,
    ) -> None:
        self.patient_id = patient_id
        self._store = store
        self._manager = manager
        self._snapshot = PatientMarkerSnapshot()

    @property
    def markers(self) -> list[PatientMarker]:
        return list(self._snapshot.markers)

    @property
    def pending_count(self) -> int:
        return self._snapshot.pending_count

    @property
    def attention_count(self) -> int:
        return self._snapshot.attention_count

    @property
    def active_count(self) -> int:
        return self._snapshot.active_count

    async def refresh(self) -> PatientMarkerSnapshot:
        """저장소에서 목록과 집계를 다시 읽음"""
        self._snapshot = await self._store.get(self.patient_id)
        await self._publish()
        return self._snapshot

    async def create(
        self, request: MarkerCreateRequest, acting_user_id: str | None = None
    ) -> PatientMarker:
        request = request.model_copy(update={"patient_id": self.patient_id})
        async with self._resync_on_history_failure():
            marker = await self._manager.create(request, acting_user_id)
        await self._replace([*self._snapshot.markers, marker])
        return marker

    async def update(
        self,
        marker_id: str,
        patch: MarkerUpdate | dict,
        acting_user_id: str | None = None,
    ) -> PatientMarker:
        async with self._resync_on_history_failure():
            marker = await self._manager.update(marker_id, patch, acting_user_id)
        await self._swap(marker)
        return marker

    async def confirm(
        self, marker_id: str, acting_user_id: str | None = None
    ) -> TransitionResult:
        async with self._resync_on_history_failure():
            result = await self._manager.confirm(marker_id, acting_user_id)
        await self._swap(result.marker)
        return result

    async def reject(
        self, marker_id: str, acting_user_id: str | None = None
    ) -> TransitionResult:
        async with self._resync_on_history_failure():
            result = await self._manager.reject(marker_id, acting_user_id)
        await self._swap(result.marker)
        return result

    async def deactivate(
        self, marker_id: str, acting_user_id: str | None = None
    ) -> TransitionResult:
        async with self._resync_on_history_failure():
            result = await self._manager.deactivate(marker_id, acting_user_id)
        await self._swap(result.marker)
        return result

    async def confirm_all_pending(self, acting_user_id: str | None = None) -> int:
        async with self._resync_on_history_failure():
            count = await self._manager.confirm_all_pending(
                self.patient_id, acting_user_id
            )
        await self.refresh()
        return count

    def visible(self, view: str | None = None) -> list[PatientMarker]:
        """보이는 마커를 우선순위 순으로 반환"""
        return prioritize(visible_markers(self._snapshot.markers, view))

    def by_category(self) -> dict[str, list[PatientMarker]]:
        return group_by_category(self._snapshot.markers)

    def badges(self) -> BadgeGroups:
        return classify_badges(self._snapshot.markers)

    @asynccontextmanager
    async def _resync_on_history_failure(self):
        # 저장소에는 변경이 적용된 상태
        try:
            yield
        except HistoryWriteError:
            await self.refresh()
            raise

    async def _swap(self, marker: PatientMarker) -> None:
        markers = [
            marker if existing.id == marker.id else existing
            for existing in self._snapshot.markers
        ]
        if not any(existing.id == marker.id for existing in self._snapshot.markers):
            markers.append(marker)
        await self._replace(markers)

    async def _replace(self, markers: list[PatientMarker]) -> None:
        self._snapshot = PatientMarkerSnapshot.from_markers(markers)
        await self._publish()

    async def _publish(self) -> None:
        await asyncio.to_thread(
            record_patient_status,
            self.patient_id,
            self._snapshot.active_count,
            self._snapshot.pending_count,
            self._snapshot.attention_count,
        )
