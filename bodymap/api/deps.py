from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from bodymap.clients.marker_api import (
    HttpAvatarStore,
    HttpHistoryStore,
    HttpMarkerStore,
    MarkerApiClient,
)
from bodymap.core.config import Settings
from bodymap.services.avatar import AvatarPreferenceService
from bodymap.services.lifecycle import MarkerLifecycleManager
from bodymap.services.repository import PatientMarkerRepository
from bodymap.stores.base import MarkerStore
from bodymap.stores.memory import (
    InMemoryAvatarStore,
    InMemoryHistoryStore,
    InMemoryMarkerStore,
)


@dataclass
class EngineServices:
    """요청 간 공유하는 저장소와 서비스 묶음"""

    store: MarkerStore
    manager: MarkerLifecycleManager
    avatars: AvatarPreferenceService

    def repository(self, patient_id: str) -> PatientMarkerRepository:
        return PatientMarkerRepository(patient_id, self.store, self.manager)


def build_services(settings: Settings) -> EngineServices:
    """설정된 저장소 백엔드로 서비스를 구성

    Args:
        settings: 애플리케이션 설정

    Returns:
        서비스 묶음
    """
    if settings.store_backend == "http":
        client = MarkerApiClient(settings.marker_api_url, settings.marker_api_key)
        store = HttpMarkerStore(client)
        history = HttpHistoryStore(client)
        avatar_store = HttpAvatarStore(client)
    else:
        store = InMemoryMarkerStore()
        history = InMemoryHistoryStore()
        avatar_store = InMemoryAvatarStore()
    return EngineServices(
        store=store,
        manager=MarkerLifecycleManager(store, history),
        avatars=AvatarPreferenceService(avatar_store),
    )


def get_services(request: Request) -> EngineServices:
    return request.app.state.services
