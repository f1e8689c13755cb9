import pytest

from bodymap.core.config import get_settings, load_app_config
from bodymap.core.telemetry import TelemetryStore
from bodymap.models.marker import MarkerCreateRequest
from bodymap.services.lifecycle import MarkerLifecycleManager
from bodymap.stores.memory import InMemoryHistoryStore, InMemoryMarkerStore


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DUCKDB_PATH", str(tmp_path / "telemetry.duckdb"))
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "bodymap.yaml"))
    get_settings.cache_clear()
    load_app_config.cache_clear()
    TelemetryStore.reset()
    yield
    TelemetryStore.reset()
    get_settings.cache_clear()
    load_app_config.cache_clear()


class EventRecorder:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def __call__(self, event, level, patient_id, action, message, **extra) -> None:
        self.events.append((event, level, patient_id, action, extra))

    def names(self) -> list[str]:
        return [event[0] for event in self.events]


@pytest.fixture
def store() -> InMemoryMarkerStore:
    return InMemoryMarkerStore()


@pytest.fixture
def history() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def manager(store, history, recorder) -> MarkerLifecycleManager:
    return MarkerLifecycleManager(store, history, events=recorder)


def make_request(**overrides) -> MarkerCreateRequest:
    data = {
        "patient_id": "P1",
        "category": "moderate",
        "marker_type": "foley_catheter",
        "display_name": "Foley Catheter",
        "body_region": "pelvis",
        "position_x": 50,
        "position_y": 58,
        "body_view": "front",
        "source": "manual",
    }
    data.update(overrides)
    return MarkerCreateRequest(**data)


def ai_request(**overrides) -> MarkerCreateRequest:
    data = {"source": "smartscribe", "confidence_score": 0.9}
    data.update(overrides)
    return make_request(**data)
