import pytest

from conftest import ai_request, make_request

from bodymap.core.errors import HistoryWriteError, StateError, StoreError
from bodymap.core.telemetry import TelemetryStore
from bodymap.services.lifecycle import MarkerLifecycleManager
from bodymap.services.repository import PatientMarkerRepository
from bodymap.stores.memory import InMemoryHistoryStore


@pytest.fixture
def repository(store, manager) -> PatientMarkerRepository:
    return PatientMarkerRepository("P1", store, manager)


@pytest.mark.asyncio
async def test_refresh_mirrors_store(repository, manager):
    await manager.create(make_request())
    await manager.create(ai_request(requires_attention=True))

    snapshot = await repository.refresh()
    assert len(snapshot.markers) == 2
    assert repository.pending_count == 1
    assert repository.attention_count == 1
    assert repository.active_count == 2


@pytest.mark.asyncio
async def test_operations_update_local_counts(repository):
    pending = await repository.create(ai_request(requires_attention=True))
    await repository.create(make_request())
    assert repository.pending_count == 1
    assert repository.attention_count == 1

    await repository.confirm(pending.id)
    assert repository.pending_count == 0
    assert repository.attention_count == 0

    await repository.deactivate(pending.id)
    assert repository.active_count == 1
    assert pending.id not in [marker.id for marker in repository.visible()]


@pytest.mark.asyncio
async def test_create_uses_repository_patient(repository):
    marker = await repository.create(make_request(patient_id="OTHER"))
    assert marker.patient_id == "P1"


@pytest.mark.asyncio
async def test_failed_operation_keeps_cache(repository):
    marker = await repository.create(make_request())
    before = repository.markers
    with pytest.raises(StateError):
        await repository.reject(marker.id)
    assert repository.markers == before


@pytest.mark.asyncio
async def test_confirm_all_refreshes_and_publishes_status(repository):
    for _ in range(3):
        await repository.create(ai_request())
    assert await repository.confirm_all_pending("dr-1") == 3
    assert repository.pending_count == 0

    rows = TelemetryStore().query_status()
    assert rows[0]["patient_id"] == "P1"
    assert (rows[0]["active_count"], rows[0]["pending_count"], rows[0]["attention_count"]) == (3, 0, 0)


@pytest.mark.asyncio
async def test_views_exclude_rejected(repository):
    kept = await repository.create(make_request(marker_type="code_dnr", display_name="DNR", body_region="head", position_y=6))
    dropped = await repository.create(ai_request(marker_type="fall_risk", display_name="Fall Risk", body_region="head", position_y=6))
    await repository.reject(dropped.id)

    assert [marker.id for marker in repository.visible("front")] == [kept.id]
    assert list(repository.by_category()) == ["moderate"]
    assert [slot.marker_id for slot in repository.badges().all_slots()] == [kept.id]


class CreateOnlyHistory(InMemoryHistoryStore):
    async def append(self, entry):
        if entry.action != "created":
            raise StoreError("history down")
        return await super().append(entry)


@pytest.mark.asyncio
async def test_history_failure_resyncs_cache_with_store(store, recorder):
    manager = MarkerLifecycleManager(store, CreateOnlyHistory(), events=recorder)
    repository = PatientMarkerRepository("P1", store, manager)
    pending = await repository.create(ai_request())
    assert repository.pending_count == 1

    with pytest.raises(HistoryWriteError):
        await repository.confirm(pending.id)
    assert repository.pending_count == 0
    assert repository.markers[0].status == "confirmed"
