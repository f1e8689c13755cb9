import json

import httpx
import pytest

from conftest import make_request

from bodymap.clients.marker_api import HttpHistoryStore, HttpMarkerStore, MarkerApiClient
from bodymap.core.errors import StoreError
from bodymap.models.marker import MarkerDraft, MarkerHistoryEntry
from bodymap.services.lifecycle import MarkerLifecycleManager

MARKER = {
    "id": "M1",
    "patient_id": "P1",
    "category": "moderate",
    "marker_type": "foley_catheter",
    "display_name": "Foley Catheter",
    "body_region": "pelvis",
    "position_x": 50,
    "position_y": 58,
    "created_at": "2024-01-01T10:00:00Z",
    "updated_at": "2024-01-01T10:00:00Z",
}


def _client(handler) -> MarkerApiClient:
    return MarkerApiClient(
        "http://markers.test/api", "secret", transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_create_sends_acting_user_and_api_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["user"] = request.headers.get("X-Acting-User")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=MARKER)

    store = HttpMarkerStore(_client(handler))
    draft = MarkerDraft(**make_request().model_dump(), status="confirmed")
    marker = await store.create(draft, "nurse-1")
    assert marker.id == "M1"
    assert seen["path"] == "/api/patients/P1/markers"
    assert seen["auth"] == "Bearer secret"
    assert seen["user"] == "nurse-1"
    assert seen["body"]["marker_type"] == "foley_catheter"
    assert seen["body"]["status"] == "confirmed"


@pytest.mark.asyncio
async def test_get_marker_missing_returns_none():
    store = HttpMarkerStore(_client(lambda request: httpx.Response(404)))
    assert await store.get_marker("missing") is None


@pytest.mark.asyncio
async def test_transitions_read_success_flag_and_count():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("confirm-all"):
            return httpx.Response(200, json={"count": 3})
        return httpx.Response(200, json={"success": True})

    store = HttpMarkerStore(_client(handler))
    assert await store.confirm("M1", None) is True
    assert await store.confirm_all_pending("P1", None) == 3


@pytest.mark.asyncio
async def test_server_error_becomes_store_error():
    store = HttpMarkerStore(_client(lambda request: httpx.Response(503)))
    with pytest.raises(StoreError) as info:
        await store.get("P1")
    assert "503" in info.value.message
    assert info.value.code == "MK_STORE_001"


@pytest.mark.asyncio
async def test_network_error_becomes_store_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    store = HttpMarkerStore(_client(handler))
    with pytest.raises(StoreError):
        await store.reject("M1", "dr-1")


@pytest.mark.asyncio
async def test_history_store_round_trip():
    entries: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            body = json.loads(request.content)
            body["id"] = "H1"
            entries.append(body)
            return httpx.Response(201, json=body)
        return httpx.Response(200, json=entries)

    history = HttpHistoryStore(_client(handler))
    await history.append(
        MarkerHistoryEntry(
            marker_id="M1", action="rejected", created_at="2024-01-01T10:00:00Z"
        )
    )
    stored = await history.get_for_marker("M1")
    assert [entry.action for entry in stored] == ["rejected"]
    assert stored[0].id == "H1"


@pytest.mark.asyncio
async def test_non_json_reply_becomes_store_error():
    store = HttpMarkerStore(
        _client(lambda request: httpx.Response(200, text="<html>gateway</html>"))
    )
    with pytest.raises(StoreError) as info:
        await store.get("P1")
    assert info.value.code == "MK_STORE_001"
    assert info.value.__cause__ is not None


@pytest.mark.asyncio
async def test_malformed_marker_reply_becomes_store_error():
    store = HttpMarkerStore(_client(lambda request: httpx.Response(200, json={"id": "M1"})))
    with pytest.raises(StoreError) as info:
        await store.get_marker("M1")
    assert "PatientMarker" in info.value.message


@pytest.mark.asyncio
async def test_malformed_count_and_history_replies_become_store_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("confirm-all"):
            return httpx.Response(200, json={"count": "many"})
        return httpx.Response(200, json={"entries": []})

    client = _client(handler)
    with pytest.raises(StoreError):
        await HttpMarkerStore(client).confirm_all_pending("P1", None)
    with pytest.raises(StoreError):
        await HttpHistoryStore(client).get_for_marker("M1")


@pytest.mark.asyncio
async def test_malformed_reply_surfaces_through_lifecycle(history, recorder):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={**MARKER, "status": "pending_confirmation"})
        return httpx.Response(200, text="not json")

    manager = MarkerLifecycleManager(
        HttpMarkerStore(_client(handler)), history, events=recorder
    )
    with pytest.raises(StoreError):
        await manager.confirm("M1", "dr-1")
    assert recorder.events[-1][0] == "confirm_failed"
    assert recorder.events[-1][1] == "ERROR"
    assert await history.get_for_marker("M1") == []
