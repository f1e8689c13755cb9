import base64

import pytest
from fastapi.testclient import TestClient

from bodymap.core.errors import StoreError
from bodymap.main import create_app
from bodymap.services.lifecycle import MarkerLifecycleManager
from bodymap.stores.memory import InMemoryHistoryStore

MARKER = {
    "marker_type": "chest_tube",
    "display_name": "Chest Tube",
    "category": "critical",
    "body_region": "chest_left",
    "position_x": 62,
    "position_y": 35,
}


def _basic_auth_header(username: str, password: str) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("utf-8")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def _create(client: TestClient, headers: dict | None = None, **overrides) -> dict:
    body = {"marker": {**MARKER, **overrides}}
    response = client.post("/v1/patients/P1/markers", json=body, headers=headers or {})
    assert response.status_code == 201, response.text
    return response.json()


def test_health_reports_catalog_sizes(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["regions"] > 0


def test_create_and_list_markers(client):
    manual = _create(client, headers={"X-Acting-User": "nurse-1"})
    ai = _create(
        client,
        source="smartscribe",
        confidence_score=0.5,
        marker_type="fall_risk",
        display_name="Fall Risk",
        category="monitoring",
        body_region="head",
        position_x=50,
        position_y=6,
    )
    assert manual["status"] == "confirmed"
    assert ai["status"] == "pending_confirmation"
    assert ai["requires_attention"] is True

    response = client.get("/v1/patients/P1/markers", params={"view": "front"})
    data = response.json()
    assert [item["id"] for item in data["markers"]] == [manual["id"], ai["id"]]
    assert data["pending_count"] == 1
    assert data["attention_count"] == 1
    assert list(data["by_category"]) == ["critical", "monitoring"]


def test_snap_to_region_fills_closest_region(client):
    body = {"marker": {**MARKER, "body_region": None, "position_x": 59, "position_y": 28}, "snap_to_region": True}
    response = client.post("/v1/patients/P1/markers", json=body)
    assert response.status_code == 201
    assert response.json()["body_region"] == "chest_left"


def test_errors_map_to_specific_status_codes(client):
    response = client.post(
        "/v1/patients/P1/markers", json={"marker": {**MARKER, "display_name": None}}
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "MK_VALID_001"

    response = client.post("/v1/markers/missing/confirm")
    assert response.status_code == 404
    assert response.json()["error_code"] == "MK_NOTFOUND_001"

    marker = _create(client)
    response = client.post(f"/v1/markers/{marker['id']}/confirm")
    assert response.status_code == 409
    assert response.json()["error_code"] == "MK_STATE_001"


def test_confirm_reject_and_history(client):
    first = _create(client, source="smartscribe", confidence_score=0.9)
    second = _create(client, source="smartscribe", confidence_score=0.9)

    response = client.post(
        f"/v1/markers/{first['id']}/confirm", headers={"X-Acting-User": "dr-1"}
    )
    assert response.json()["pending_delta"] == -1
    assert response.json()["marker"]["status"] == "confirmed"

    client.post(f"/v1/markers/{second['id']}/reject")
    listing = client.get("/v1/patients/P1/markers").json()
    assert [item["id"] for item in listing["markers"]] == [first["id"]]

    history = client.get(f"/v1/markers/{second['id']}/history").json()
    assert [entry["action"] for entry in history] == ["created", "rejected"]

    confirm_history = client.get(f"/v1/markers/{first['id']}/history").json()
    assert confirm_history[-1]["changed_by"] == "dr-1"


def test_update_and_deactivate(client):
    marker = _create(client)
    response = client.patch(
        f"/v1/markers/{marker['id']}",
        json={"details": {"care_instructions": "Check suction daily"}},
    )
    assert response.status_code == 200
    assert response.json()["details"]["care_instructions"] == "Check suction daily"

    response = client.post(f"/v1/markers/{marker['id']}/deactivate")
    assert response.status_code == 200
    assert client.get("/v1/patients/P1/markers").json()["markers"] == []


def test_confirm_all_endpoint(client):
    for _ in range(3):
        _create(client, source="smartscribe", confidence_score=0.95)
    for _ in range(2):
        _create(client)
    response = client.post("/v1/patients/P1/markers/confirm-all")
    assert response.json() == {"confirmed": 3}
    assert client.get("/v1/patients/P1/markers").json()["pending_count"] == 0


def test_badges_endpoint(client):
    _create(
        client,
        marker_type="code_dnr",
        display_name="DNR",
        body_region="head",
        position_x=50,
        position_y=6,
    )
    data = client.get("/v1/patients/P1/badges").json()
    assert [slot["marker_type"] for slot in data["top"]] == ["code_dnr"]
    assert data["left"] == []
    assert data["right"] == []


def test_resolve_and_region_lookup(client):
    match = client.post("/v1/resolve", json={"text": "chest tube left side"}).json()["match"]
    assert match["type"] == "chest_tube"
    assert match["adjusted_position"] == {"x": 62.0, "y": 35.0}

    assert client.post("/v1/resolve", json={"text": "ambulating"}).json() == {"match": None}

    region = client.get("/v1/regions/closest", params={"x": 50, "y": 45, "view": "back"}).json()
    assert region["region"]["id"] == "lower_back"

    regions = client.get("/v1/regions", params={"view": "back"}).json()
    assert all(item["view"] == "back" for item in regions)


def test_avatar_preferences(client):
    assert client.get("/v1/patients/P1/avatar").json()["skin_tone"] == "medium"
    response = client.put("/v1/patients/P1/avatar", json={"skin_tone": "dark"})
    assert response.json()["skin_tone"] == "dark"
    assert response.json()["gender_presentation"] == "neutral"

    response = client.put("/v1/patients/P1/avatar", json={"skin_tone": "green"})
    assert response.status_code == 422


def test_admin_logs_require_auth(client):
    _create(client)
    assert client.get("/admin/logs").status_code == 401
    assert client.get("/admin/logs", headers=_basic_auth_header("admin", "bad")).status_code == 401

    response = client.get(
        "/admin/logs",
        params={"event": "marker_created"},
        headers=_basic_auth_header("admin", "admin"),
    )
    assert response.status_code == 200
    assert [row["event"] for row in response.json()] == ["marker_created"]

    status = client.get("/admin/status", headers=_basic_auth_header("admin", "admin"))
    assert status.status_code == 200


def test_history_of_unknown_marker_is_404(client):
    response = client.get("/v1/markers/missing/history")
    assert response.status_code == 404
    assert response.json()["error_code"] == "MK_NOTFOUND_001"


def test_create_ignores_client_supplied_status(client):
    marker = _create(
        client,
        source="smartscribe",
        confidence_score=0.9,
        status="confirmed",
        is_active=False,
    )
    assert marker["status"] == "pending_confirmation"
    assert marker["is_active"] is True


class CreateOnlyHistory(InMemoryHistoryStore):
    async def append(self, entry):
        if entry.action != "created":
            raise StoreError("history down")
        return await super().append(entry)


def test_history_failure_returns_502_with_applied_flag():
    app = create_app()
    services = app.state.services
    services.manager = MarkerLifecycleManager(services.store, CreateOnlyHistory())
    client = TestClient(app)

    marker = _create(client, source="smartscribe", confidence_score=0.9)
    response = client.post(f"/v1/markers/{marker['id']}/confirm")
    assert response.status_code == 502
    body = response.json()
    assert body["error_code"] == "MK_HISTORY_001"
    assert body["marker_id"] == marker["id"]
    assert body["applied"] is True
    assert client.get("/v1/patients/P1/markers").json()["pending_count"] == 0
