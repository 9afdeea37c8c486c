import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock, patch
from omegaconf import OmegaConf

from src.common.config.manager import ConfigManager
from src.signals.application.builder import SignalApplicationBuilder
from src.signals.application.recorder_service import RecorderService
from src.signals.application.registry import IntersectionRegistry
from src.signals.infrastructure.broadcast.phase_broadcaster import PhaseBroadcaster
from src.signals.infrastructure.geolocation import LocationResolver
from src.signals.presentation.api.routes import intersections, location, recorder

@pytest.fixture
def registry(memory_store, counting_ids):
    return IntersectionRegistry(memory_store, id_factory=counting_ids)

@pytest.fixture
def mock_manager():
    manager = MagicMock()
    manager.sync = AsyncMock()
    manager.get_state.return_value = None
    manager.window_minutes = 30
    return manager

@pytest.fixture
def intersections_client(registry, mock_manager):
    with patch('src.signals.presentation.api.routes.intersections.get_registry', return_value=registry), \
         patch('src.signals.presentation.api.routes.intersections.get_manager', return_value=mock_manager):
        yield TestClient(intersections.app)

def test_create_intersection(intersections_client, mock_manager):
    payload = {
        "name": "Main St & 1st Ave",
        "scheduleTime": "08:00:00",
        "durations": {"green": 20, "yellow": "", "red": "-5"}
    }
    response = intersections_client.post("/intersections", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "created"
    assert body["intersection"]["id"] == 1
    assert body["intersection"]["durations"] == {"green": 20, "yellow": 3, "red": 1}
    assert body["intersection"]["window"] == "07:30:00~08:30:00"
    assert body["intersection"]["state"] == {"phase": "standby", "light": None, "time_left": 0}
    mock_manager.sync.assert_awaited_once()

def test_blank_name_is_ignored(intersections_client, registry, mock_manager):
    response = intersections_client.post("/intersections", json={"name": "   ", "scheduleTime": "08:00:00"})
    assert response.status_code == 200
    assert response.json() == {"status": "ignored"}
    assert len(registry) == 0
    mock_manager.sync.assert_not_awaited()

def test_list_keeps_creation_order(intersections_client, registry):
    registry.create("A", "08:00:00")
    registry.create("B", "")
    response = intersections_client.get("/intersections")
    assert response.status_code == 200
    body = response.json()
    assert [item["name"] for item in body] == ["A", "B"]
    assert body[1]["window"] == "--:--:-- ~ --:--:--"

def test_out_of_range_schedule_does_not_break_listing(intersections_client, registry):
    registry.create("Good", "08:00:00")
    response = intersections_client.post("/intersections", json={"name": "Bad", "scheduleTime": "99999999:00:00"})
    assert response.status_code == 200
    assert response.json()["intersection"]["window"] == "--:--:-- ~ --:--:--"

    listing = intersections_client.get("/intersections")
    assert listing.status_code == 200
    assert [item["name"] for item in listing.json()] == ["Good", "Bad"]
    assert listing.json()[0]["window"] == "07:30:00~08:30:00"

def test_listed_window_uses_configured_width(intersections_client, registry, mock_manager):
    mock_manager.window_minutes = 10
    registry.create("A", "08:00:00")
    response = intersections_client.get("/intersections")
    assert response.json()[0]["window"] == "07:50:00~08:10:00"

def test_update_intersection(intersections_client, registry):
    record = registry.create("A", "08:00:00", {"green": 5, "yellow": 2, "red": 5})
    payload = {"name": "A2", "scheduleTime": "09:15:00", "durations": {"green": "0", "yellow": 2.7, "red": "12"}}
    response = intersections_client.put(f"/intersections/{record.id}", json=payload)
    assert response.status_code == 200
    updated = registry.get(record.id)
    assert updated.name == "A2"
    assert updated.schedule_time == "09:15:00"
    assert updated.durations.to_dict() == {"green": 15, "yellow": 2, "red": 12}

def test_update_without_durations_keeps_them(intersections_client, registry):
    record = registry.create("A", "08:00:00", {"green": 5, "yellow": 2, "red": 5})
    response = intersections_client.put(f"/intersections/{record.id}", json={"name": "A", "scheduleTime": ""})
    assert response.status_code == 200
    assert registry.get(record.id).durations.to_dict() == {"green": 5, "yellow": 2, "red": 5}
    assert registry.get(record.id).schedule_time == ""

def test_update_unknown(intersections_client):
    response = intersections_client.put("/intersections/42", json={"name": "X"})
    assert response.status_code == 404

def test_delete_intersection(intersections_client, registry, mock_manager):
    record = registry.create("A", "08:00:00")
    response = intersections_client.delete(f"/intersections/{record.id}")
    assert response.status_code == 200
    assert response.json() == {"status": "deleted", "intersection_id": record.id}
    assert len(registry) == 0
    mock_manager.sync.assert_awaited_once_with(())

    assert intersections_client.delete(f"/intersections/{record.id}").status_code == 404

def test_get_state(intersections_client, registry, mock_manager):
    record = registry.create("A", "08:00:00")
    mock_manager.get_state.return_value = {"phase": "active", "light": "green", "time_left": 12}
    response = intersections_client.get(f"/intersections/{record.id}/state")
    assert response.status_code == 200
    assert response.json()["light"] == "green"
    assert intersections_client.get("/intersections/99/state").status_code == 404

def test_uninitialized_registry():
    with patch('src.signals.presentation.api.routes.intersections._registry', None):
        response = TestClient(intersections.app).get("/intersections")
    assert response.status_code == 500

def test_recorder_routes(fake_clock):
    service = RecorderService(PhaseBroadcaster(), refresh_seconds=0.01, clock=fake_clock)
    with patch('src.signals.presentation.api.routes.recorder.get_recorder_service', return_value=service):
        with TestClient(recorder.app) as client:
            session = client.post("/recorder/sessions", json={"snap_schedule": True}).json()
            session_id = session["session_id"]
            assert session["prompt"] == "Start (green)"

            started = client.post(f"/recorder/sessions/{session_id}/advance").json()
            assert started["light"] == "green"
            assert started["schedule_time"] is not None

            for seconds in (2.3, 1.1):
                fake_clock.advance(seconds)
                client.post(f"/recorder/sessions/{session_id}/advance")
            assert client.get(f"/recorder/sessions/{session_id}").json()["partial"] == {"green": 2, "yellow": 1}

            fake_clock.advance(4.9)
            done = client.post(f"/recorder/sessions/{session_id}/advance").json()
            assert done["result"] == {"green": 2, "yellow": 1, "red": 5}

            assert client.get(f"/recorder/sessions/{session_id}").status_code == 404
            assert client.post(f"/recorder/sessions/{session_id}/advance").status_code == 404

def test_recorder_cancel(fake_clock):
    service = RecorderService(PhaseBroadcaster(), refresh_seconds=0.01, clock=fake_clock)
    with patch('src.signals.presentation.api.routes.recorder.get_recorder_service', return_value=service):
        with TestClient(recorder.app) as client:
            session_id = client.post("/recorder/sessions").json()["session_id"]
            client.post(f"/recorder/sessions/{session_id}/advance")
            response = client.delete(f"/recorder/sessions/{session_id}")
            assert response.json() == {"status": "cancelled", "session_id": session_id}
            assert client.delete(f"/recorder/sessions/{session_id}").status_code == 404

class StubGeocoder:
    async def reverse(self, coordinates):
        return {"address": {"city": "Taipei", "road": "Xinyi Rd"}}

@pytest.mark.parametrize("payload, outcome", [
    ({"latitude": 25.03, "longitude": 121.56}, {"kind": "success", "label": "Taipei Xinyi Rd"}),
    ({"error_code": 1}, {"kind": "failure", "reason": "Permission denied: allow this device to share its location"}),
    ({}, {"kind": "failure", "reason": "Geolocation is not supported on this device"}),
])
def test_resolve_location(payload, outcome):
    resolver = LocationResolver(StubGeocoder())
    with patch('src.signals.presentation.api.routes.location.get_resolver', return_value=resolver):
        response = TestClient(location.app).post("/location/resolve", json=payload)
    assert response.status_code == 200
    assert response.json()["outcome"] == outcome

def test_location_out_of_range():
    response = TestClient(location.app).post("/location/resolve", json={"latitude": 91, "longitude": 0})
    assert response.status_code == 422

def test_configured_app_lifecycle():
    from src.signals.presentation.api import app, configure

    cfg = ConfigManager().merge(OmegaConf.create({"persistence": {"type": "memory"}}))
    builder = SignalApplicationBuilder(cfg).build_all()
    configure(builder)

    with TestClient(app) as client:
        created = client.post("/intersections", json={"name": "Main St", "scheduleTime": "08:00:00"}).json()
        intersection_id = created["intersection"]["id"]
        assert intersection_id in builder.scheduler_manager.schedulers
        assert created["intersection"]["durations"] == {"green": 15, "yellow": 3, "red": 15}

        listing = client.get("/intersections").json()
        assert [item["id"] for item in listing] == [intersection_id]

        assert client.delete(f"/intersections/{intersection_id}").status_code == 200
        assert builder.scheduler_manager.schedulers == {}

    assert builder.store.saves == 2
