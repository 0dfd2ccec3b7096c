# tests/unit/test_ui_api.py
import pytest
from fastapi.testclient import TestClient

from apps.ui_api.main import create_app
from core.timing.clock import ManualClock
from sdk.config import AppConfig
from sdk.runtime import GameSession


@pytest.fixture()
def clock():
    return ManualClock()


@pytest.fixture()
def session(clock):
    with GameSession(config=AppConfig(), clock=clock) as s:
        yield s


@pytest.fixture()
def client(session):
    with TestClient(create_app(session, background_ticker=False)) as c:
        yield c


def test_initial_status_is_idle(client):
    res = client.get("/session/status")
    assert res.status_code == 200
    assert res.json() == {
        "isActive": False,
        "isPaused": False,
        "started": False,
        "over": False,
        "score": 0,
        "currentPiece": "",
        "displayTime": "0:00",
    }


def test_session_payload_uses_camel_case(client):
    body = client.get("/session").json()
    assert body["currentPiece"] == ""
    assert set(body["time"]) == {"start", "current", "pauseStart", "pausedDuration"}


def test_pause_scenario_over_http(client, clock):
    assert client.post("/session/reset").json()["isActive"] is True
    clock.set(5_000)
    assert client.post("/session/pause").json()["isPaused"] is True
    clock.set(8_000)
    assert client.post("/session/pause").json()["isPaused"] is False
    clock.set(10_000)
    body = client.post("/session/time").json()
    assert body["displayTime"] == "0:07"
    assert client.get("/session").json()["time"]["pausedDuration"] == 3_000


def test_score_piece_and_started_updates(client):
    client.post("/session/reset")
    assert client.post("/session/score", json={"score": 400}).json()["score"] == 400
    assert client.post("/session/piece", json={"piece": "T"}).json()["currentPiece"] == "T"
    body = client.post("/session/started", json={"started": False}).json()
    assert body["started"] is False and body["isActive"] is False


def test_game_over_returns_summary(client, clock):
    client.post("/session/reset")
    client.post("/session/score", json={"score": 90})
    clock.set(3_200)
    body = client.post("/session/over").json()
    assert body["over"] is True and body["started"] is False
    assert body["gameOver"] == {"score": 90, "duration": 3}


def test_invalid_bodies_are_rejected(client):
    assert client.post("/session/score", json={"score": -5}).status_code == 422
    assert client.post("/session/score", json={}).status_code == 422
    assert client.post("/session/started", json={"started": "maybe"}).status_code == 422


def test_websocket_streams_changes(client):
    with client.websocket_connect("/ws/session") as ws:
        assert ws.receive_json() == {"paused": False, "score": 0, "time": 0, "piece": ""}
        client.post("/session/score", json={"score": 150})
        assert ws.receive_json()["score"] == 150
        client.post("/session/piece", json={"piece": "L"})
        assert ws.receive_json()["piece"] == "L"


def test_websocket_unsubscribes_on_disconnect(client, session):
    baseline = session.store.subscriber_count
    with client.websocket_connect("/ws/session") as ws:
        ws.receive_json()
    # the server side cleans up asynchronously once the close frame arrives
    client.get("/session/status")
    for _ in range(50):
        if session.store.subscriber_count == baseline:
            break
        client.get("/session/status")
    assert session.store.subscriber_count == baseline


def test_server_module_exposes_app():
    import importlib
    server = importlib.import_module("sdk.server")
    assert isinstance(server.app.state.session, GameSession)
