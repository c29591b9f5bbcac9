import asyncio
import json
import logging
from types import SimpleNamespace

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from snake_arcade import main
from snake_arcade.connection_manager import GameSession
from snake_arcade.models import GamePhase, UIEvent, UIEventKind


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "DB_PATH", str(tmp_path / "scores.db"))
    with TestClient(main.app) as c:
        yield c


@pytest.fixture
def session(scheduler, fake_time):
    return GameSession(request_frame=scheduler, now=fake_time)


def receive_until(ws, predicate, limit=200):
    for _ in range(limit):
        msg = ws.receive_json()
        if predicate(msg):
            return msg
    raise AssertionError("expected message never arrived")


def test_index_is_served(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "gameCanvas" in resp.text
    assert client.get("/static/client.js").status_code == 200


def test_websocket_session(client):
    with client.websocket_connect("/ws") as ws:
        welcome = ws.receive_json()
        assert welcome["type"] == "welcome"
        assert welcome["grid"] == [30, 20]
        assert welcome["high_score"] == 0
        assert ws.receive_json()["type"] == "frame"

        ws.send_json({"type": "start", "difficulty": "hard"})
        assert ws.receive_json()["type"] == "frame"
        stats = receive_until(ws, lambda m: m.get("event") == "stats")
        assert stats["lives"] == 3
        assert stats["speed"] == "Normal"

        ws.send_text("not json")
        ws.send_json({"type": "key", "code": "Space"})
        pause = receive_until(ws, lambda m: m.get("event") == "pause")
        assert pause["paused"] is True


def test_start_and_steer(session):
    main.handle_message(session, {"type": "start", "difficulty": "medium"})
    engine = session.engine
    assert engine.state.phase is GamePhase.RUNNING

    main.handle_message(session, {"type": "key", "code": "ArrowDown"})
    assert engine.state.pending_direction == (0, 1)
    main.handle_message(session, {"type": "button", "direction": "left"})
    assert engine.state.pending_direction == (0, 1)


def test_swipe_messages(session):
    main.handle_message(session, {"type": "start"})
    main.handle_message(session, {"type": "touch_start", "x": 50, "y": 50})
    main.handle_message(session, {"type": "touch_end", "x": 50, "y": 10})
    assert session.engine.state.pending_direction == (0, -1)


def test_bad_messages_are_ignored(session):
    main.handle_message(session, {"type": "teleport"})
    main.handle_message(session, {"type": "touch_end", "x": "left"})
    main.handle_message(session, {"type": "key", "code": 7})
    assert session.engine.state.phase is GamePhase.IDLE


def test_session_queues_frames_and_events(session):
    assert session.outbox.qsize() == 1
    main.handle_message(session, {"type": "start"})
    # one frame plus theme, power-up and stats events
    assert session.outbox.qsize() == 5


class FakeSocket:
    """Just enough of a WebSocket for driving the endpoint without a server."""

    def __init__(self, fail_send_at=None, send_error=WebSocketDisconnect(1001)):
        self.app = SimpleNamespace(state=SimpleNamespace())
        self.sent = []
        self.fail_send_at = fail_send_at
        self.send_error = send_error

    async def accept(self):
        pass

    async def send_text(self, text):
        if len(self.sent) == self.fail_send_at:
            raise self.send_error
        self.sent.append(text)

    async def receive_text(self):
        await asyncio.sleep(0.05)
        raise WebSocketDisconnect(1000)


def test_session_is_dropped_when_welcome_fails():
    ws = FakeSocket(fail_send_at=0)
    asyncio.run(main.websocket_endpoint(ws))
    assert ws.sent == []
    assert ws not in main.manager.sessions


def test_sender_error_is_collected_on_teardown(caplog):
    ws = FakeSocket(fail_send_at=1, send_error=RuntimeError("socket gone"))
    with caplog.at_level(logging.WARNING, logger="snake_arcade.main"):
        asyncio.run(main.websocket_endpoint(ws))
    assert json.loads(ws.sent[0])["type"] == "welcome"
    assert ws not in main.manager.sessions
    assert "Session sender stopped" in caplog.text
    assert "socket gone" in caplog.text


def test_full_outbox_drops_frames_but_keeps_events(scheduler, fake_time):
    session = GameSession(outbox_limit=3, request_frame=scheduler, now=fake_time)
    for _ in range(10):
        session.engine.render()
    assert session.outbox.qsize() == 3
    assert session.dropped_frames == 8

    session.engine.publish([UIEvent(UIEventKind.PAUSE, {"paused": True})])
    assert session.outbox.qsize() == 3
    queued = [json.loads(session.outbox.get_nowait()) for _ in range(3)]
    assert [m["type"] for m in queued] == ["frame", "frame", "ui"]
    assert queued[-1]["event"] == "pause"
