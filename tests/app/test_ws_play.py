"""Unit tests for the /ws/play channel and the EventBus bridge."""
from __future__ import annotations

import asyncio
import json
import time
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.routers.ws import ConnectionManager, manager, router, start_event_bridge
from defense.comms.event_bus import EventBus


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _event_loop():
    """Provide a fresh event loop for each test."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


def _run(coro):
    return asyncio.get_event_loop().run_until_complete(coro)


class TestConnectionManager:
    def test_connect_and_disconnect(self):
        mgr = ConnectionManager()
        ws = AsyncMock()
        _run(mgr.connect(ws))
        assert ws in mgr.active_connections
        ws.accept.assert_awaited_once()
        mgr.disconnect(ws)
        mgr.disconnect(ws)
        assert ws not in mgr.active_connections

    def test_event_drops_failed_connections(self):
        mgr = ConnectionManager()
        good, bad = AsyncMock(), AsyncMock()
        bad.send_text.side_effect = RuntimeError("closed")
        _run(mgr.connect(good))
        _run(mgr.connect(bad))
        _run(mgr.broadcast_event({"type": "wave_start"}))
        sent = json.loads(good.send_text.await_args.args[0])
        assert sent["data"] == {"type": "wave_start"}
        assert bad not in mgr.active_connections

    def test_event_filter(self):
        mgr = ConnectionManager()
        picky, everything = AsyncMock(), AsyncMock()
        _run(mgr.connect(picky))
        _run(mgr.connect(everything))
        mgr.set_filter(picky, ["game_over"])
        _run(mgr.broadcast_event({"type": "adversary_spawned"}))
        picky.send_text.assert_not_awaited()
        everything.send_text.assert_awaited_once()
        _run(mgr.broadcast_event({"type": "game_over"}))
        picky.send_text.assert_awaited_once()


class TestPlayChannel:
    @pytest.fixture
    def app(self, make_app):
        return make_app(router)

    def test_connected_greeting(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            assert ws.receive_json()["type"] == "connected"

    def test_ping(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_json({"type": "ping"})
            assert ws.receive_json()["type"] == "pong"

    def test_frame(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_json({"type": "frame"})
            msg = ws.receive_json()
            assert msg["type"] == "frame"
            assert msg["data"]["state"]["wave"] == 1
            assert msg["data"]["base"]["x"] == 50

    def test_input(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_json({"type": "input", "action": "ArrowDown"})
            assert ws.receive_json() == {
                "type": "input_ack", "action": "down", "applied": True,
            }
        assert app.state.game_loop.engine.base.y == 280

    def test_unknown_action(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_json({"type": "input", "action": "teleport"})
            msg = ws.receive_json()
            assert msg["type"] == "error"
            assert "teleport" in msg["message"]

    def test_invalid_json(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_text("{oops")
            assert ws.receive_json() == {"type": "error", "message": "Invalid JSON"}

    @pytest.mark.parametrize("payload", ["[1, 2]", "\"x\"", "42", "null"])
    def test_non_object_json(self, app, payload):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_text(payload)
            assert ws.receive_json() == {
                "type": "error", "message": "Expected a JSON object",
            }
            ws.send_json({"type": "ping"})
            assert ws.receive_json()["type"] == "pong"
        assert not manager.active_connections

    def test_disconnect_releases_connection(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            assert len(manager.active_connections) == 1
        assert not manager.active_connections

    def test_subscribe(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_json({"type": "subscribe", "events": ["game_over"]})
            assert ws.receive_json() == {"type": "subscribed", "events": ["game_over"]}
            ws.send_json({"type": "subscribe", "events": "game_over"})
            assert ws.receive_json()["type"] == "error"

    def test_unknown_type(self, app):
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_json({"type": "dance"})
            assert ws.receive_json()["type"] == "error"

    def test_no_engine(self):
        app = FastAPI()
        app.include_router(router)
        with TestClient(app).websocket_connect("/ws/play") as ws:
            ws.receive_json()
            ws.send_json({"type": "frame"})
            assert ws.receive_json() == {
                "type": "error", "message": "Game engine not available",
            }


class TestEventBridge:
    def test_events_reach_clients(self, _event_loop):
        bus = EventBus()
        mgr = ConnectionManager()
        ws = AsyncMock()
        _run(mgr.connect(ws))

        stop = start_event_bridge(bus, _event_loop, connections=mgr)
        try:
            bus.publish("wave_start", {"wave": 2})
            deadline = time.monotonic() + 2.0
            while not ws.send_text.await_count and time.monotonic() < deadline:
                _run(asyncio.sleep(0.02))
        finally:
            stop.set()

        sent = json.loads(ws.send_text.await_args.args[0])
        assert sent["type"] == "event"
        assert sent["data"] == {"type": "wave_start", "data": {"wave": 2}}
        assert "timestamp" in sent

    def test_stop_unsubscribes(self, _event_loop):
        bus = EventBus()
        stop = start_event_bridge(bus, _event_loop, connections=ConnectionManager())
        assert bus.subscriber_count == 1
        stop.set()
        deadline = time.monotonic() + 2.0
        while bus.subscriber_count and time.monotonic() < deadline:
            time.sleep(0.05)
        assert bus.subscriber_count == 0
