"""WebSocket play channel and engine event bridge.

``/ws/play`` is a bidirectional channel for browser clients:

  client -> server   {"type": "input", "action": "ArrowUp"}
                     {"type": "frame"}
                     {"type": "subscribe", "events": ["wave_start", "game_over"]}
                     {"type": "ping"}
  server -> client   {"type": "frame", "data": <engine snapshot>}
                     {"type": "input_ack", "action": ..., "applied": ...}
                     {"type": "event", "data": {"type": "wave_start", ...}}

A client receives every engine event until it sends ``subscribe``; an
empty list mutes events entirely.  ``start_event_bridge`` drains an
EventBus subscription on a daemon thread and schedules the fan-out on
the server's asyncio loop.
"""

from __future__ import annotations

import asyncio
import json
import queue
import threading
from datetime import datetime, timezone

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from defense.comms.event_bus import EventBus
from defense.input.controls import parse_action

router = APIRouter(prefix="/ws", tags=["websocket"])


class ConnectionManager:
    """Player sockets and the engine events each one wants."""

    def __init__(self):
        self._clients: dict[WebSocket, frozenset[str] | None] = {}

    @property
    def active_connections(self) -> set[WebSocket]:
        return set(self._clients)

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self._clients[websocket] = None
        logger.info(f"Player connected ({len(self._clients)} online)")

    def disconnect(self, websocket: WebSocket):
        if websocket in self._clients:
            del self._clients[websocket]
            logger.info(f"Player disconnected ({len(self._clients)} online)")

    def set_filter(self, websocket: WebSocket, events: list[str] | None) -> None:
        if websocket in self._clients:
            self._clients[websocket] = frozenset(events) if events is not None else None

    async def send_to(self, websocket: WebSocket, message: dict):
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.warning(f"Failed to send to player: {e}")

    async def broadcast_event(self, event: dict):
        """Send one engine event to every client whose filter admits it."""
        message = json.dumps({"type": "event", "data": event, "timestamp": _timestamp()})
        for websocket, wanted in list(self._clients.items()):
            if wanted is not None and event.get("type") not in wanted:
                continue
            try:
                await websocket.send_text(message)
            except Exception as e:
                logger.warning(f"Dropping player after failed send: {e}")
                self._clients.pop(websocket, None)


# Global connection manager
manager = ConnectionManager()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.websocket("/play")
async def websocket_play(websocket: WebSocket):
    """Player channel: input in, frames and engine events out."""
    await manager.connect(websocket)
    await manager.send_to(
        websocket,
        {"type": "connected", "timestamp": _timestamp()},
    )

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_to(
                    websocket, {"type": "error", "message": "Invalid JSON"}
                )
                continue
            if not isinstance(message, dict):
                await manager.send_to(
                    websocket, {"type": "error", "message": "Expected a JSON object"}
                )
                continue
            await handle_client_message(websocket, message)
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket)


async def handle_client_message(websocket: WebSocket, message: dict):
    """Handle one decoded client message."""
    msg_type = message.get("type")
    state = websocket.app.state
    loop = getattr(state, "game_loop", None)
    controls = getattr(state, "controls", None)

    if msg_type == "ping":
        await manager.send_to(websocket, {"type": "pong", "timestamp": _timestamp()})
        return
    if msg_type == "subscribe":
        events = message.get("events")
        if events is not None and not (
            isinstance(events, list) and all(isinstance(e, str) for e in events)
        ):
            await manager.send_to(
                websocket, {"type": "error", "message": "events must be a list of names"}
            )
            return
        manager.set_filter(websocket, events)
        await manager.send_to(websocket, {"type": "subscribed", "events": events})
        return
    if loop is None or controls is None:
        await manager.send_to(
            websocket, {"type": "error", "message": "Game engine not available"}
        )
        return

    if msg_type == "frame":
        with loop.locked() as engine:
            frame = engine.snapshot()
        await manager.send_to(websocket, {"type": "frame", "data": frame})
    elif msg_type == "input":
        action = parse_action(str(message.get("action", "")))
        if action is None:
            await manager.send_to(
                websocket,
                {"type": "error", "message": f"Unknown action: {message.get('action')}"},
            )
            return
        with loop.locked():
            applied = controls.handle(action)
        await manager.send_to(
            websocket,
            {"type": "input_ack", "action": action.value, "applied": applied},
        )
    else:
        await manager.send_to(
            websocket,
            {"type": "error", "message": f"Unknown message type: {msg_type}"},
        )


def start_event_bridge(
    event_bus: EventBus,
    loop: asyncio.AbstractEventLoop,
    connections: ConnectionManager = manager,
) -> threading.Event:
    """Forward EventBus events to WebSocket clients.

    Runs a daemon thread; set the returned Event to stop it.
    """
    stop = threading.Event()
    subscription = event_bus.subscribe()

    def _bridge() -> None:
        while not stop.is_set():
            try:
                event = subscription.get(timeout=0.5)
            except queue.Empty:
                continue
            asyncio.run_coroutine_threadsafe(connections.broadcast_event(event), loop)
        event_bus.unsubscribe(subscription)

    threading.Thread(target=_bridge, name="ws-event-bridge", daemon=True).start()
    return stop
