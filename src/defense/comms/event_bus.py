"""EventBus — thread-safe fan-out of engine events.

The SimulationEngine publishes wave transitions, eliminations, hits and
game-over notices here.  Each subscriber gets its own bounded queue and
may restrict itself to a set of event types; ``app.routers.ws`` bridges a
subscription onto WebSocket clients.
"""

from __future__ import annotations

import queue
import threading
from typing import Iterable

# Events a full queue must never lose to a backlog of chatter
CRITICAL_EVENTS = frozenset({"wave_start", "game_over", "game_reset"})


class EventBus:
    """Pub/sub with per-subscriber event-type filters."""

    def __init__(self, maxsize: int = 100) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[queue.Queue, frozenset[str] | None] = {}
        self._maxsize = maxsize

    def subscribe(self, event_types: Iterable[str] | None = None) -> queue.Queue:
        """Return a queue receiving every event, or only ``event_types``."""
        q: queue.Queue = queue.Queue(maxsize=self._maxsize)
        wanted = frozenset(event_types) if event_types is not None else None
        with self._lock:
            self._subscribers[q] = wanted
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers.pop(q, None)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            targets = [
                q for q, wanted in self._subscribers.items()
                if wanted is None or event_type in wanted
            ]
        for q in targets:
            self._deliver(q, msg)

    @staticmethod
    def _deliver(q: queue.Queue, msg: dict) -> None:
        try:
            q.put_nowait(msg)
            return
        except queue.Full:
            pass
        if msg["type"] not in CRITICAL_EVENTS:
            return  # slow consumer: drop the newest chatter
        try:
            q.get_nowait()
        except queue.Empty:
            pass
        try:
            q.put_nowait(msg)
        except queue.Full:
            pass
