"""GameLoop — drives SimulationEngine.advance() from a daemon thread.

The engine itself is unsynchronised.  GameLoop owns the one lock that
serialises ticks with input actions: the tick thread holds it for the
duration of each ``advance()`` call, and every action caller (HTTP and
WebSocket handlers) wraps its engine calls in ``with loop.locked():``.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterator

from loguru import logger

from .engine import SimulationEngine


class GameLoop:
    """Fixed-rate ticker for a single engine."""

    def __init__(self, engine: SimulationEngine, tick_rate: float = 60.0) -> None:
        if tick_rate <= 0:
            raise ValueError(f"tick_rate must be positive, got {tick_rate}")
        self.engine = engine
        self.tick_rate = tick_rate
        self._lock = threading.RLock()
        self._running = False
        self._thread: threading.Thread | None = None
        self._ticks = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def ticks(self) -> int:
        return self._ticks

    @contextmanager
    def locked(self) -> Iterator[SimulationEngine]:
        """Hold the tick lock and yield the engine."""
        with self._lock:
            yield self.engine

    def step(self) -> None:
        """Run one tick under the lock.  Called by the thread, or by tests."""
        with self._lock:
            self.engine.advance()
            self._ticks += 1

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._tick_loop, name="game-tick", daemon=True
        )
        self._thread.start()
        logger.info(f"Game loop started at {self.tick_rate:.0f} Hz")

    def stop(self) -> None:
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        logger.info(f"Game loop stopped after {self._ticks} ticks")

    def _tick_loop(self) -> None:
        interval = 1.0 / self.tick_rate
        while self._running:
            started = time.monotonic()
            self.step()
            elapsed = time.monotonic() - started
            time.sleep(max(0.0, interval - elapsed))
