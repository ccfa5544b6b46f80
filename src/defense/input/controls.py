"""InputController — translates key and touch events into engine actions.

This is the input-source policy layer.  The engine accepts every action
unconditionally; the controller decides what a player is allowed to do:

  - movement and fire are ignored while paused or after game over
  - fire is rate limited (``fire_cooldown_ms``, 350 ms by default)
  - pause and reset are always forwarded (the engine ignores pause after
    game over on its own)

Keyboard bindings:  ArrowUp / ArrowDown move, ArrowRight fires,
``p`` / Escape toggles pause, ``r`` resets.  Touch controls send the action
names directly (``up``, ``down``, ``fire``, ``pause``, ``reset``).
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable

from defense.simulation.engine import SimulationEngine

DEFAULT_FIRE_COOLDOWN_MS = 350.0


class Action(str, Enum):
    MOVE_UP = "up"
    MOVE_DOWN = "down"
    FIRE = "fire"
    PAUSE = "pause"
    RESET = "reset"


KEY_BINDINGS: dict[str, Action] = {
    "ArrowUp": Action.MOVE_UP,
    "ArrowDown": Action.MOVE_DOWN,
    "ArrowRight": Action.FIRE,
    "p": Action.PAUSE,
    "P": Action.PAUSE,
    "Escape": Action.PAUSE,
    "r": Action.RESET,
    "R": Action.RESET,
}


def parse_action(name: str) -> Action | None:
    """Resolve a key name or touch action name; ``None`` if unbound."""
    if name in KEY_BINDINGS:
        return KEY_BINDINGS[name]
    try:
        return Action(name)
    except ValueError:
        return None


class InputController:
    """Applies player input to one engine."""

    def __init__(
        self,
        engine: SimulationEngine,
        fire_cooldown_ms: float = DEFAULT_FIRE_COOLDOWN_MS,
        clock: Callable[[], float] = lambda: time.time() * 1000.0,
    ) -> None:
        self.engine = engine
        self.fire_cooldown_ms = fire_cooldown_ms
        self._clock = clock
        self._last_fire_at: float | None = None

    def handle(self, action: Action, now: float | None = None) -> bool:
        """Apply *action*.  Returns True if the engine was touched."""
        now = self._clock() if now is None else now
        state = self.engine.game_state

        if action is Action.RESET:
            self.engine.reset(now)
            self._last_fire_at = None
            return True
        if action is Action.PAUSE:
            if state.game_over:
                return False
            self.engine.toggle_pause(now)
            return True

        if state.paused or state.game_over:
            return False
        if action is Action.MOVE_UP:
            self.engine.move_up()
        elif action is Action.MOVE_DOWN:
            self.engine.move_down()
        elif action is Action.FIRE:
            if not self.fire_ready(now):
                return False
            self._last_fire_at = now
            self.engine.fire()
        return True

    def handle_key(self, key: str, now: float | None = None) -> bool:
        action = parse_action(key)
        if action is None:
            return False
        return self.handle(action, now)

    def fire_ready(self, now: float) -> bool:
        if self._last_fire_at is None:
            return True
        return now - self._last_fire_at >= self.fire_cooldown_ms
