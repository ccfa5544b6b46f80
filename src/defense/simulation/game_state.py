"""GameState — the externally visible scoreboard and wave clock."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

FINAL_WAVE = 3

# Wave index -> duration (ms)
WAVE_DURATIONS: dict[int, float] = {
    1: 30_000.0,
    2: 60_000.0,
    3: 40_000.0,
}


class GameOutcome(str, Enum):
    """Why the game ended.  ``None`` on GameState while still playing."""

    VICTORY = "victory"  # survived the final wave's clock
    DEFEAT = "defeat"    # defender health reached zero


@dataclass
class GameState:
    score: int = 0
    wave: int = 1
    health: float = 0.0
    max_health: float = 0.0
    game_over: bool = False
    paused: bool = False
    wave_started_at: float = 0.0
    wave_duration: float = WAVE_DURATIONS[1]
    outcome: GameOutcome | None = None

    @property
    def phase(self) -> str:
        """``playing``, ``paused`` or ``game_over`` (game over wins)."""
        if self.game_over:
            return "game_over"
        if self.paused:
            return "paused"
        return "playing"

    @property
    def victory(self) -> bool:
        return self.outcome is GameOutcome.VICTORY

    def time_remaining(self, now: float) -> float:
        """Milliseconds left on the current wave clock, never negative."""
        return max(0.0, self.wave_duration - (now - self.wave_started_at))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["outcome"] = self.outcome.value if self.outcome else None
        data["phase"] = self.phase
        return data
