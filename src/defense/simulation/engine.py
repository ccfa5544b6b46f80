"""SimulationEngine — owns every live entity and advances the world.

Architecture
------------
The engine is a passive state machine with three phases:

  playing -> paused -> playing ...
  playing -> game_over (terminal; only reset() returns to playing)

It holds no timer or thread of its own.  Each call to ``advance(now)``
moves the world forward by one tick using the caller's millisecond
timestamp (or the wall clock when omitted), so the whole simulation is a
function of state + time and can be driven deterministically in tests.
``GameLoop`` in ``loop.py`` is the production driver.

Per-tick order:
  1. wave clock:     wave expired? transition (or victory) and stop here
  2. spawn timer:    one random adversary per spawn interval
  3. adversaries:    move, shoot at the defender, melee contact
  4. projectiles:    integrate, cull outside the play area + margin
  5. pruning:        adversaries that walked off the left edge
  6. defender fire:  first matching adversary takes the hit
  7. adversary fire: hits on the defender, defeat at zero health
  8. health mirror:  GameState.health refreshed from the defender

Collections are never spliced while being scanned: every pass builds the
next generation of a list from a snapshot of the current one.

Events published on the EventBus:
  - ``wave_start``, ``game_over``, ``game_reset``
  - ``game_paused``, ``game_resumed``
  - ``adversary_spawned``, ``adversary_eliminated``, ``defender_hit``
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Callable

from loguru import logger

from defense.comms.event_bus import EventBus

from .adversary import Adversary
from .collision import (
    adversary_touches_defender,
    projectile_hits_adversary,
    projectile_hits_defender,
)
from .entities import Defender, Projectile
from .factory import AdversaryFactory
from .game_state import WAVE_DURATIONS, GameOutcome, GameState

# Spawn pacing (ms)
INITIAL_SPAWN_INTERVAL = 2000.0
MIN_SPAWN_INTERVAL = 800.0
SPAWN_INTERVAL_STEP = 200.0

# Contact damage dealt by a melee-tier adversary before it is removed
MELEE_DAMAGE = 5.0

# Projectiles survive this far outside the play area before culling
PROJECTILE_MARGIN = 50.0

POINTS_PER_WAVE_KILL = 10


def spawn_interval_for_wave(wave: int) -> float:
    """Spawn interval applied after each spawn during *wave*."""
    return max(MIN_SPAWN_INTERVAL, INITIAL_SPAWN_INTERVAL - (wave - 1) * SPAWN_INTERVAL_STEP)


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


class SimulationEngine:
    """Wave-survival simulation for one defender in a ``width`` x ``height`` area."""

    def __init__(
        self,
        width: float,
        height: float,
        factory: AdversaryFactory | None = None,
        event_bus: EventBus | None = None,
        wave_durations: dict[int, float] | None = None,
        clock: Callable[[], float] = _wall_clock_ms,
        now: float | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self._factory = factory if factory is not None else AdversaryFactory(width, height)
        self._event_bus = event_bus if event_bus is not None else EventBus()
        self._wave_durations = dict(wave_durations or WAVE_DURATIONS)
        self._final_wave = max(self._wave_durations)
        self._clock = clock

        self._base: Defender
        self._enemies: list[Adversary] = []
        self._bullets: list[Projectile] = []
        self._state: GameState
        self._last_spawn_at = 0.0
        self._spawn_interval = INITIAL_SPAWN_INTERVAL
        self._paused_at: float | None = None
        self._ended_at: float | None = None
        self._tick_now = 0.0
        self._initialise(self._now(now), spawn_now=True)

    # -- Read access for renderers ---------------------------------------------

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def factory(self) -> AdversaryFactory:
        return self._factory

    @property
    def base(self) -> Defender:
        return self._base

    @property
    def enemies(self) -> tuple[Adversary, ...]:
        return tuple(self._enemies)

    @property
    def bullets(self) -> tuple[Projectile, ...]:
        return tuple(self._bullets)

    @property
    def game_state(self) -> GameState:
        """A copy of the current GameState."""
        return replace(self._state)

    @property
    def spawn_interval(self) -> float:
        return self._spawn_interval

    @property
    def last_spawn_at(self) -> float:
        return self._last_spawn_at

    def snapshot(self, now: float | None = None) -> dict:
        """JSON-serialisable frame for renderers and API clients."""
        state = self._state.to_dict()
        state["time_remaining"] = self.time_remaining(now)
        return {
            "width": self.width,
            "height": self.height,
            "state": state,
            "base": self._base.to_dict(),
            "enemies": [e.to_dict() for e in self._enemies],
            "bullets": [b.to_dict() for b in self._bullets],
        }

    def time_remaining(self, now: float | None = None) -> float:
        """Milliseconds left on the wave clock.

        Frozen while paused and once the game is over.
        """
        if self._state.game_over and self._ended_at is not None:
            now = self._ended_at
        elif self._state.paused and self._paused_at is not None:
            now = self._paused_at
        else:
            now = self._now(now)
        return self._state.time_remaining(now)

    # -- Actions -------------------------------------------------------------

    def fire(self) -> Projectile:
        """Launch a defender projectile from the defender's centre.

        Not rate limited here: fire cadence is the input source's policy.
        """
        shot = Projectile.defender_shot(self._base.center())
        self._bullets.append(shot)
        return shot

    def add_adversary(self, adversary: Adversary) -> None:
        """Place an adversary directly (scripted scenarios, tests)."""
        self._enemies.append(adversary)

    def add_projectile(self, projectile: Projectile) -> None:
        self._bullets.append(projectile)

    def move_up(self) -> None:
        self._base.move_up()

    def move_down(self) -> None:
        self._base.move_down(self.height)

    def toggle_pause(self, now: float | None = None) -> bool:
        """Flip the paused flag and return it.  Ignored after game over.

        Time spent paused does not count toward the wave clock, the spawn
        timer or adversary shot timers.
        """
        if self._state.game_over:
            return self._state.paused
        now = self._now(now)
        if not self._state.paused:
            self._state.paused = True
            self._paused_at = now
            self._event_bus.publish("game_paused", {"wave": self._state.wave})
            return True

        shift = now - self._paused_at if self._paused_at is not None else 0.0
        self._state.wave_started_at += shift
        self._last_spawn_at += shift
        for adversary in self._enemies:
            adversary.last_shot_at += shift
        self._state.paused = False
        self._paused_at = None
        self._event_bus.publish("game_resumed", {"wave": self._state.wave})
        return False

    def reset(self, now: float | None = None) -> None:
        """Back to wave 1 with a fresh defender and empty collections."""
        self._initialise(self._now(now))
        logger.info("Game reset")
        self._event_bus.publish("game_reset", self._state.to_dict())

    # -- Tick ------------------------------------------------------------------

    def advance(self, now: float | None = None) -> None:
        """Advance the world by one tick.  No-op while paused or game over."""
        if self._state.paused or self._state.game_over:
            return
        now = self._now(now)
        self._tick_now = now

        if now - self._state.wave_started_at >= self._state.wave_duration:
            self._end_wave(now)
            return

        self._spawn(now)
        self._update_adversaries(now)
        for bullet in self._bullets:
            bullet.advance()
        self._bullets = [
            b for b in self._bullets
            if b.within(self.width, self.height, PROJECTILE_MARGIN)
        ]
        self._enemies = [e for e in self._enemies if not e.is_off_screen()]
        self._resolve_defender_fire()
        self._resolve_adversary_fire()
        self._state.health = self._base.health

    # -- Internals -------------------------------------------------------------

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now

    def _initialise(self, now: float, spawn_now: bool = False) -> None:
        self._base = Defender.for_play_area(self.width, self.height)
        self._enemies = []
        self._bullets = []
        self._state = GameState(
            health=self._base.health,
            max_health=self._base.max_health,
            wave_started_at=now,
            wave_duration=self._wave_durations[1],
        )
        # A new engine spawns on its first tick; a reset waits one interval
        self._last_spawn_at = now - INITIAL_SPAWN_INTERVAL if spawn_now else now
        self._spawn_interval = INITIAL_SPAWN_INTERVAL
        self._paused_at = None
        self._ended_at = None

    def _end_wave(self, now: float) -> None:
        state = self._state
        if state.wave >= self._final_wave:
            self._finish(GameOutcome.VICTORY)
            return

        state.wave += 1
        self._enemies = []
        self._bullets = []
        state.wave_started_at = now
        state.wave_duration = self._wave_durations[state.wave]
        self._last_spawn_at = now
        logger.info(f"Wave {state.wave} started (score={state.score})")
        self._event_bus.publish("wave_start", {
            "wave": state.wave,
            "duration": state.wave_duration,
            "archetypes": list(self._factory.archetypes_for_wave(state.wave)),
        })

    def _finish(self, outcome: GameOutcome) -> None:
        state = self._state
        state.game_over = True
        state.outcome = outcome
        self._ended_at = self._tick_now
        state.health = self._base.health
        logger.info(f"Game over: {outcome.value} at wave {state.wave}, score {state.score}")
        self._event_bus.publish("game_over", {
            "result": outcome.value,
            "final_score": state.score,
            "wave": state.wave,
        })

    def _spawn(self, now: float) -> None:
        if now - self._last_spawn_at < self._spawn_interval:
            return
        wave = self._state.wave
        adversary = self._factory.create_random(wave, now)
        if adversary is not None:
            self._enemies.append(adversary)
            logger.debug(f"Spawned {adversary.tag} at y={adversary.y:.0f}")
            self._event_bus.publish("adversary_spawned", adversary.to_dict())
        self._last_spawn_at = now
        self._spawn_interval = spawn_interval_for_wave(wave)

    def _update_adversaries(self, now: float) -> None:
        target = self._base.center()
        survivors: list[Adversary] = []
        shots: list[Projectile] = []
        for adversary in self._enemies:
            adversary.update()
            shots.extend(adversary.volley(target, now))
            if not adversary.config.can_shoot and adversary_touches_defender(adversary, self._base):
                # Melee strike: fixed damage, attacker is spent
                self._damage_defender(MELEE_DAMAGE, source=adversary.tag)
                continue
            survivors.append(adversary)
        self._enemies = survivors
        self._bullets = self._bullets + shots

    def _resolve_defender_fire(self) -> None:
        alive = list(self._enemies)
        remaining: list[Projectile] = []
        for bullet in self._bullets:
            if not bullet.from_defender:
                remaining.append(bullet)
                continue
            hit = next((e for e in alive if projectile_hits_adversary(bullet, e)), None)
            if hit is None:
                remaining.append(bullet)
                continue
            hit.take_damage(bullet.damage)
            if not hit.is_alive():
                alive = [e for e in alive if e is not hit]
                points = POINTS_PER_WAVE_KILL * self._state.wave
                self._state.score += points
                logger.debug(f"Eliminated {hit.tag} (+{points})")
                self._event_bus.publish("adversary_eliminated", {
                    "tag": hit.tag,
                    "points": points,
                    "score": self._state.score,
                })
        self._bullets = remaining
        self._enemies = alive

    def _resolve_adversary_fire(self) -> None:
        remaining: list[Projectile] = []
        for bullet in self._bullets:
            if bullet.from_defender or not projectile_hits_defender(bullet, self._base):
                remaining.append(bullet)
                continue
            self._damage_defender(bullet.damage, source="projectile")
        self._bullets = remaining

    def _damage_defender(self, amount: float, source: str) -> None:
        self._base.take_damage(amount)
        self._state.health = self._base.health
        self._event_bus.publish("defender_hit", {
            "source": source,
            "damage": amount,
            "health": self._base.health,
        })
        if not self._base.is_alive() and not self._state.game_over:
            self._finish(GameOutcome.DEFEAT)
