"""Adversary — an AI-controlled entity instantiated from an archetype.

Adversaries enter at the right edge of the play area and travel left along
the x axis at their archetype speed.  Shooting archetypes fire at a fixed
interval, aiming at whatever point the engine passes in (the defender's
centre).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .archetypes import ArchetypeConfig
from .entities import ADVERSARY_SHOT_DAMAGE, ADVERSARY_SHOT_SIZE, Projectile
from .geometry import Rect, aim, rotate

# Angular gap between bullets of a multi-bullet volley (radians)
VOLLEY_SPREAD = 0.2


@dataclass
class Adversary:
    """A live adversary. ``config`` is shared and never mutated."""

    config: ArchetypeConfig
    x: float
    y: float
    health: float = field(init=False)
    vx: float = field(init=False)
    vy: float = 0.0
    last_shot_at: float = 0.0

    def __post_init__(self) -> None:
        self.health = self.config.health
        self.vx = -self.config.speed

    @property
    def tag(self) -> str:
        return self.config.tag

    @property
    def width(self) -> float:
        return self.config.width

    @property
    def height(self) -> float:
        return self.config.height

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.config.width, self.config.height)

    def center(self) -> tuple[float, float]:
        return (self.x + self.config.width / 2, self.y + self.config.height / 2)

    def update(self) -> None:
        """Advance one tick along the travel axis."""
        self.x += self.vx
        self.y += self.vy

    def can_fire(self, now: float) -> bool:
        if not self.config.can_shoot:
            return False
        return now - self.last_shot_at >= self.config.shoot_interval

    def shoot(self, target: tuple[float, float], now: float) -> Projectile | None:
        """Fire one projectile at *target* if the shot timer allows it.

        Records *now* as the last shot time when a projectile is returned.
        """
        if not self.can_fire(now):
            return None
        self.last_shot_at = now
        return self._projectile(aim(self.center(), target, self.config.bullet_speed))

    def volley(self, target: tuple[float, float], now: float) -> list[Projectile]:
        """Fire ``bullets_per_shot`` projectiles fanned around the aim line.

        Single-shot archetypes return ``[shoot(...)]``; not-ready returns [].
        """
        centre_shot = self.shoot(target, now)
        if centre_shot is None:
            return []
        count = self.config.bullets_per_shot
        if count == 1:
            return [centre_shot]
        shots = []
        base_vx, base_vy = centre_shot.vx, centre_shot.vy
        first = -VOLLEY_SPREAD * (count - 1) / 2
        for i in range(count):
            vx, vy = rotate(base_vx, base_vy, first + i * VOLLEY_SPREAD)
            shots.append(self._projectile((vx, vy)))
        return shots

    def take_damage(self, amount: float) -> None:
        self.health -= amount

    def is_alive(self) -> bool:
        return self.health > 0

    def is_off_screen(self) -> bool:
        """True once the adversary has fully crossed the left edge."""
        return self.x + self.config.width < 0

    def _projectile(self, velocity: tuple[float, float]) -> Projectile:
        cx, cy = self.center()
        return Projectile(
            x=cx,
            y=cy,
            vx=velocity[0],
            vy=velocity[1],
            width=ADVERSARY_SHOT_SIZE,
            height=ADVERSARY_SHOT_SIZE,
            from_defender=False,
            damage=ADVERSARY_SHOT_DAMAGE,
        )

    def to_dict(self) -> dict:
        return {
            "tag": self.config.tag,
            "wave": self.config.wave,
            "sprite": self.config.sprite,
            "x": self.x,
            "y": self.y,
            "width": self.config.width,
            "height": self.config.height,
            "health": self.health,
            "max_health": self.config.health,
            "can_shoot": self.config.can_shoot,
        }
