"""Defender and Projectile — the plain data records the engine mutates.

Coordinates are play-area pixels with the origin at the top-left corner;
``x``/``y`` always name an entity's top-left corner.  Velocities are in
units per tick.
"""

from __future__ import annotations

from dataclasses import dataclass

from .geometry import Rect

# Defender shot profile
DEFENDER_SHOT_SPEED = 8.0
DEFENDER_SHOT_SIZE = 10.0
DEFENDER_SHOT_DAMAGE = 20.0

# Adversary shot profile (speed comes from the archetype)
ADVERSARY_SHOT_SIZE = 8.0
ADVERSARY_SHOT_DAMAGE = 10.0


@dataclass
class Defender:
    """The Base: the only entity under the caller's direct control."""

    x: float
    y: float
    width: float = 60.0
    height: float = 60.0
    health: float = 100.0
    max_health: float = 100.0
    speed: float = 10.0

    @classmethod
    def for_play_area(cls, width: float, height: float) -> Defender:
        """Place a fresh defender near the left edge, vertically centred."""
        defender = cls(x=50.0, y=0.0)
        defender.x = min(defender.x, max(0.0, width - defender.width))
        defender.y = (height - defender.height) / 2
        return defender

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def move_up(self) -> None:
        self.y = max(0.0, self.y - self.speed)

    def move_down(self, play_height: float) -> None:
        self.y = min(play_height - self.height, self.y + self.speed)

    def take_damage(self, amount: float) -> None:
        self.health = max(0.0, self.health - amount)

    def is_alive(self) -> bool:
        return self.health > 0

    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "health": self.health,
            "max_health": self.max_health,
        }


@dataclass
class Projectile:
    """A single projectile in flight."""

    x: float
    y: float
    vx: float
    vy: float
    width: float
    height: float
    from_defender: bool
    damage: float

    @classmethod
    def defender_shot(cls, origin: tuple[float, float]) -> Projectile:
        return cls(
            x=origin[0],
            y=origin[1],
            vx=DEFENDER_SHOT_SPEED,
            vy=0.0,
            width=DEFENDER_SHOT_SIZE,
            height=DEFENDER_SHOT_SIZE,
            from_defender=True,
            damage=DEFENDER_SHOT_DAMAGE,
        )

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def advance(self) -> None:
        self.x += self.vx
        self.y += self.vy

    def within(self, width: float, height: float, margin: float) -> bool:
        """True while the projectile is inside the play area grown by *margin*."""
        return (
            -margin < self.x < width + margin
            and -margin < self.y < height + margin
        )

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "vx": self.vx,
            "vy": self.vy,
            "width": self.width,
            "height": self.height,
            "from_defender": self.from_defender,
            "damage": self.damage,
        }
