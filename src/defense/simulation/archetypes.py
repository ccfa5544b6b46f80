"""Adversary archetype table — per-wave adversary configurations.

Eight archetypes across three wave tiers:

  wave 1  starkent, scroll, zksyn, taiko   melee only, 30 hp, fast
  wave 2  linea, op                        shoot every 2.0s, 50 hp
  wave 3  arb, polygon                     shoot every 1.5s, 100 hp, slow

The table is plain data handed to ``AdversaryFactory`` at construction.
``DEFAULT_ARCHETYPES`` is the stock table; ``load_archetype_table`` reads
an alternative from JSON using the same shape ``to_dict`` produces:

    {"waves": {"1": [{"tag": "starkent", "health": 30, ...}, ...], ...}}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

DEFAULT_BULLET_SPEED = 4.0


class ArchetypeTableError(ValueError):
    """Raised when an archetype table document is malformed."""


@dataclass(frozen=True)
class ArchetypeConfig:
    """Immutable definition of one adversary archetype."""

    tag: str
    wave: int
    health: float
    speed: float
    sprite: str
    width: float
    height: float
    can_shoot: bool
    shoot_interval: float  # ms
    bullets_per_shot: int = 1
    bullet_speed: float = DEFAULT_BULLET_SPEED

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag,
            "health": self.health,
            "speed": self.speed,
            "sprite": self.sprite,
            "width": self.width,
            "height": self.height,
            "can_shoot": self.can_shoot,
            "shoot_interval": self.shoot_interval,
            "bullets_per_shot": self.bullets_per_shot,
            "bullet_speed": self.bullet_speed,
        }

    @classmethod
    def from_dict(cls, wave: int, data: dict[str, Any]) -> ArchetypeConfig:
        size = data.get("size")
        return cls(
            tag=data["tag"],
            wave=wave,
            health=float(data["health"]),
            speed=float(data["speed"]),
            sprite=data.get("sprite", ""),
            width=float(data.get("width", size)),
            height=float(data.get("height", size)),
            can_shoot=bool(data.get("can_shoot", False)),
            shoot_interval=float(data.get("shoot_interval", 0)),
            bullets_per_shot=int(data.get("bullets_per_shot", 1)),
            bullet_speed=float(data.get("bullet_speed", DEFAULT_BULLET_SPEED)),
        )


@dataclass
class ArchetypeTable:
    """Wave index -> ordered mapping of archetype tag -> config."""

    waves: dict[int, dict[str, ArchetypeConfig]] = field(default_factory=dict)

    def tags(self, wave: int) -> tuple[str, ...]:
        """Archetype tags for *wave* in table order; empty if unknown."""
        return tuple(self.waves.get(wave, {}))

    def get(self, tag: str, wave: int) -> ArchetypeConfig | None:
        return self.waves.get(wave, {}).get(tag)

    @property
    def wave_numbers(self) -> tuple[int, ...]:
        return tuple(sorted(self.waves))

    def to_dict(self) -> dict[str, Any]:
        return {
            "waves": {
                str(wave): [cfg.to_dict() for cfg in configs.values()]
                for wave, configs in sorted(self.waves.items())
            }
        }

    @classmethod
    def from_configs(cls, configs: list[ArchetypeConfig]) -> ArchetypeTable:
        waves: dict[int, dict[str, ArchetypeConfig]] = {}
        for cfg in configs:
            waves.setdefault(cfg.wave, {})[cfg.tag] = cfg
        return cls(waves=waves)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArchetypeTable:
        try:
            raw_waves = data["waves"]
            configs = [
                ArchetypeConfig.from_dict(int(wave), entry)
                for wave, entries in raw_waves.items()
                for entry in entries
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ArchetypeTableError(f"Malformed archetype table: {e!r}") from e

        for cfg in configs:
            if cfg.width <= 0 or cfg.height <= 0:
                raise ArchetypeTableError(f"{cfg.tag}: size must be positive")
            if cfg.can_shoot and cfg.shoot_interval <= 0:
                raise ArchetypeTableError(
                    f"{cfg.tag}: shooting archetypes need a positive shoot_interval"
                )
            if cfg.bullets_per_shot < 1:
                raise ArchetypeTableError(f"{cfg.tag}: bullets_per_shot must be >= 1")
        return cls.from_configs(configs)


def _melee(tag: str, sprite: str) -> ArchetypeConfig:
    return ArchetypeConfig(
        tag=tag, wave=1, health=30, speed=2, sprite=sprite,
        width=50, height=50, can_shoot=False, shoot_interval=0,
    )


def _gunner(tag: str, sprite: str) -> ArchetypeConfig:
    return ArchetypeConfig(
        tag=tag, wave=2, health=50, speed=3, sprite=sprite,
        width=55, height=55, can_shoot=True, shoot_interval=2000,
    )


def _heavy(tag: str, sprite: str) -> ArchetypeConfig:
    return ArchetypeConfig(
        tag=tag, wave=3, health=100, speed=1.5, sprite=sprite,
        width=70, height=70, can_shoot=True, shoot_interval=1500,
    )


DEFAULT_ARCHETYPES = ArchetypeTable.from_configs([
    _melee("starkent", "/images/starkent-the-enemy.png"),
    _melee("scroll", "/images/scroll-the-enemy.jpg"),
    _melee("zksyn", "/images/zksyn-the-enemy.jpg"),
    _melee("taiko", "/images/taiko-the-enemy.png"),
    _gunner("linea", "/images/linea-the-enemy.png"),
    _gunner("op", "/images/op-the-enemy.jpg"),
    _heavy("arb", "/images/arb-the-enemy.jpg"),
    _heavy("polygon", "/images/polygon-the-enemy.jpg"),
])


def load_archetype_table(path: str) -> ArchetypeTable:
    """Load an ArchetypeTable from a JSON file.

    Raises:
        FileNotFoundError: If path does not exist.
        json.JSONDecodeError: If file is not valid JSON.
        ArchetypeTableError: If required fields are missing or invalid.
    """
    with open(path) as f:
        data = json.load(f)
    return ArchetypeTable.from_dict(data)
