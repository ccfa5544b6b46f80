"""AdversaryFactory — instantiates adversaries from the archetype table."""

from __future__ import annotations

import random

from loguru import logger

from .adversary import Adversary
from .archetypes import DEFAULT_ARCHETYPES, ArchetypeConfig, ArchetypeTable


class AdversaryFactory:
    """Builds adversaries for a play area of ``width`` x ``height``.

    Spawns sit on the right edge (opposite the defender) at a uniformly
    random height.  Unknown waves and archetypes yield ``None`` rather than
    raising; the engine treats that as "nothing to spawn this tick".
    """

    def __init__(
        self,
        width: float,
        height: float,
        table: ArchetypeTable | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.table = table if table is not None else DEFAULT_ARCHETYPES
        self._rng = rng if rng is not None else random.Random()

    def archetypes_for_wave(self, wave: int) -> tuple[str, ...]:
        return self.table.tags(wave)

    def create_random(self, wave: int, now: float = 0.0) -> Adversary | None:
        """Uniformly pick one of the wave's archetypes and spawn it."""
        tags = self.archetypes_for_wave(wave)
        if not tags:
            return None
        tag = self._rng.choice(tags)
        return self._spawn(self.table.get(tag, wave), now)

    def create(self, tag: str, wave: int, now: float = 0.0) -> Adversary | None:
        """Spawn a specific archetype; ``None`` if it is not part of *wave*."""
        config = self.table.get(tag, wave)
        if config is None:
            logger.debug(f"No archetype {tag!r} in wave {wave}")
            return None
        return self._spawn(config, now)

    def _spawn(self, config: ArchetypeConfig, now: float) -> Adversary:
        max_y = max(0.0, self.height - config.height)
        adversary = Adversary(
            config=config,
            x=self.width,
            y=self._rng.uniform(0.0, max_y),
        )
        # First shot comes one full interval after entering the field
        adversary.last_shot_at = now
        return adversary
