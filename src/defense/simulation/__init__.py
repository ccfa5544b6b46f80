"""Simulation subsystem — entities, adversary factory, collisions, engine."""
from .adversary import Adversary
from .archetypes import (
    DEFAULT_ARCHETYPES,
    ArchetypeConfig,
    ArchetypeTable,
    ArchetypeTableError,
    load_archetype_table,
)
from .collision import (
    adversary_touches_defender,
    projectile_hits_adversary,
    projectile_hits_defender,
)
from .engine import SimulationEngine, spawn_interval_for_wave
from .entities import Defender, Projectile
from .factory import AdversaryFactory
from .game_state import WAVE_DURATIONS, GameOutcome, GameState
from .geometry import Rect, rects_overlap
from .loop import GameLoop

__all__ = [
    "Adversary",
    "AdversaryFactory",
    "ArchetypeConfig",
    "ArchetypeTable",
    "ArchetypeTableError",
    "DEFAULT_ARCHETYPES",
    "Defender",
    "GameLoop",
    "GameOutcome",
    "GameState",
    "Projectile",
    "Rect",
    "SimulationEngine",
    "WAVE_DURATIONS",
    "adversary_touches_defender",
    "load_archetype_table",
    "projectile_hits_adversary",
    "projectile_hits_defender",
    "rects_overlap",
    "spawn_interval_for_wave",
]
