"""Collision predicates — pure AABB tests between entity pairs.

Every predicate compares bounding boxes via ``rects_overlap`` so melee
range scales with adversary size rather than a fixed radius.  Nothing here
mutates its arguments.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .geometry import rects_overlap

if TYPE_CHECKING:
    from .adversary import Adversary
    from .entities import Defender, Projectile


def projectile_hits_adversary(projectile: Projectile, adversary: Adversary) -> bool:
    return rects_overlap(projectile.rect, adversary.rect)


def projectile_hits_defender(projectile: Projectile, defender: Defender) -> bool:
    return rects_overlap(projectile.rect, defender.rect)


def adversary_touches_defender(adversary: Adversary, defender: Defender) -> bool:
    """Melee range: the adversary's box overlaps the defender's."""
    return rects_overlap(adversary.rect, defender.rect)
