"""Axis-aligned rectangles and aiming helpers."""

from __future__ import annotations

import math
from typing import NamedTuple


class Rect(NamedTuple):
    """Axis-aligned bounding box, top-left anchored."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


def rects_overlap(a: Rect, b: Rect) -> bool:
    """Closed-interval overlap on both axes: touching edges count as a hit."""
    return (
        a.x <= b.right
        and a.right >= b.x
        and a.y <= b.bottom
        and a.bottom >= b.y
    )


def aim(origin: tuple[float, float], target: tuple[float, float],
        speed: float) -> tuple[float, float]:
    """Velocity of magnitude *speed* pointing from *origin* at *target*.

    A target sitting exactly on the origin yields a straight leftward shot,
    the direction adversaries travel.
    """
    dx = target[0] - origin[0]
    dy = target[1] - origin[1]
    dist = math.hypot(dx, dy)
    if dist == 0:
        return (-speed, 0.0)
    return (dx / dist * speed, dy / dist * speed)


def rotate(vx: float, vy: float, angle: float) -> tuple[float, float]:
    """Rotate a velocity vector by *angle* radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    return (vx * c - vy * s, vx * s + vy * c)
