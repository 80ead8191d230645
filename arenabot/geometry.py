"""
Geometry kernel: rectangle overlap and tile-grid raycasting.

Pure helpers with no knowledge of goals or threats. Every tile lookup goes
through Level.tile, which reads anything off the grid as EMPTY.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .defs import Tile
from .snapshot import ExplosionParams, Level, Vec2

RAYCAST_STEP = 0.6


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle spanning [x1, x2] x [y1, y2]."""
    x1: float
    y1: float
    x2: float
    y2: float

    @classmethod
    def around(cls, center: Vec2, half_w: float, half_h: float) -> Rect:
        return cls(center.x - half_w, center.y - half_h,
                   center.x + half_w, center.y + half_h)


def tiles_collide(a: Rect, b: Rect) -> bool:
    """Inclusive overlap test: touching edges count as a collision."""
    return a.x1 <= b.x2 and a.x2 >= b.x1 and a.y1 <= b.y2 and a.y2 >= b.y1


def unit_rect(position: Vec2, size: Vec2) -> Rect:
    """Body box of a unit anchored at its bottom-center."""
    half_w = size.x / 2
    return Rect(position.x - half_w, position.y, position.x + half_w, position.y + size.y)


def bullet_rect(position: Vec2, size: float) -> Rect:
    return Rect.around(position, size / 2, size / 2)


def blast_rect(center: Vec2, explosion: ExplosionParams) -> Rect:
    return Rect.around(center, explosion.radius, explosion.radius)


def raycast_nearest_wall(level: Level, origin: Vec2, direction: Vec2,
                         step: float = RAYCAST_STEP) -> Optional[Vec2]:
    """Walk from origin along direction and return the first WALL sample.

    Samples are taken every `step` units along x, with y following the ray
    angle, and never beyond the end point origin + direction. A direction
    with no x extent (straight up or down, or zero) has no wall.
    """
    if direction.x == 0:
        return None

    sign = 1.0 if direction.x > 0 else -1.0
    slope = direction.y / direction.x
    reach = abs(direction.x)
    dx = 0.0
    while abs(dx) <= reach:
        target = Vec2(origin.x + dx, origin.y + slope * dx)
        if level.tile(target.x, target.y) == Tile.WALL:
            return target
        dx += sign * step
    return None
