"""
Command shaping: turn a target position into velocity, jump and aim.
"""

from __future__ import annotations

from .defs import Tile, VELOCITY_BANDS
from .snapshot import Vec2


def shape_velocity(dx, aligned, config, limit=None):
    """Horizontal velocity request for a displacement of dx.

    Large displacements pass through, mid-range ones are multiplied so the
    unit does not crawl up to its target, and tiny ones get a fixed push in
    the direction of travel (a bigger one when the target is on our tile
    row). The sign of dx is always kept and the magnitude is capped.
    """
    if dx == 0:
        return 0.0

    sign = 1.0 if dx > 0 else -1.0
    magnitude = abs(dx)
    for lower, factor in VELOCITY_BANDS:
        if magnitude >= lower:
            shaped = magnitude * factor
            break
    else:
        boost = config.aligned_boost if aligned else config.unaligned_boost
        shaped = magnitude + boost

    cap = config.max_velocity if limit is None else min(config.max_velocity, limit)
    return sign * min(shaped, cap)


def aim_to(unit, enemy):
    """Vector from the unit to the enemy, or zero when there is nobody to aim at."""
    if enemy is None:
        return Vec2(0.0, 0.0)
    return Vec2(enemy.position.x - unit.position.x,
                enemy.position.y - unit.position.y)


class CommandShaper:
    """Derives velocity and jump flags for the controlled unit."""

    def __init__(self, config):
        self.config = config

    def velocity_toward(self, unit, target, limit=None):
        aligned = int(target.y) == int(unit.position.y)
        return shape_velocity(target.x - unit.position.x, aligned, self.config, limit)

    def shape(self, query, target):
        """Returns (velocity, jump, jump_down) for moving toward target."""
        unit = query.unit
        pos = unit.position
        velocity = self.velocity_toward(
            unit, target, limit=query.game.properties.unit_max_horizontal_speed)

        jump = target.y > pos.y
        # Climb over a wall that blocks the way
        if target.x > pos.x and query.next_tile_right() == Tile.WALL:
            jump = True
        if target.x < pos.x and query.next_tile_left() == Tile.WALL:
            jump = True

        return velocity, jump, not jump
