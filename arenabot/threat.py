"""
Threat prediction: will this bullet hit us if we head for that target?

Steps the bullet and a simplified model of our own movement forward one
tick at a time for a bounded horizon. Our movement follows the same
velocity shaping the command will use, jumps while the target is above
us and the jump can still go on, and falls otherwise. A tick on which
either body overlaps the other, or the bullet detonates next to us, or we
would end up inside a wall, counts as a collision.
"""

from __future__ import annotations

import logging
import math

from .defs import SOLID_FLOOR, Tile
from .geometry import blast_rect, bullet_rect, tiles_collide, unit_rect
from .shaper import shape_velocity
from .snapshot import Vec2

logger = logging.getLogger('arenabot.threat')


def blast_hits_unit(center, explosion, unit, position=None):
    """Does an explosion at center reach the unit's body?"""
    if explosion is None:
        return False
    pos = unit.position if position is None else position
    return tiles_collide(blast_rect(center, explosion), unit_rect(pos, unit.size))


def _clamp(value, limit):
    return max(-limit, min(limit, value))


class ThreatPredictor:
    """Forward-simulates one bullet against one candidate trajectory."""

    def __init__(self, game, config):
        self.game = game
        self.config = config

    @property
    def horizon(self):
        return self.config.prediction_horizon_ticks

    def will_collide(self, unit, bullet, target):
        """True if heading for target gets us hit by bullet within the horizon."""
        props = self.game.properties
        level = self.game.level
        dt = 1.0 / props.ticks_per_second
        max_speed = min(props.unit_max_horizontal_speed, self.config.max_velocity)
        fall_step = props.unit_fall_speed * dt
        height = unit.size.y

        bx, by = bullet.position.x, bullet.position.y
        bvx, bvy = bullet.velocity.x * dt, bullet.velocity.y * dt

        x, y = unit.position.x, unit.position.y
        js = unit.jump_state
        rise_left = js.max_time if js.can_jump else 0.0
        rise_step = (js.speed if js.speed > 0 else props.unit_jump_speed) * dt
        # Jump pads throw us up whether we like it or not
        forced_rise = js.can_jump and not js.can_cancel and not unit.on_ground
        grounded = unit.on_ground

        for _ in range(self.horizon):
            bx += bvx
            by += bvy

            # Horizontal: same shaping as the emitted command, without overshoot
            remaining = target.x - x
            if remaining != 0:
                aligned = int(target.y) == int(y)
                vx = shape_velocity(remaining, aligned, self.config, limit=max_speed)
                step = _clamp(vx * dt, max_speed * dt)
                x = target.x if abs(step) >= abs(remaining) else x + step

            # Vertical
            wants_up = target.y > y
            dropping = target.y < y
            if level.tile(x, y) == Tile.LADDER or level.tile(x, y + height / 2) == Tile.LADDER:
                y += _clamp(target.y - y, props.unit_jump_speed * dt)
                grounded = False
            else:
                if grounded and wants_up:
                    rise_left = props.unit_jump_time
                    rise_step = props.unit_jump_speed * dt
                    grounded = False
                if rise_left > 0 and (wants_up or forced_rise):
                    if level.tile(x, y + height + rise_step) == Tile.WALL:
                        rise_left = 0.0
                    else:
                        y += rise_step
                        rise_left -= dt
                else:
                    rise_left = 0.0
                    forced_rise = False
                    y, grounded = self._fall(x, y, fall_step, dropping)

            if level.tile(x, y) == Tile.WALL or level.tile(x, y + height / 2) == Tile.WALL:
                return True

            body = unit_rect(Vec2(x, y), unit.size)
            if tiles_collide(bullet_rect(Vec2(bx, by), bullet.size), body):
                return True

            if level.tile(bx, by) == Tile.WALL:
                # Detonation point: only the blast can reach us now
                if bullet.explosion is not None:
                    return tiles_collide(blast_rect(Vec2(bx, by), bullet.explosion), body)
                return False

        return False

    def _fall(self, x, y, fall_step, dropping):
        """One tick of falling; lands on walls, and on platforms unless dropping."""
        level = self.game.level
        new_y = y - fall_step
        floor = level.tile(x, new_y)
        top = math.floor(new_y) + 1
        solid = floor == Tile.WALL or (floor in SOLID_FLOOR and not dropping)
        if solid and top <= y:
            return float(top), True
        return new_y, False
