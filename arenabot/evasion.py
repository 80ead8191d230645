"""
Evasion planner: nudge the target until a threatening bullet misses.

The search tries the smallest change of behaviour first (cut the jump
short, stretch it, keep running, turn around, jump) and moves the target
in fixed axis-aligned steps. Every candidate is certified by the threat
predictor before it is accepted. When nothing works the original target
is kept, since dodging is best effort.
"""

import logging

from .defs import Tile
from .snapshot import Vec2

logger = logging.getLogger('arenabot.evasion')


def _sign(value):
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


class EvasionPlanner:

    def __init__(self, predictor, config):
        self.predictor = predictor
        self.config = config

    def plan(self, query, bullet, target):
        """Return a target that the predictor certifies safe, or target itself."""
        unit = query.unit
        if not self.predictor.will_collide(unit, bullet, target):
            return target

        step = self.config.evasion_step
        js = unit.jump_state
        rising = query.is_rising()

        # 1. Cut the jump short
        if rising and js.can_cancel and query.tile_below() != Tile.WALL:
            found = self._search(unit, bullet, target, 0.0, -step)
            if found is not None:
                return found

        # 2. Stretch the jump
        if rising and js.can_jump:
            found = self._search(unit, bullet, target, 0.0, step)
            if found is not None:
                return found

        # 3. Keep running the way we were going, then try the other way
        direction = self._direction(unit, bullet, target)
        for d in (direction, -direction):
            if query.tile_at(d, 0) == Tile.WALL or query.unit_occupies_adjacent_column(d):
                continue
            found = self._search(unit, bullet, target, d * step, 0.0)
            if found is not None:
                return found

        # 4. Jump over it
        if self._approaching(unit, bullet) and not query.is_falling():
            found = self._search(unit, bullet, target, 0.0, step)
            if found is not None:
                return found

        logger.debug(f"No safe position from bullet at {bullet.position}, "
                     f"keeping target {target}")
        return target

    def _search(self, unit, bullet, start, dx, dy):
        """Step from start by (dx, dy) until safe, out of bounds or out of tries."""
        level = self.predictor.game.level
        x, y = start.x, start.y
        for _ in range(self.config.evasion_max_iterations):
            x += dx
            y += dy
            if x < 0 or y < 0 or x >= level.width or y >= level.height:
                return None
            candidate = Vec2(x, y)
            if not self.predictor.will_collide(unit, bullet, candidate):
                return candidate
        return None

    @staticmethod
    def _direction(unit, bullet, target):
        """Where we are heading; away from the bullet if we are standing still."""
        return (_sign(target.x - unit.position.x)
                or _sign(unit.position.x - bullet.position.x)
                or 1)

    @staticmethod
    def _approaching(unit, bullet):
        vx = _sign(bullet.velocity.x)
        return vx != 0 and vx == _sign(unit.position.x - bullet.position.x)
