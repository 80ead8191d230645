"""
World query layer - read-only view of a snapshot from one unit's point of view.

Nearest-entity lookups, tile probes around the unit and simple movement
state tests. The view holds no state of its own beyond the (game, unit)
pair, so building one per tick is cheap.
"""

import math

from .defs import ItemKind, Tile


def distance_sqr(a, b):
    return (a.x - b.x) * (a.x - b.x) + (a.y - b.y) * (a.y - b.y)


class WorldQuery:
    """Read-only view of the world for the controlled unit."""

    def __init__(self, game, unit):
        self.game = game
        self.unit = unit

    @property
    def level(self):
        return self.game.level

    @property
    def position(self):
        return self.unit.position

    # --- Nearest entities ---

    def enemies(self):
        """Units that belong to another player, in snapshot order."""
        return [u for u in self.game.units if u.player_id != self.unit.player_id]

    def nearest_enemy(self):
        """Closest opposing unit, or None. Ties go to the first one listed."""
        nearest = None
        best = math.inf
        for other in self.enemies():
            d = distance_sqr(self.position, other.position)
            if d < best:
                nearest = other
                best = d
        return nearest

    def nearest_loot_box(self, kind):
        """Closest loot box carrying the given ItemKind, or None."""
        nearest = None
        best = math.inf
        for box in self.game.loot_boxes:
            if box.item.kind is not kind:
                continue
            d = distance_sqr(self.position, box.position)
            if d < best:
                nearest = box
                best = d
        return nearest

    def nearest_weapon(self):
        return self.nearest_loot_box(ItemKind.WEAPON)

    def nearest_health_pack(self):
        return self.nearest_loot_box(ItemKind.HEALTH_PACK)

    # --- Tile probes ---

    def tile_at(self, dx=0.0, dy=0.0, position=None):
        """Tile at the unit's position offset by (dx, dy), clamped onto the grid."""
        pos = self.position if position is None else position
        level = self.level
        if level.width == 0 or level.height == 0:
            return Tile.EMPTY
        ix = min(max(int(pos.x + dx), 0), level.width - 1)
        iy = min(max(int(pos.y + dy), 0), level.height - 1)
        return level.tiles[ix][iy]

    def next_tile_right(self):
        return self.tile_at(1, 0)

    def next_tile_left(self):
        return self.tile_at(-1, 0)

    def tile_below(self, position=None):
        return self.tile_at(0, -1, position=position)

    def unit_occupies_adjacent_column(self, direction):
        """True if an opposing unit stands in the column next to us (direction +1/-1)."""
        column = int(self.position.x) + direction
        return any(int(other.position.x) == column for other in self.enemies())

    # --- Movement state ---

    def is_rising(self):
        """Mid-jump and still going up."""
        js = self.unit.jump_state
        return js.speed > 0 and js.max_time > 0 and not self.unit.on_ground

    def is_falling(self):
        return not (self.unit.on_ground or self.unit.on_ladder or self.is_rising())

    def took_damage(self):
        return self.unit.health < self.game.properties.unit_max_health
