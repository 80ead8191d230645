"""
Goal arbitration and combat decisions.

Picks exactly one primary goal per tick from a fixed priority list, spots
the bullet worth dodging, and decides the shoot / reload / swap flags.
All thresholds come from ControllerConfig.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .defs import Goal, Tile, WeaponType
from .geometry import raycast_nearest_wall
from .snapshot import Bullet, LootBox, Unit, Vec2
from .threat import blast_hits_unit

logger = logging.getLogger('arenabot.arbiter')


@dataclass(frozen=True)
class GoalDecision:
    goal: Goal
    target: Vec2
    enemy: Optional[Unit] = None
    weapon_box: Optional[LootBox] = None
    health_box: Optional[LootBox] = None


@dataclass(frozen=True)
class Threat:
    bullet: Bullet
    goal: Goal


class GoalArbiter:
    """Priority-ordered goal selection plus shoot/reload/swap logic."""

    def __init__(self, config):
        self.config = config

    def choose_goal(self, query):
        """
        First matching rule wins:
          1. unarmed and a weapon is lying around   -> acquire-weapon
          2. a health pack is lying around          -> seek-health
          3. our weapon is worth replacing          -> upgrade-weapon
          4. an enemy exists                        -> engage
          5. otherwise                              -> hold
        """
        unit = query.unit
        enemy = query.nearest_enemy()
        weapon_box = query.nearest_weapon()
        health_box = query.nearest_health_pack()

        def decide(goal, target):
            logger.debug(f"unit {unit.id}: goal {goal.value} -> ({target.x:.2f}, {target.y:.2f})")
            return GoalDecision(goal, target, enemy, weapon_box, health_box)

        if unit.weapon is None and weapon_box is not None:
            return decide(Goal.ACQUIRE_WEAPON, weapon_box.position)

        if health_box is not None and (not self.config.seek_health_only_when_damaged
                                       or query.took_damage()):
            return decide(Goal.SEEK_HEALTH, self.health_target(query, health_box))

        if weapon_box is not None and self.weapon_needs_swap(unit, weapon_box.item.weapon_type):
            return decide(Goal.UPGRADE_WEAPON, weapon_box.position)

        if enemy is not None:
            return decide(Goal.ENGAGE, enemy.position)

        return decide(Goal.HOLD, unit.position)

    def health_target(self, query, health_box):
        """Stand on top of a platform instead of clipping into it."""
        target = health_box.position
        if query.tile_below(position=target) == Tile.PLATFORM:
            target = target.with_y(target.y + self.config.platform_nudge)
        return target

    # --- Threats ---

    def select_threat(self, query):
        """The bullet to dodge this tick, rockets first, or None."""
        unit = query.unit
        center = unit.center
        radius_sqr = self.config.threat_radius_sqr
        fallback = None
        for bullet in query.game.bullets:
            # Our own bullets only matter if they can blow up next to us
            if bullet.player_id == unit.player_id and bullet.explosion is None:
                continue
            if center.distance_sqr(bullet.position) >= radius_sqr:
                continue
            if bullet.weapon_type == WeaponType.ROCKET_LAUNCHER:
                return Threat(bullet, Goal.DODGE_EXPLOSIVE)
            if fallback is None:
                fallback = bullet
        if fallback is not None:
            return Threat(fallback, Goal.DODGE_BULLET)
        return None

    # --- Weapon handling ---

    def weapon_needs_swap(self, unit, offered_type):
        weapon = unit.weapon
        if weapon is None:
            return True
        if self.config.rank(offered_type) > self.config.rank(weapon.typ) and not weapon.is_ready:
            return True
        return weapon.magazine <= self.config.low_ammo_threshold

    def should_swap_weapon(self, unit, weapon_box):
        if weapon_box is None:
            return False
        return self.weapon_needs_swap(unit, weapon_box.item.weapon_type)

    def should_shoot(self, query, enemy, aim):
        unit = query.unit
        if unit.weapon is None or enemy is None:
            return False

        # Straight above or below us: nothing in between worth checking
        if abs(enemy.position.x - unit.position.x) <= self.config.vertical_alignment_tolerance:
            return True

        explosion = unit.weapon.params.explosion
        if self.config.avoid_self_blast and blast_hits_unit(enemy.center, explosion, unit):
            return False

        origin = unit.center
        wall = raycast_nearest_wall(query.level, origin, aim, self.config.raycast_step)
        if wall is None:
            return True
        return origin.distance_sqr(wall) >= origin.distance_sqr(enemy.center)

    @staticmethod
    def should_reload(unit, shoot):
        if shoot or unit.weapon is None:
            return False
        return unit.weapon.magazine < unit.weapon.params.magazine_size / 2
