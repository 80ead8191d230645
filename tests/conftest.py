"""
Shared test fixtures for the arenabot test suite.

Provides:
- Level builders (bordered box, open floor)
- Unit / weapon / bullet / loot box helpers with game defaults
- A default controller config
"""

import os
import sys

import pytest

# Make the package importable without installing it
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from arenabot.config import ControllerConfig
from arenabot.defs import Tile, WeaponType
from arenabot.snapshot import (
    Bullet, ExplosionParams, Game, Item, JumpState, Level, LootBox,
    Properties, Unit, Vec2, Weapon, WeaponParams,
)

ENEMY_PLAYER = 2
MY_PLAYER = 1


@pytest.fixture
def config():
    return ControllerConfig()


# ── Level Helpers ────────────────────────────────────────────────

def build_level(width=30, height=10, walls=(), platforms=(), ladders=(), border=True):
    """Floor along y=0; optional side walls; extra cells by (x, y)."""
    grid = [[Tile.EMPTY] * height for _ in range(width)]
    for x in range(width):
        grid[x][0] = Tile.WALL
    if border:
        for y in range(height):
            grid[0][y] = Tile.WALL
            grid[width - 1][y] = Tile.WALL
    for x, y in walls:
        grid[x][y] = Tile.WALL
    for x, y in platforms:
        grid[x][y] = Tile.PLATFORM
    for x, y in ladders:
        grid[x][y] = Tile.LADDER
    return Level(tuple(tuple(column) for column in grid))


def wall_column(x, y_from, y_to):
    return [(x, y) for y in range(y_from, y_to + 1)]


# ── Entity Helpers ───────────────────────────────────────────────

def make_weapon(typ=WeaponType.ASSAULT_RIFLE, magazine=20, magazine_size=20,
                fire_timer=None, explosion=None):
    if typ == WeaponType.ROCKET_LAUNCHER and explosion is None:
        explosion = ExplosionParams(radius=3.0, damage=50)
    params = WeaponParams(magazine_size=magazine_size, explosion=explosion)
    return Weapon(typ=typ, params=params, magazine=magazine, fire_timer=fire_timer)


def make_unit(x, y, unit_id=1, player_id=MY_PLAYER, weapon=None, health=100,
              on_ground=True, jump_state=None):
    if jump_state is None:
        jump_state = JumpState(can_jump=True, speed=10.0, max_time=0.55, can_cancel=True)
    return Unit(
        id=unit_id,
        player_id=player_id,
        health=health,
        position=Vec2(x, y),
        jump_state=jump_state,
        weapon=weapon,
        on_ground=on_ground,
    )


def make_enemy(x, y, unit_id=2, weapon=None):
    return make_unit(x, y, unit_id=unit_id, player_id=ENEMY_PLAYER, weapon=weapon)


def make_bullet(x, y, vx, vy, weapon_type=WeaponType.PISTOL, player_id=ENEMY_PLAYER,
                size=0.2, explosion=None):
    return Bullet(
        weapon_type=weapon_type,
        unit_id=99,
        player_id=player_id,
        position=Vec2(x, y),
        velocity=Vec2(vx, vy),
        damage=20,
        size=size,
        explosion=explosion,
    )


def make_rocket(x, y, vx, vy, radius=3.0, player_id=ENEMY_PLAYER):
    return make_bullet(x, y, vx, vy, weapon_type=WeaponType.ROCKET_LAUNCHER,
                       player_id=player_id, size=0.4,
                       explosion=ExplosionParams(radius=radius, damage=50))


def weapon_box(x, y, weapon_type=WeaponType.ASSAULT_RIFLE):
    return LootBox(position=Vec2(x, y), item=Item.weapon(weapon_type))


def health_box(x, y):
    return LootBox(position=Vec2(x, y), item=Item.health_pack(50))


def make_game(level=None, units=(), bullets=(), loot_boxes=(), tick=0):
    return Game(
        level=level or build_level(),
        properties=Properties(),
        current_tick=tick,
        units=tuple(units),
        bullets=tuple(bullets),
        loot_boxes=tuple(loot_boxes),
    )
