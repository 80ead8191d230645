"""
Arena constants and enumerations.

These mirror the enumerations of the tile-arena world snapshot (tile kinds,
weapon types, loot payloads) plus the labels the controller uses for goals.
"""

import enum


# --- Tiles ---
class Tile(enum.IntEnum):
    EMPTY = 0
    WALL = 1
    PLATFORM = 2
    LADDER = 3
    JUMP_PAD = 4


# --- Weapons ---
class WeaponType(enum.IntEnum):
    PISTOL = 0
    ASSAULT_RIFLE = 1
    ROCKET_LAUNCHER = 2


# --- Loot payloads ---
class ItemKind(enum.Enum):
    HEALTH_PACK = "health_pack"
    WEAPON = "weapon"


# --- Goals (primary and secondary) ---
class Goal(str, enum.Enum):
    ACQUIRE_WEAPON = "acquire-weapon"
    SEEK_HEALTH = "seek-health"
    UPGRADE_WEAPON = "upgrade-weapon"
    ENGAGE = "engage"
    HOLD = "hold"
    DODGE_EXPLOSIVE = "dodge-explosive"
    DODGE_BULLET = "dodge-bullet"


# Higher is better. The assault rifle is the weapon worth swapping for.
DEFAULT_WEAPON_RANK = {
    WeaponType.PISTOL: 1,
    WeaponType.ROCKET_LAUNCHER: 2,
    WeaponType.ASSAULT_RIFLE: 3,
}

# --- Velocity shaping bands: (lower bound of |dx|, multiplier) ---
VELOCITY_BANDS = (
    (2.7, 1.0),
    (1.7, 2.0),
    (0.7, 3.0),
)

# Tiles a falling unit can land on
SOLID_FLOOR = frozenset({Tile.WALL, Tile.PLATFORM})
