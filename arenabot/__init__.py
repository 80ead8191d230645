"""arenabot - per-tick tactical controller for a tile-arena combat unit."""

from .config import ControllerConfig
from .controller import TacticalController, TickDecision
from .defs import Goal, ItemKind, Tile, WeaponType
from .errors import ArenaBotError, ReplayError, SnapshotError
from .snapshot import (
    Bullet,
    ExplosionParams,
    Game,
    Item,
    JumpState,
    Level,
    LootBox,
    Properties,
    Unit,
    UnitAction,
    Vec2,
    Weapon,
    WeaponParams,
)

__all__ = [
    "TacticalController",
    "TickDecision",
    "ControllerConfig",
    "Goal",
    "ItemKind",
    "Tile",
    "WeaponType",
    "ArenaBotError",
    "SnapshotError",
    "ReplayError",
    "Bullet",
    "ExplosionParams",
    "Game",
    "Item",
    "JumpState",
    "Level",
    "LootBox",
    "Properties",
    "Unit",
    "UnitAction",
    "Vec2",
    "Weapon",
    "WeaponParams",
]
