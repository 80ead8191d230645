"""
World snapshot model - the authoritative per-tick state of the arena.

The simulation hands the controller one snapshot per tick. Everything here
is plain immutable data: units, weapons, loot boxes, bullets, the tile grid
and the global properties. Queries over that data live in world.py, never on
the entities themselves.

Snapshots arrive as dicts (see Game.from_dict); the command goes back as a
dict via UnitAction.to_dict.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from .defs import ItemKind, Tile, WeaponType
from .errors import SnapshotError


@dataclass(frozen=True)
class Vec2:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> Vec2:
        return Vec2(self.x * k, self.y * k)

    def distance_sqr(self, other: Vec2) -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def with_x(self, x: float) -> Vec2:
        return Vec2(x, self.y)

    def with_y(self, y: float) -> Vec2:
        return Vec2(self.x, y)

    @classmethod
    def from_dict(cls, data, path="vec2") -> Vec2:
        return cls(float(_req(data, 'x', path)), float(_req(data, 'y', path)))

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y}


@dataclass(frozen=True)
class ExplosionParams:
    radius: float
    damage: int = 0

    @classmethod
    def from_dict(cls, data, path="explosion") -> Optional[ExplosionParams]:
        if data is None:
            return None
        return cls(float(_req(data, 'radius', path)), int(data.get('damage', 0)))

    def to_dict(self) -> dict:
        return {'radius': self.radius, 'damage': self.damage}


@dataclass(frozen=True)
class WeaponParams:
    magazine_size: int
    fire_rate: float = 0.1
    reload_time: float = 1.0
    bullet_speed: float = 50.0
    bullet_size: float = 0.2
    bullet_damage: int = 10
    explosion: Optional[ExplosionParams] = None

    @classmethod
    def from_dict(cls, data, path="params") -> WeaponParams:
        return cls(
            magazine_size=int(_req(data, 'magazine_size', path)),
            fire_rate=float(data.get('fire_rate', 0.1)),
            reload_time=float(data.get('reload_time', 1.0)),
            bullet_speed=float(data.get('bullet_speed', 50.0)),
            bullet_size=float(data.get('bullet_size', 0.2)),
            bullet_damage=int(data.get('bullet_damage', 10)),
            explosion=ExplosionParams.from_dict(data.get('explosion'), f"{path}.explosion"),
        )

    def to_dict(self) -> dict:
        return {
            'magazine_size': self.magazine_size,
            'fire_rate': self.fire_rate,
            'reload_time': self.reload_time,
            'bullet_speed': self.bullet_speed,
            'bullet_size': self.bullet_size,
            'bullet_damage': self.bullet_damage,
            'explosion': self.explosion.to_dict() if self.explosion else None,
        }


@dataclass(frozen=True)
class Weapon:
    typ: WeaponType
    params: WeaponParams
    magazine: int
    fire_timer: Optional[float] = None

    @property
    def is_ready(self) -> bool:
        """True when the weapon can fire this tick (not reloading, not cooling down)."""
        return self.fire_timer is None or self.fire_timer <= 0

    @classmethod
    def from_dict(cls, data, path="weapon") -> Optional[Weapon]:
        if data is None:
            return None
        fire_timer = data.get('fire_timer')
        return cls(
            typ=_enum(WeaponType, _req(data, 'typ', path), f"{path}.typ"),
            params=WeaponParams.from_dict(_req(data, 'params', path), f"{path}.params"),
            magazine=int(_req(data, 'magazine', path)),
            fire_timer=None if fire_timer is None else float(fire_timer),
        )

    def to_dict(self) -> dict:
        return {
            'typ': self.typ.name,
            'params': self.params.to_dict(),
            'magazine': self.magazine,
            'fire_timer': self.fire_timer,
        }


@dataclass(frozen=True)
class JumpState:
    can_jump: bool = False
    speed: float = 0.0
    max_time: float = 0.0
    can_cancel: bool = False

    @classmethod
    def from_dict(cls, data, path="jump_state") -> JumpState:
        if data is None:
            return cls()
        return cls(
            can_jump=bool(data.get('can_jump', False)),
            speed=float(data.get('speed', 0.0)),
            max_time=float(data.get('max_time', 0.0)),
            can_cancel=bool(data.get('can_cancel', False)),
        )

    def to_dict(self) -> dict:
        return {
            'can_jump': self.can_jump,
            'speed': self.speed,
            'max_time': self.max_time,
            'can_cancel': self.can_cancel,
        }


@dataclass(frozen=True)
class Unit:
    """A unit on the field. position is the bottom-center of its body."""
    id: int
    player_id: int
    health: int
    position: Vec2
    size: Vec2 = Vec2(0.9, 1.8)
    jump_state: JumpState = JumpState()
    weapon: Optional[Weapon] = None
    on_ground: bool = True
    on_ladder: bool = False
    mines: int = 0

    @property
    def center(self) -> Vec2:
        return Vec2(self.position.x, self.position.y + self.size.y / 2)

    @classmethod
    def from_dict(cls, data, path="unit") -> Unit:
        size = data.get('size')
        return cls(
            id=int(_req(data, 'id', path)),
            player_id=int(_req(data, 'player_id', path)),
            health=int(_req(data, 'health', path)),
            position=Vec2.from_dict(_req(data, 'position', path), f"{path}.position"),
            size=Vec2.from_dict(size, f"{path}.size") if size else Vec2(0.9, 1.8),
            jump_state=JumpState.from_dict(data.get('jump_state'), f"{path}.jump_state"),
            weapon=Weapon.from_dict(data.get('weapon'), f"{path}.weapon"),
            on_ground=bool(data.get('on_ground', True)),
            on_ladder=bool(data.get('on_ladder', False)),
            mines=int(data.get('mines', 0)),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'player_id': self.player_id,
            'health': self.health,
            'position': self.position.to_dict(),
            'size': self.size.to_dict(),
            'jump_state': self.jump_state.to_dict(),
            'weapon': self.weapon.to_dict() if self.weapon else None,
            'on_ground': self.on_ground,
            'on_ladder': self.on_ladder,
            'mines': self.mines,
        }


@dataclass(frozen=True)
class Item:
    """Loot payload: a weapon or a health restore, never both."""
    kind: ItemKind
    weapon_type: Optional[WeaponType] = None
    health: int = 0

    @classmethod
    def weapon(cls, weapon_type: WeaponType) -> Item:
        return cls(ItemKind.WEAPON, weapon_type=weapon_type)

    @classmethod
    def health_pack(cls, health: int = 50) -> Item:
        return cls(ItemKind.HEALTH_PACK, health=health)

    @classmethod
    def from_dict(cls, data, path="item") -> Item:
        kind = _enum(ItemKind, _req(data, 'kind', path), f"{path}.kind")
        if kind is ItemKind.WEAPON:
            return cls.weapon(_enum(WeaponType, _req(data, 'weapon_type', path),
                                    f"{path}.weapon_type"))
        return cls.health_pack(int(data.get('health', 50)))

    def to_dict(self) -> dict:
        if self.kind is ItemKind.WEAPON:
            return {'kind': self.kind.value, 'weapon_type': self.weapon_type.name}
        return {'kind': self.kind.value, 'health': self.health}


@dataclass(frozen=True)
class LootBox:
    position: Vec2
    item: Item
    size: Vec2 = Vec2(0.5, 0.5)

    @classmethod
    def from_dict(cls, data, path="loot_box") -> LootBox:
        size = data.get('size')
        return cls(
            position=Vec2.from_dict(_req(data, 'position', path), f"{path}.position"),
            item=Item.from_dict(_req(data, 'item', path), f"{path}.item"),
            size=Vec2.from_dict(size, f"{path}.size") if size else Vec2(0.5, 0.5),
        )

    def to_dict(self) -> dict:
        return {
            'position': self.position.to_dict(),
            'item': self.item.to_dict(),
            'size': self.size.to_dict(),
        }


@dataclass(frozen=True)
class Bullet:
    """A projectile in flight. position is the center of its square."""
    weapon_type: WeaponType
    unit_id: int
    player_id: int
    position: Vec2
    velocity: Vec2
    damage: int = 0
    size: float = 0.2
    explosion: Optional[ExplosionParams] = None

    @classmethod
    def from_dict(cls, data, path="bullet") -> Bullet:
        return cls(
            weapon_type=_enum(WeaponType, _req(data, 'weapon_type', path), f"{path}.weapon_type"),
            unit_id=int(_req(data, 'unit_id', path)),
            player_id=int(_req(data, 'player_id', path)),
            position=Vec2.from_dict(_req(data, 'position', path), f"{path}.position"),
            velocity=Vec2.from_dict(_req(data, 'velocity', path), f"{path}.velocity"),
            damage=int(data.get('damage', 0)),
            size=float(data.get('size', 0.2)),
            explosion=ExplosionParams.from_dict(data.get('explosion'), f"{path}.explosion"),
        )

    def to_dict(self) -> dict:
        return {
            'weapon_type': self.weapon_type.name,
            'unit_id': self.unit_id,
            'player_id': self.player_id,
            'position': self.position.to_dict(),
            'velocity': self.velocity.to_dict(),
            'damage': self.damage,
            'size': self.size,
            'explosion': self.explosion.to_dict() if self.explosion else None,
        }


@dataclass(frozen=True)
class Level:
    """Static tile grid, indexed tiles[x][y] with y growing upward."""
    tiles: tuple

    @property
    def width(self) -> int:
        return len(self.tiles)

    @property
    def height(self) -> int:
        return len(self.tiles[0]) if self.tiles else 0

    def tile(self, x: float, y: float) -> Tile:
        """Tile containing (x, y); anything off the grid reads as EMPTY."""
        ix = math.floor(x)
        iy = math.floor(y)
        if ix < 0 or iy < 0 or ix >= self.width or iy >= self.height:
            return Tile.EMPTY
        return self.tiles[ix][iy]

    @classmethod
    def from_rows(cls, rows) -> Level:
        """Build a level from text rows, top row first.

        '#' wall, '^' platform, 'H' ladder, 'T' jump pad, anything else empty.
        """
        legend = {'#': Tile.WALL, '^': Tile.PLATFORM, 'H': Tile.LADDER, 'T': Tile.JUMP_PAD}
        height = len(rows)
        width = max((len(r) for r in rows), default=0)
        columns = []
        for x in range(width):
            column = []
            for y in range(height):
                row = rows[height - 1 - y]
                ch = row[x] if x < len(row) else ' '
                column.append(legend.get(ch, Tile.EMPTY))
            columns.append(tuple(column))
        return cls(tuple(columns))

    @classmethod
    def from_dict(cls, data, path="level") -> Level:
        raw = _req(data, 'tiles', path)
        columns = []
        for x, column in enumerate(raw):
            columns.append(tuple(_enum(Tile, t, f"{path}.tiles[{x}]") for t in column))
        return cls(tuple(columns))

    def to_dict(self) -> dict:
        return {'tiles': [[t.name for t in column] for column in self.tiles]}


@dataclass(frozen=True)
class Properties:
    ticks_per_second: float = 60.0
    unit_size: Vec2 = Vec2(0.9, 1.8)
    unit_max_horizontal_speed: float = 10.0
    unit_fall_speed: float = 10.0
    unit_jump_time: float = 0.55
    unit_jump_speed: float = 10.0
    unit_max_health: int = 100

    @classmethod
    def from_dict(cls, data, path="properties") -> Properties:
        if data is None:
            return cls()
        size = data.get('unit_size')
        return cls(
            ticks_per_second=float(data.get('ticks_per_second', 60.0)),
            unit_size=Vec2.from_dict(size, f"{path}.unit_size") if size else Vec2(0.9, 1.8),
            unit_max_horizontal_speed=float(data.get('unit_max_horizontal_speed', 10.0)),
            unit_fall_speed=float(data.get('unit_fall_speed', 10.0)),
            unit_jump_time=float(data.get('unit_jump_time', 0.55)),
            unit_jump_speed=float(data.get('unit_jump_speed', 10.0)),
            unit_max_health=int(data.get('unit_max_health', 100)),
        )

    def to_dict(self) -> dict:
        return {
            'ticks_per_second': self.ticks_per_second,
            'unit_size': self.unit_size.to_dict(),
            'unit_max_horizontal_speed': self.unit_max_horizontal_speed,
            'unit_fall_speed': self.unit_fall_speed,
            'unit_jump_time': self.unit_jump_time,
            'unit_jump_speed': self.unit_jump_speed,
            'unit_max_health': self.unit_max_health,
        }


@dataclass(frozen=True)
class Game:
    level: Level
    properties: Properties = Properties()
    current_tick: int = 0
    units: tuple = ()
    bullets: tuple = ()
    loot_boxes: tuple = ()

    def unit_by_id(self, unit_id) -> Optional[Unit]:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None

    @classmethod
    def from_dict(cls, data: dict) -> Game:
        """Parse a snapshot dict. Raises SnapshotError on malformed input."""
        if not isinstance(data, dict):
            raise SnapshotError("snapshot must be a dict", path="game")
        return cls(
            level=Level.from_dict(_req(data, 'level', 'game'), 'game.level'),
            properties=Properties.from_dict(data.get('properties'), 'game.properties'),
            current_tick=int(data.get('current_tick', 0)),
            units=tuple(Unit.from_dict(u, f"game.units[{i}]")
                        for i, u in enumerate(data.get('units', []))),
            bullets=tuple(Bullet.from_dict(b, f"game.bullets[{i}]")
                          for i, b in enumerate(data.get('bullets', []))),
            loot_boxes=tuple(LootBox.from_dict(lb, f"game.loot_boxes[{i}]")
                             for i, lb in enumerate(data.get('loot_boxes', []))),
        )

    def to_dict(self) -> dict:
        return {
            'current_tick': self.current_tick,
            'properties': self.properties.to_dict(),
            'level': self.level.to_dict(),
            'units': [u.to_dict() for u in self.units],
            'bullets': [b.to_dict() for b in self.bullets],
            'loot_boxes': [lb.to_dict() for lb in self.loot_boxes],
        }


@dataclass(frozen=True)
class UnitAction:
    """The one command emitted per tick."""
    velocity: float = 0.0
    jump: bool = False
    jump_down: bool = True
    aim: Vec2 = field(default_factory=Vec2)
    shoot: bool = False
    reload: bool = False
    swap_weapon: bool = False
    plant_mine: bool = False

    def to_dict(self) -> dict:
        return {
            'velocity': self.velocity,
            'jump': self.jump,
            'jump_down': self.jump_down,
            'aim': self.aim.to_dict(),
            'shoot': self.shoot,
            'reload': self.reload,
            'swap_weapon': self.swap_weapon,
            'plant_mine': self.plant_mine,
        }

    @classmethod
    def from_dict(cls, data) -> UnitAction:
        return cls(
            velocity=float(data.get('velocity', 0.0)),
            jump=bool(data.get('jump', False)),
            jump_down=bool(data.get('jump_down', True)),
            aim=Vec2.from_dict(data.get('aim') or {'x': 0.0, 'y': 0.0}, 'action.aim'),
            shoot=bool(data.get('shoot', False)),
            reload=bool(data.get('reload', False)),
            swap_weapon=bool(data.get('swap_weapon', False)),
            plant_mine=bool(data.get('plant_mine', False)),
        )


# --- Parsing helpers ---

def _req(data: Any, key: str, path: str):
    try:
        return data[key]
    except (KeyError, TypeError) as e:
        raise SnapshotError(f"missing field '{key}'", path=path) from e


def _enum(enum_cls, value, path):
    """Accept either the member name or its value."""
    if isinstance(value, enum_cls):
        return value
    try:
        if isinstance(value, str) and value in enum_cls.__members__:
            return enum_cls[value]
        return enum_cls(value)
    except ValueError as e:
        raise SnapshotError(f"unknown {enum_cls.__name__} {value!r}", path=path) from e
