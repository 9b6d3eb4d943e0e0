"""logic/entity_factory.py — Table-driven entity spawning.

A single ``_COMPONENT_TABLE`` maps descriptor keys to component classes
and their field schemas.  ``spawn_from_descriptor`` iterates the table,
reads the sub-dict for each key, casts fields, and attaches components.

Descriptors are plain dicts (usually one TOML table each)::

    [[npc]]
    identity = { name = "Mira" }
    position = { x = 6.5, y = 4.5 }
    collider = { radius = 0.4 }

``spawn_player`` / ``spawn_npc`` are shortcuts for code and tests.
"""

from __future__ import annotations
from typing import Any, Callable
from core.ecs import World
from core.tuning import get as _tun
from core.constants import PLAYER_SPEED
from components import (
    Position, Facing, Direction, Collider, Identity, WalkCycle, Player,
)


# ── Field-schema helpers ─────────────────────────────────────────────

def _float(v: Any, default: float = 0.0) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def _bool(v: Any, default: bool = False) -> bool:
    return bool(v) if v is not None else default


def _str(v: Any, default: str = "") -> str:
    return str(v) if v is not None else default


def _direction(v: Any, default: Direction = Direction.DOWN) -> Direction:
    try:
        return Direction(str(v).lower())
    except ValueError:
        return default


# ── Component table ──────────────────────────────────────────────────
# Each entry: (descriptor_key, ComponentClass, field_map)
# field_map: dict mapping component-kwarg → (descriptor-sub-key, cast, default)

_COMPONENT_TABLE: list[tuple[str, type, dict[str, tuple[str, Callable, Any]]]] = [
    ("identity", Identity, {
        "name": ("name", _str, "unnamed"),
        "kind": ("kind", _str, "npc"),
    }),
    ("position", Position, {
        "x": ("x", _float, 0.0),
        "y": ("y", _float, 0.0),
    }),
    ("facing", Facing, {
        "direction": ("direction", _direction, Direction.DOWN),
    }),
    ("collider", Collider, {
        "radius": ("radius", _float, 0.0),
    }),
]


def spawn_from_descriptor(world: World, desc: dict) -> int:
    """Create an entity from a descriptor dict.  Returns the new eid."""
    eid = world.spawn()
    for key, cls, fields in _COMPONENT_TABLE:
        sub = desc.get(key)
        if sub is None:
            continue
        kwargs = {}
        for kwarg, (src, cast, default) in fields.items():
            kwargs[kwarg] = cast(sub.get(src), default)
        world.add(eid, cls(**kwargs))

    player = desc.get("player")
    if player is not None:
        _attach_player(world, eid,
                       speed=player.get("speed"),
                       skin=_str(player.get("skin"), "character1"),
                       animate_when_idle=_bool(player.get("animate_when_idle")))
    return eid


def _attach_player(world: World, eid: int, *, speed: float | None,
                   skin: str, animate_when_idle: bool) -> None:
    if speed is None:
        speed = _tun("movement", "speed", PLAYER_SPEED)
    world.add(eid, Player(speed=_float(speed, PLAYER_SPEED), skin=skin,
                          animate_when_idle=animate_when_idle))
    world.add(eid, WalkCycle.for_skin(skin))
    if not world.has(eid, Facing):
        world.add(eid, Facing())
    if not world.has(eid, Position):
        world.add(eid, Position())


def spawn_player(world: World, x: float, y: float, *,
                 speed: float | None = None, skin: str = "character1",
                 animate_when_idle: bool = False) -> int:
    eid = world.spawn()
    world.add(eid, Identity(name="player", kind="player"))
    world.add(eid, Position(x, y))
    _attach_player(world, eid, speed=speed, skin=skin,
                   animate_when_idle=animate_when_idle)
    return eid


def spawn_npc(world: World, name: str, x: float, y: float,
              radius: float = 0.4) -> int:
    eid = world.spawn()
    world.add(eid, Identity(name=name, kind="npc"))
    world.add(eid, Position(x, y))
    world.add(eid, Facing())
    world.add(eid, Collider(radius=radius))
    return eid
