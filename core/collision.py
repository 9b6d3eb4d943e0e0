"""core/collision.py — Tile-grid walkability and avatar collision.

Three questions, one set of rules:

``is_walkable(tx, ty, npcs)``
    Tile-granularity check used by the pathfinder.  Asks whether an
    avatar standing on the *centre* of tile (tx, ty) would overlap a
    solid tile, a multi-tile sprite footprint, or an NPC.

``blocks_position(x, y, npcs)``
    Continuous check: does the avatar's box centred on (x, y) overlap
    any of the same things?

``blocks_move(x0, y0, x1, y1, npcs)``
    What the movement controller asks.  Tiles and footprints block as in
    ``blocks_position``; an NPC blocks only a step that ends inside its
    circle and closer than the step began.

Both treat NPCs as circles (``NpcObstacle``) and the avatar as a square
of half-width ``half_size``.  The margin is added to the footprint
rectangle, never to the query point, so an empty (0×0) footprint adds
no collision at all.

These live in ``core/`` (not ``logic/``) because both the pathfinder
and the movement controller need them.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Iterable

from core.constants import PLAYER_HALF, is_solid_class
from core.sprites import FootprintTable
from core.tilemap import TileMap
from core.tuning import get as _tun


@dataclass(frozen=True)
class NpcObstacle:
    """One NPC as seen by a single planning call or movement tick.

    ``collision_radius`` of ``None`` or <= 0 means intangible.
    """
    id: int
    x: float
    y: float
    collision_radius: float | None = None

    @property
    def tangible(self) -> bool:
        return bool(self.collision_radius) and self.collision_radius > 0


class WalkabilityResolver:
    """Combine a tile map, a footprint table and NPCs into yes/no answers."""

    def __init__(self, tilemap: TileMap, footprints: FootprintTable | None = None,
                 half_size: float = PLAYER_HALF):
        self.tilemap = tilemap
        if footprints is None:
            margin = int(_tun("pathfinding", "search_margin", 1))
            footprints = FootprintTable(margin=margin, half_size=half_size)
        self.footprints = footprints
        self.half_size = half_size

    @property
    def width(self) -> int:
        return self.tilemap.width

    @property
    def height(self) -> int:
        return self.tilemap.height

    def snapshot(self) -> WalkabilityResolver:
        """Resolver over a frozen copy of the map (one planning call)."""
        return WalkabilityResolver(self.tilemap.snapshot(), self.footprints, self.half_size)

    # ── Tile-level (pathfinding) ─────────────────────────────────────

    def is_walkable(self, tx: int, ty: int,
                    npcs: Iterable[NpcObstacle] | None = None) -> bool:
        tile = self.tilemap.get_tile_at(tx, ty)
        if tile is None:
            return False  # off-map

        # Anchors with a footprint are judged by the footprint alone
        if not self.footprints.has_footprint(tile.type) and is_solid_class(tile.collision):
            return False

        cx = tx + 0.5
        cy = ty + 0.5
        h = self.half_size
        if self._box_hits_footprint(cx - h, cy - h, cx + h, cy + h):
            return False

        if npcs is not None and _hits_npc(cx, cy, h, npcs):
            return False
        return True

    # ── Continuous (movement) ────────────────────────────────────────

    def blocks_position(self, x: float, y: float,
                        npcs: Iterable[NpcObstacle] | None = None) -> bool:
        """True if an avatar centred on (x, y) would collide."""
        h = self.half_size
        min_tx = int(math.floor(x - h))
        max_tx = int(math.floor(x + h))
        min_ty = int(math.floor(y - h))
        max_ty = int(math.floor(y + h))

        for ty in range(min_ty, max_ty + 1):
            for tx in range(min_tx, max_tx + 1):
                tile = self.tilemap.get_tile_at(tx, ty)
                if tile is None:
                    continue  # off-map is handled by clamping
                if is_solid_class(tile.collision) and not self.footprints.has_footprint(tile.type):
                    return True

        if self._box_hits_footprint(x - h, y - h, x + h, y + h):
            return True

        if npcs is not None and _hits_npc(x, y, h, npcs):
            return True
        return False

    def blocks_move(self, x0: float, y0: float, x1: float, y1: float,
                    npcs: Iterable[NpcObstacle] | None = None) -> bool:
        """Like ``blocks_position(x1, y1)``, but an NPC only blocks a move
        that gets closer to it.  An avatar already overlapping someone
        can always step away.
        """
        if self.blocks_position(x1, y1):
            return True
        return npcs is not None and _npc_blocks_move(x0, y0, x1, y1, self.half_size, npcs)

    # ── internal ─────────────────────────────────────────────────────

    def _box_hits_footprint(self, left: float, top: float,
                            right: float, bottom: float) -> bool:
        """Does the box overlap any solid anchor's footprint nearby?"""
        r = self.footprints.search_radius
        min_tx = int(math.floor(left)) - r
        max_tx = int(math.floor(right)) + r
        min_ty = int(math.floor(top)) - r
        max_ty = int(math.floor(bottom)) + r
        get = self.tilemap.get_tile_at
        for ay in range(min_ty, max_ty + 1):
            for ax in range(min_tx, max_tx + 1):
                tile = get(ax, ay)
                if tile is None or not is_solid_class(tile.collision):
                    continue
                fp = self.footprints.footprint_for(tile.type)
                if fp is None or fp.is_empty:
                    continue
                fl, ft, fr, fb = fp.rect_at(ax, ay)
                if right > fl and left < fr and bottom > ft and top < fb:
                    return True
        return False


def _hits_npc(x: float, y: float, half: float,
              npcs: Iterable[NpcObstacle]) -> bool:
    for npc in npcs:
        if not npc.tangible:
            continue
        if math.hypot(x - npc.x, y - npc.y) < npc.collision_radius + half:
            return True
    return False


def _npc_blocks_move(x0: float, y0: float, x1: float, y1: float, half: float,
                     npcs: Iterable[NpcObstacle]) -> bool:
    for npc in npcs:
        if not npc.tangible:
            continue
        after = math.hypot(x1 - npc.x, y1 - npc.y)
        if after < npc.collision_radius + half and after < math.hypot(x0 - npc.x, y0 - npc.y):
            return True
    return False
