"""core/sprites.py — Multi-tile sprite geometry.

Some tile types host objects larger than one tile (trees, cottages).
Each one is described by a ``SpriteMetadata`` entry: the rectangle the
sprite *renders* in, plus optional collision overrides.  Collision and
rendering rectangles are independent: a tree draws 2×3 tiles but only
its trunk blocks.

All offsets are in tiles, relative to the anchor tile's top-left
corner.  A footprint of size 0×0 means "no collision beyond the tile
lookup".

The table is static configuration: lookups never mutate it.
"""

from __future__ import annotations
import math
from dataclasses import dataclass

from core.constants import (
    TILE_BUSH, TILE_TREE, TILE_TREE_BIG, TILE_COTTAGE, TILE_CHERRY,
    PLAYER_HALF,
)


@dataclass(frozen=True)
class CollisionFootprint:
    """Collision rectangle of a multi-tile object (tile units)."""
    width: float
    height: float
    offset_x: float = 0.0
    offset_y: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0

    def rect_at(self, tx: int, ty: int) -> tuple[float, float, float, float]:
        """Absolute (left, top, right, bottom) for an anchor at (tx, ty)."""
        left = tx + self.offset_x
        top = ty + self.offset_y
        return left, top, left + self.width, top + self.height

    def reach(self) -> float:
        """Furthest distance (in tiles) the rectangle extends from its anchor."""
        return max(
            abs(self.offset_x), abs(self.offset_x + self.width),
            abs(self.offset_y), abs(self.offset_y + self.height),
        )


@dataclass(frozen=True)
class SpriteMetadata:
    tile_type: int
    sprite_width: float
    sprite_height: float
    offset_x: float
    offset_y: float
    # Collision overrides; ``None`` falls back to the sprite rectangle.
    collision_width: float | None = None
    collision_height: float | None = None
    collision_offset_x: float | None = None
    collision_offset_y: float | None = None

    def footprint(self) -> CollisionFootprint:
        def pick(override, fallback):
            return fallback if override is None else override
        return CollisionFootprint(
            width=pick(self.collision_width, self.sprite_width),
            height=pick(self.collision_height, self.sprite_height),
            offset_x=pick(self.collision_offset_x, self.offset_x),
            offset_y=pick(self.collision_offset_y, self.offset_y),
        )


# ── Default sprite table ─────────────────────────────────────────────

SPRITE_METADATA: tuple[SpriteMetadata, ...] = (
    # 2×2 bush, collision only at the base tile
    SpriteMetadata(TILE_BUSH, 2, 2, -0.5, -1,
                   collision_width=1, collision_height=1,
                   collision_offset_x=0, collision_offset_y=0),
    # 2×3 tree, thin trunk
    SpriteMetadata(TILE_TREE, 2, 3, -0.5, -1,
                   collision_width=0.2, collision_height=0.2,
                   collision_offset_x=0.3, collision_offset_y=1),
    # 3×4 tree
    SpriteMetadata(TILE_TREE_BIG, 3, 4, -1, -3,
                   collision_width=0.5, collision_height=0.5,
                   collision_offset_x=0.5, collision_offset_y=0),
    # 6×5 cottage: front wall blocks, roof does not
    SpriteMetadata(TILE_COTTAGE, 6, 5, -3, -4,
                   collision_width=3.2, collision_height=1.5,
                   collision_offset_x=-1.7, collision_offset_y=-1.2),
    # 4×4 cherry tree
    SpriteMetadata(TILE_CHERRY, 4, 4, -1.5, -3,
                   collision_width=0.3, collision_height=0.3,
                   collision_offset_x=0.35, collision_offset_y=0.35),
)


class FootprintTable:
    """Tile type → optional ``CollisionFootprint`` lookup.

    ``search_radius`` is how far (in whole tiles) a resolver must look
    around a query tile to find every anchor whose footprint could
    reach it: the largest reach, plus the avatar half-width, rounded
    up, plus ``margin`` tiles.
    """

    def __init__(self, sprites: tuple[SpriteMetadata, ...] | list[SpriteMetadata] = SPRITE_METADATA,
                 margin: int = 1, half_size: float = PLAYER_HALF):
        self._footprints: dict[int, CollisionFootprint] = {}
        for meta in sprites:
            if meta.tile_type in self._footprints:
                raise ValueError(f"duplicate sprite metadata for tile type {meta.tile_type}")
            self._footprints[meta.tile_type] = meta.footprint()
        reach = max((fp.reach() for fp in self._footprints.values()), default=0.0)
        self.search_radius = int(math.ceil(reach + half_size)) + margin

    @classmethod
    def from_footprints(cls, footprints: dict[int, CollisionFootprint],
                        margin: int = 1, half_size: float = PLAYER_HALF) -> FootprintTable:
        """Build a table straight from footprints (no render data)."""
        sprites = [
            SpriteMetadata(t, fp.width, fp.height, fp.offset_x, fp.offset_y)
            for t, fp in footprints.items()
        ]
        return cls(sprites, margin, half_size)

    def footprint_for(self, tile_type: int) -> CollisionFootprint | None:
        return self._footprints.get(tile_type)

    def has_footprint(self, tile_type: int) -> bool:
        return tile_type in self._footprints

    def __len__(self) -> int:
        return len(self._footprints)
