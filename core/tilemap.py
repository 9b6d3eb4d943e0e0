"""core/tilemap.py — Tile grid and per-tile collision lookup.

A ``TileMap`` is the tile/collision oracle the movement core reads:
it answers "what is at (x, y)" with a tile type and a collision class.
Maps are stored row-major (``tiles[y][x]``) like the zone maps.

ASCII maps are handy for arenas and tests::

    m = TileMap.from_rows([
        "....#",
        ".##.#",
        ".....",
    ])

Legend (``DEFAULT_LEGEND``): ``.`` grass, ``=`` path, ``#`` wall,
``~`` water, ``r`` rock, ``d`` desk, ``b`` bush, ``t`` tree,
``T`` big tree, ``C`` cottage, ``c`` cherry tree.
"""

from __future__ import annotations
from dataclasses import dataclass

from core.constants import (
    DEFAULT_COLLISION, COLLISION_WALKABLE,
    TILE_GRASS, TILE_PATH, TILE_WALL, TILE_WATER, TILE_ROCK, TILE_DESK,
    TILE_BUSH, TILE_TREE, TILE_TREE_BIG, TILE_COTTAGE, TILE_CHERRY,
)


DEFAULT_LEGEND: dict[str, int] = {
    ".": TILE_GRASS,
    "=": TILE_PATH,
    "#": TILE_WALL,
    "~": TILE_WATER,
    "r": TILE_ROCK,
    "d": TILE_DESK,
    "b": TILE_BUSH,
    "t": TILE_TREE,
    "T": TILE_TREE_BIG,
    "C": TILE_COTTAGE,
    "c": TILE_CHERRY,
}


@dataclass(frozen=True)
class TileData:
    """What the oracle knows about one tile."""
    type: int
    collision: str


class TileMap:
    """Rectangular tile grid with a tile-type → collision-class table."""

    def __init__(self, width: int, height: int,
                 tiles: list[list[int]] | None = None,
                 collision: dict[int, str] | None = None,
                 name: str = "map"):
        self.name = name
        self.width = width
        self.height = height
        if tiles is None:
            tiles = [[TILE_GRASS] * width for _ in range(height)]
        self.tiles = tiles
        self.collision = dict(collision or DEFAULT_COLLISION)

    @classmethod
    def from_rows(cls, rows: list[str], legend: dict[str, int] | None = None,
                  collision: dict[int, str] | None = None,
                  name: str = "map") -> TileMap:
        """Build a map from equal-length ASCII rows (top row = y 0)."""
        legend = legend or DEFAULT_LEGEND
        height = len(rows)
        width = len(rows[0]) if height else 0
        tiles = [[legend[ch] for ch in row] for row in rows]
        return cls(width, height, tiles, collision, name)

    # -- Queries --

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile_at(self, x: int, y: int) -> TileData | None:
        """Tile type + collision class at (x, y), or ``None`` off-map."""
        if not self.in_bounds(x, y):
            return None
        t = self.tiles[y][x]
        return TileData(t, self.collision.get(t, COLLISION_WALKABLE))

    # -- Edits --

    def set_tile(self, x: int, y: int, tile_type: int) -> None:
        """Overwrite one tile.  Out-of-bounds writes are ignored."""
        if self.in_bounds(x, y):
            self.tiles[y][x] = tile_type

    def snapshot(self) -> TileMap:
        """Return a copy that later ``set_tile`` calls cannot reach."""
        return _FrozenTileMap(self)

    def __repr__(self) -> str:
        return f"TileMap({self.name!r}, {self.width}x{self.height})"


class _FrozenTileMap(TileMap):
    """Read-only copy used for the duration of one planning call."""

    def __init__(self, src: TileMap):
        super().__init__(
            src.width, src.height,
            tuple(tuple(row) for row in src.tiles),
            src.collision, src.name,
        )

    def set_tile(self, x: int, y: int, tile_type: int) -> None:
        raise TypeError("tile map snapshot is read-only")

    def snapshot(self) -> TileMap:
        return self
