"""core/constants.py — Shared constants used across the codebase.

Centralises magic numbers so there's exactly one place to change them.

Unit System
-----------
All positions are measured in **tiles**.  A position's integer part is
the tile index; the fractional part is the offset inside that tile, so
the centre of tile (3, 7) is (3.5, 7.5).

    Distance / position     tiles
    Speed                   tiles per second
    Time (tick)             s       (``dt`` passed to the controllers)
    Time (clock)            ms      (``now`` passed to the controllers)

Rendering (out of scope here) converts to pixels via ``TILE_SIZE``.
"""

# ── Tile IDs ────────────────────────────────────────────────────────
TILE_GRASS      = 0
TILE_PATH       = 1
TILE_ROCK       = 2
TILE_WATER      = 3
TILE_WALL       = 4
TILE_FLOOR      = 5
TILE_DESK       = 6
TILE_BUSH       = 7
TILE_TREE       = 8
TILE_TREE_BIG   = 9
TILE_COTTAGE    = 10
TILE_CHERRY     = 11

# ── Collision classes ───────────────────────────────────────────────
COLLISION_WALKABLE = "walkable"
COLLISION_SOLID    = "solid"
COLLISION_DESK     = "desk"      # solid for movement, special for items

SOLID_CLASSES = frozenset({COLLISION_SOLID, COLLISION_DESK})

# Default tile-type → collision-class table.  Anchor tiles of
# multi-tile sprites are solid; their real extent comes from the
# sprite footprint, not from the tile itself.
DEFAULT_COLLISION: dict[int, str] = {
    TILE_GRASS:     COLLISION_WALKABLE,
    TILE_PATH:      COLLISION_WALKABLE,
    TILE_FLOOR:     COLLISION_WALKABLE,
    TILE_ROCK:      COLLISION_SOLID,
    TILE_WATER:     COLLISION_SOLID,
    TILE_WALL:      COLLISION_SOLID,
    TILE_DESK:      COLLISION_DESK,
    TILE_BUSH:      COLLISION_SOLID,
    TILE_TREE:      COLLISION_SOLID,
    TILE_TREE_BIG:  COLLISION_SOLID,
    TILE_COTTAGE:   COLLISION_SOLID,
    TILE_CHERRY:    COLLISION_SOLID,
}


def is_solid_class(collision_class: str) -> bool:
    """True if *collision_class* blocks movement."""
    return collision_class in SOLID_CLASSES


# ── Avatar ──────────────────────────────────────────────────────────
PLAYER_SIZE = 0.8                  # fraction of a tile
PLAYER_HALF = PLAYER_SIZE / 2      # 0.4, margin used by every check
PLAYER_SPEED = 5.0                 # tiles/s

# ── Animation / audio timing (ms) ───────────────────────────────────
ANIMATION_INTERVAL_MS = 150
FOOTSTEP_INTERVAL_MS = 280
DEFAULT_FRAME_COUNT = 3

# ── Pathfinding ─────────────────────────────────────────────────────
MAX_PATH_ITERATIONS = 2000
WAYPOINT_THRESHOLD = 0.15          # tiles
MIN_VECTOR_LENGTH = 0.001

# Render
TILE_SIZE = 32
