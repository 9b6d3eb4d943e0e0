"""components — ECS component dataclasses, organised by domain.

Submodules
----------
spatial        Position, Facing, Direction, Collider
rendering      Identity, WalkCycle
resources      Player, GameClock
dev_log        DevLog

All public names are re-exported here so code can do
``from components import Position``.
"""

# ── Spatial ──────────────────────────────────────────────────────────
from components.spatial import Position, Facing, Direction, Collider

# ── Rendering ────────────────────────────────────────────────────────
from components.rendering import Identity, WalkCycle, frame_counts_for

# ── World resources / singletons ─────────────────────────────────────
from components.resources import Player, GameClock

# ── Debug ────────────────────────────────────────────────────────────
from components.dev_log import DevLog

__all__ = [
    # spatial
    "Position", "Facing", "Direction", "Collider",
    # rendering
    "Identity", "WalkCycle", "frame_counts_for",
    # resources
    "Player", "GameClock",
    # debug
    "DevLog",
]
