"""components.spatial — Position, facing, and collision shapes.

All coordinates and dimensions are in tiles.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class Position:
    x: float = 0.0        # tiles
    y: float = 0.0        # tiles

    def tile(self) -> tuple[int, int]:
        """Integer tile coordinate under this position."""
        return int(math.floor(self.x)), int(math.floor(self.y))

    def as_tuple(self) -> tuple[float, float]:
        return self.x, self.y


@dataclass
class Facing:
    """Which direction an entity faces.

    Updated from the movement vector each tick; left alone while the
    entity stands still, so a stopped character keeps its last heading.
    """
    direction: Direction = Direction.DOWN


@dataclass
class Collider:
    """Circular NPC body.  ``radius <= 0`` means walk-through."""
    radius: float = 0.0   # tiles
