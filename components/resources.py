"""components.resources — Player marker and world-level singletons."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Player:
    """Marks the player entity.

    ``animate_when_idle`` keeps the walk cycle flapping while standing
    still (fairy / hover form).
    """
    speed: float = 5.0             # tiles per second
    skin: str = "character1"
    animate_when_idle: bool = False


@dataclass
class GameClock:
    """Milliseconds since session start; the ``now`` passed to controllers."""
    now_ms: float = 0.0

    def advance(self, dt: float) -> float:
        self.now_ms += dt * 1000.0
        return self.now_ms
