"""components.rendering — Visual identity and walk animation state."""

from __future__ import annotations
from dataclasses import dataclass, field

from core.constants import DEFAULT_FRAME_COUNT
from core.tuning import section as _tun_sec
from components.spatial import Direction


@dataclass
class Identity:
    name: str = "unnamed"
    kind: str = "npc"          # "npc" or "player"


# Built-in skins, used when tuning has no [skins.<id>] table.
DEFAULT_SKINS: dict[str, dict[str, int]] = {
    "character1": {"up": 3, "down": 3, "left": 4, "right": 4},
    "character2": {"up": 2, "down": 2, "left": 3, "right": 3},
}


def frame_counts_for(skin: str) -> dict[str, int]:
    """Walk frames per direction for *skin*.

    Tuning wins over the built-in table; unknown skins fall back to
    ``character1``.
    """
    counts = _tun_sec(f"skins.{skin}")
    if not counts:
        counts = DEFAULT_SKINS.get(skin) or _tun_sec("skins.character1") or DEFAULT_SKINS["character1"]
    return {k: int(v) for k, v in counts.items()}


@dataclass
class WalkCycle:
    """Ping-pong walk animation state.

    ``frame`` is the sprite index for the current direction, ``step``
    is +1 while ascending and -1 while descending.
    """
    frame: int = 0
    step: int = 1
    last_frame_ms: float = 0.0
    last_footstep_ms: float = 0.0
    frame_counts: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_SKINS["character1"]))

    @classmethod
    def for_skin(cls, skin: str) -> WalkCycle:
        return cls(frame_counts=frame_counts_for(skin))

    def max_frame(self, direction: Direction) -> int:
        return self.frame_counts.get(direction.value, DEFAULT_FRAME_COUNT) - 1

    def reset(self) -> None:
        """Back to the base pose, ready to start the next step ascending."""
        self.frame = 0
        self.step = 1
