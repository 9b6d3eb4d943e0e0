"""logic/click_to_move.py — Path-following state machine.

Holds the path produced by the planner and turns it into one unit
movement vector per tick.

States
------
Idle       ``path is None``
Following  ``path`` set, ``waypoint_index < len(path)``

Reaching the end of the path collapses straight back to Idle.

``get_movement_vector`` both reads and advances progress, so the
per-tick driver must call it exactly once per tick (before movement is
integrated) or waypoints get skipped.  ``peek_waypoint`` and
``advance_waypoint`` expose the two halves separately.

Paths are never edited in place: a new request replaces the whole list.
"""

from __future__ import annotations
import math
from typing import Callable, Iterable, Optional

from core.collision import NpcObstacle, WalkabilityResolver
from core.constants import WAYPOINT_THRESHOLD, MIN_VECTOR_LENGTH
from core.tuning import get as _tun
from logic.pathfinding import Waypoint, find_path


NpcSource = Callable[[], Iterable[NpcObstacle]]


class ClickToMove:
    """Owns the current path, progress index and UI bookkeeping."""

    def __init__(self, resolver: WalkabilityResolver,
                 npc_source: NpcSource | None = None, *,
                 enabled: bool | None = None,
                 waypoint_threshold: float | None = None,
                 max_iterations: int | None = None):
        self.resolver = resolver
        self.npc_source = npc_source
        if enabled is None:
            enabled = bool(_tun("click_to_move", "enabled", True))
        self.enabled = enabled
        if waypoint_threshold is None:
            waypoint_threshold = float(_tun("pathfinding", "waypoint_threshold", WAYPOINT_THRESHOLD))
        self.waypoint_threshold = waypoint_threshold
        self.max_iterations = max_iterations

        self._path: tuple[Waypoint, ...] | None = None
        self._index = 0
        self._destination: Waypoint | None = None
        self._target_npc: NpcObstacle | None = None
        self._on_arrival: Callable[[], None] | None = None

    # ── read-only state ──────────────────────────────────────────────

    @property
    def path(self) -> tuple[Waypoint, ...] | None:
        return self._path

    @property
    def waypoint_index(self) -> int:
        return self._index

    @property
    def destination(self) -> Waypoint | None:
        """Final waypoint of the current path (destination marker)."""
        return self._destination

    @property
    def target_npc(self) -> NpcObstacle | None:
        return self._target_npc

    @property
    def is_pathing(self) -> bool:
        return self._path is not None and self._index < len(self._path)

    # ── transitions ──────────────────────────────────────────────────

    def set_destination(self, start: Waypoint, world_pos: Waypoint,
                        target_npc: NpcObstacle | None = None,
                        on_arrival: Callable[[], None] | None = None) -> bool:
        """Plan from *start* to *world_pos* (or up to *target_npc*).

        Returns ``True`` if a path was found, including the empty
        "already there" path.  On ``False`` nothing changes.
        """
        if not self.enabled:
            return False

        npcs = list(self.npc_source()) if self.npc_source is not None else []
        if target_npc is not None:
            goal = (target_npc.x, target_npc.y)
            # Walking up to someone: don't let them block their own approach
            npcs = [n for n in npcs if n.id != target_npc.id]
            path = find_path(self.resolver, start, goal, npcs=npcs,
                             stop_adjacent=True, max_iterations=self.max_iterations)
        else:
            path = find_path(self.resolver, start, world_pos, npcs=npcs,
                             max_iterations=self.max_iterations)

        if path is None:
            return False

        if not path:
            # Already there: supersedes any old path, then collapses to Idle
            self.cancel_path()
            return True

        self._path = tuple(path)
        self._index = 0
        self._destination = path[-1]
        self._target_npc = target_npc
        self._on_arrival = on_arrival
        return True

    def cancel_path(self) -> None:
        """Drop everything.  Safe to call when already Idle."""
        self._path = None
        self._index = 0
        self._destination = None
        self._target_npc = None
        self._on_arrival = None

    def peek_waypoint(self) -> Waypoint | None:
        """Current waypoint, or ``None`` when Idle.  No side effects."""
        if not self.is_pathing:
            return None
        return self._path[self._index]

    def advance_waypoint(self) -> bool:
        """Move to the next waypoint.

        Returns ``False`` (and fires the arrival callback, then goes
        Idle) when that exhausts the path.
        """
        if not self.is_pathing:
            return False
        self._index += 1
        if self._index >= len(self._path):
            callback = self._on_arrival
            self.cancel_path()
            if callback is not None:
                callback()
            return False
        return True

    def get_movement_vector(self, pos: Waypoint) -> tuple[float, float] | None:
        """Unit vector toward the current waypoint, or ``None``.

        Advances at most one waypoint per call when *pos* is within
        ``waypoint_threshold`` of the current one.  Call once per tick.
        """
        target = self.peek_waypoint()
        if target is None:
            return None

        px, py = pos
        if math.hypot(target[0] - px, target[1] - py) < self.waypoint_threshold:
            if not self.advance_waypoint():
                return None  # arrived
            target = self.peek_waypoint()

        return _unit(target[0] - px, target[1] - py)


def _unit(dx: float, dy: float) -> Optional[tuple[float, float]]:
    dist = math.hypot(dx, dy)
    if dist < MIN_VECTOR_LENGTH:
        return None
    return dx / dist, dy / dist
