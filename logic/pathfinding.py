"""logic/pathfinding.py — A* pathfinding on the tile grid.

Click-to-move planning
----------------------
4-directional A* with unit step cost and a Manhattan heuristic (both
admissible and consistent for this move set).  Maps are small (tens of
tiles across), so the open set is a plain list scanned linearly for
the lowest f-score.  That scan keeps the *first* lowest entry, and
neighbours are always pushed in the order up, down, left, right, so
identical inputs always produce the identical path.

Walkability comes from ``WalkabilityResolver.is_walkable`` on a frozen
snapshot of the map, with the NPC list copied once per call.

Stop-adjacent mode
------------------
When the goal is an NPC (or any occupied tile) the planner targets a
neighbour instead: below, above, left, right first, then the four
diagonals.  The goal tile itself is never crossed, so the first
neighbour reachable around it wins.

Public API
----------
``find_path(resolver, start, goal, ...)`` → ``list[(x, y)]`` or ``None``
``find_adjacent_walkable_tile(resolver, tile, npcs)`` → ``(tx, ty)`` or ``None``
``path_length(path)`` → number of steps
"""

from __future__ import annotations
import math
from typing import Iterable, Optional

from core.collision import NpcObstacle, WalkabilityResolver
from core.constants import MAX_PATH_ITERATIONS
from core.tuning import get as _tun


Waypoint = tuple[float, float]

# Expansion order doubles as the tie-break rule; do not reorder.
_DIRS = (
    ( 0, -1),   # up
    ( 0,  1),   # down
    (-1,  0),   # left
    ( 1,  0),   # right
)

_ADJ_CARDINAL = (
    ( 0,  1),   # below
    ( 0, -1),   # above
    (-1,  0),   # left
    ( 1,  0),   # right
)
_ADJ_DIAGONAL = (
    (-1,  1),
    ( 1,  1),
    (-1, -1),
    ( 1, -1),
)


class _Node:
    __slots__ = ("x", "y", "g", "h", "f", "parent")

    def __init__(self, x: int, y: int, g: int, h: int, parent: Optional[_Node]):
        self.x = x
        self.y = y
        self.g = g
        self.h = h
        self.f = g + h
        self.parent = parent


def heuristic(ax: int, ay: int, bx: int, by: int) -> int:
    """Manhattan distance between two tiles."""
    return abs(ax - bx) + abs(ay - by)


def tile_of(pos: Waypoint) -> tuple[int, int] | None:
    """Floor a position to its tile, or ``None`` for non-finite input."""
    x, y = pos
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return int(math.floor(x)), int(math.floor(y))


def tile_center(tx: int, ty: int) -> Waypoint:
    return (tx + 0.5, ty + 0.5)


def path_length(path: list[Waypoint] | None) -> int:
    """Number of steps in *path* (0 for Idle / already there)."""
    return len(path) if path else 0


def find_adjacent_walkable_tiles(
    resolver: WalkabilityResolver,
    tile: tuple[int, int],
    npcs: Iterable[NpcObstacle] | None = None,
) -> list[tuple[int, int]]:
    """Every walkable neighbour of *tile*, in preference order."""
    tx, ty = tile
    return [(tx + dx, ty + dy) for dx, dy in _ADJ_CARDINAL + _ADJ_DIAGONAL
            if resolver.is_walkable(tx + dx, ty + dy, npcs)]


def find_adjacent_walkable_tile(
    resolver: WalkabilityResolver,
    tile: tuple[int, int],
    npcs: Iterable[NpcObstacle] | None = None,
) -> tuple[int, int] | None:
    """First walkable neighbour of *tile* (cardinals, then diagonals)."""
    found = find_adjacent_walkable_tiles(resolver, tile, npcs)
    return found[0] if found else None


def find_path(
    resolver: WalkabilityResolver,
    start: Waypoint,
    goal: Waypoint,
    *,
    npcs: Iterable[NpcObstacle] | None = None,
    stop_adjacent: bool = False,
    max_iterations: int | None = None,
) -> list[Waypoint] | None:
    """A* from *start* to *goal* on the resolver's tile grid.

    Parameters
    ----------
    resolver : WalkabilityResolver
        Map + footprint rules.  Snapshotted for the duration of the call.
    start, goal : (float, float)
        Positions in tile units; floored to tiles.
    npcs : iterable of NpcObstacle | None
        NPCs to treat as obstacles.  Copied once.
    stop_adjacent : bool
        Path to a walkable neighbour of the goal tile instead of onto it.
        Neighbours are tried in preference order; the first one reachable
        without crossing the goal tile wins.
    max_iterations : int | None
        Node-expansion ceiling per search.  Defaults to tuning
        ``pathfinding.max_iterations``.  Hitting it means "no path".

    Returns
    -------
    list[(float, float)] | None
        Tile-centre waypoints, excluding the start tile.  ``[]`` when
        the start tile already is the target.  ``None`` if no path.
    """
    if max_iterations is None:
        max_iterations = int(_tun("pathfinding", "max_iterations", MAX_PATH_ITERATIONS))

    start_tile = tile_of(start)
    goal_tile = tile_of(goal)
    if start_tile is None or goal_tile is None:
        return None

    grid = resolver.snapshot()
    npc_snapshot = tuple(npcs) if npcs is not None else None

    # Walkability is pure for a fixed snapshot, so memoise it per call.
    walk_cache: dict[tuple[int, int], bool] = {}

    def walkable(x: int, y: int) -> bool:
        key = (x, y)
        hit = walk_cache.get(key)
        if hit is None:
            hit = grid.is_walkable(x, y, npc_snapshot)
            walk_cache[key] = hit
        return hit

    if not stop_adjacent:
        if not walkable(*goal_tile):
            return None
        return _search(walkable, start_tile, goal_tile, set(), max_iterations)

    candidates = find_adjacent_walkable_tiles(grid, goal_tile, npc_snapshot)
    for target in candidates:
        # Never walk through the tile being approached
        path = _search(walkable, start_tile, target, {goal_tile}, max_iterations)
        if path is not None:
            return path
    return None  # enclosed, or no neighbour reachable


def _search(walkable, start_tile: tuple[int, int], target: tuple[int, int],
            closed: set[tuple[int, int]], max_iterations: int) -> list[Waypoint] | None:
    if start_tile == target:
        return []

    gx, gy = target
    sx, sy = start_tile

    open_list: list[_Node] = [_Node(sx, sy, 0, heuristic(sx, sy, gx, gy), None)]
    open_index: dict[tuple[int, int], _Node] = {(sx, sy): open_list[0]}

    iterations = 0
    while open_list and iterations < max_iterations:
        iterations += 1

        # Lowest f wins; on ties the earliest-inserted node is kept
        lowest = 0
        for i in range(1, len(open_list)):
            if open_list[i].f < open_list[lowest].f:
                lowest = i
        current = open_list[lowest]

        if current.x == gx and current.y == gy:
            return _reconstruct(current)

        open_list.pop(lowest)
        del open_index[(current.x, current.y)]
        closed.add((current.x, current.y))

        for dx, dy in _DIRS:
            nx, ny = current.x + dx, current.y + dy
            key = (nx, ny)
            if key in closed:
                continue
            if not walkable(nx, ny):
                continue

            tentative_g = current.g + 1
            neighbour = open_index.get(key)
            if neighbour is None:
                neighbour = _Node(nx, ny, tentative_g, heuristic(nx, ny, gx, gy), current)
                open_list.append(neighbour)
                open_index[key] = neighbour
            elif tentative_g < neighbour.g:
                neighbour.g = tentative_g
                neighbour.f = tentative_g + neighbour.h
                neighbour.parent = current

    if open_list:
        print(f"[PATH] search exhausted after {iterations} iterations "
              f"({start_tile} → {target})")
    return None  # no path found


def _reconstruct(goal_node: _Node) -> list[Waypoint]:
    """Walk parent links back to the start; drop the start tile."""
    path: list[Waypoint] = []
    node: Optional[_Node] = goal_node
    while node is not None:
        path.append(tile_center(node.x, node.y))
        node = node.parent
    path.reverse()
    return path[1:]
