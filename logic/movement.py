"""logic/movement.py — Avatar movement integration.

One call to ``MovementController.step`` per tick:

1. Pick the movement vector.  Held movement keys always win; the
   path vector is used only when no key is held.
2. Update facing from the dominant axis and advance the ping-pong walk
   cycle on its own timer (or reset it when standing still).
3. Move ``speed * dt`` along the vector, resolving collision one axis
   at a time (x first, then y) so the avatar slides along walls
   instead of sticking to them.
4. Clamp to the map and emit footsteps at a fixed interval.

The controller never cancels a path itself.  It only reports whether
keys were held this tick (``MovementResult.is_keyboard_input``).
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Callable, Iterable

from components.rendering import WalkCycle
from components.spatial import Direction, Facing, Position
from core.collision import NpcObstacle, WalkabilityResolver
from core.constants import (
    PLAYER_SPEED, ANIMATION_INTERVAL_MS, FOOTSTEP_INTERVAL_MS,
)
from core.tuning import get as _tun


MOVE_INTENTS = ("move_up", "move_down", "move_left", "move_right")


@dataclass
class MovementResult:
    is_moving: bool = False
    is_keyboard_input: bool = False


def key_vector(held: Iterable[str]) -> tuple[float, float, bool]:
    """Raw (dx, dy) from held movement intents, plus "any key held"."""
    held = set(held)
    dx = 0.0
    dy = 0.0
    keyboard = False
    if "move_up" in held:
        dy -= 1.0
        keyboard = True
    if "move_down" in held:
        dy += 1.0
        keyboard = True
    if "move_left" in held:
        dx -= 1.0
        keyboard = True
    if "move_right" in held:
        dx += 1.0
        keyboard = True
    return dx, dy, keyboard


def direction_from_vector(dx: float, dy: float) -> Direction | None:
    """Facing for a movement vector; ``None`` for the zero vector."""
    if dx == 0.0 and dy == 0.0:
        return None
    if abs(dx) >= abs(dy):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    return Direction.DOWN if dy > 0 else Direction.UP


def next_walk_frame(frame: int, step: int, max_frame: int) -> tuple[int, int]:
    """One ping-pong advance: 0,1,..,max,max-1,..,0,1,..

    Returns the new ``(frame, step)``.  A single-frame skin stays on 0.
    """
    if max_frame <= 0:
        return 0, 1
    nxt = frame + step
    if nxt > max_frame:
        return max_frame - 1, -1
    if nxt < 0:
        return 1, 1
    return nxt, step


class MovementController:
    """Integrates key / path vectors into the avatar's components."""

    def __init__(self, resolver: WalkabilityResolver,
                 position: Position, facing: Facing, walk: WalkCycle, *,
                 speed: float | None = None,
                 animate_when_idle: bool = False,
                 animation_interval_ms: float | None = None,
                 footstep_interval_ms: float | None = None,
                 on_footstep: Callable[[float, float], None] | None = None):
        self.resolver = resolver
        self.position = position
        self.facing = facing
        self.walk = walk
        if speed is None:
            speed = float(_tun("movement", "speed", PLAYER_SPEED))
        self.speed = speed
        self.animate_when_idle = animate_when_idle
        if animation_interval_ms is None:
            animation_interval_ms = float(_tun("movement", "animation_interval_ms", ANIMATION_INTERVAL_MS))
        self.animation_interval_ms = animation_interval_ms
        if footstep_interval_ms is None:
            footstep_interval_ms = float(_tun("movement", "footstep_interval_ms", FOOTSTEP_INTERVAL_MS))
        self.footstep_interval_ms = footstep_interval_ms
        self.on_footstep = on_footstep

    def step(self, dt: float, now: float,
             held: Iterable[str] = (),
             path_vector: tuple[float, float] | None = None,
             npcs: Iterable[NpcObstacle] | None = None) -> MovementResult:
        """Advance one tick.  *now* is in milliseconds, *dt* in seconds."""
        vx, vy, keyboard = key_vector(held)
        if not keyboard and path_vector is not None:
            vx, vy = path_vector

        is_moving = vx != 0.0 or vy != 0.0
        walk = self.walk

        if not is_moving:
            if self.animate_when_idle:
                # Hover / wing flap: alternate 1 and 2 on the walk timer
                if now - walk.last_frame_ms > self.animation_interval_ms:
                    walk.last_frame_ms = now
                    walk.frame = 2 if walk.frame == 1 else 1
            else:
                walk.reset()
            return MovementResult(False, keyboard)

        direction = direction_from_vector(vx, vy)
        if direction is not None:
            self.facing.direction = direction

        if now - walk.last_frame_ms > self.animation_interval_ms:
            walk.last_frame_ms = now
            walk.frame, walk.step = next_walk_frame(
                walk.frame, walk.step, walk.max_frame(self.facing.direction))

        self._integrate(vx, vy, dt, npcs)

        if self.on_footstep is not None and now - walk.last_footstep_ms > self.footstep_interval_ms:
            walk.last_footstep_ms = now
            self.on_footstep(self.position.x, self.position.y)

        return MovementResult(True, keyboard)

    # ── internal ─────────────────────────────────────────────────────

    def _integrate(self, vx: float, vy: float, dt: float,
                   npcs: Iterable[NpcObstacle] | None) -> None:
        mag = math.hypot(vx, vy)
        if mag == 0.0:
            return
        npcs = tuple(npcs) if npcs is not None else None
        dx = vx / mag * self.speed * dt
        dy = vy / mag * self.speed * dt

        pos = self.position
        nx = pos.x
        ny = pos.y

        # Axis-separated collision lets the avatar slide along walls
        if not self.resolver.blocks_move(nx, ny, nx + dx, ny, npcs):
            nx += dx
        if not self.resolver.blocks_move(nx, ny, nx, ny + dy, npcs):
            ny += dy

        half = self.resolver.half_size
        w = self.resolver.width
        h = self.resolver.height
        if w > 0 and h > 0:
            nx = max(half, min(w - half, nx))
            ny = max(half, min(h - half, ny))

        pos.x = nx
        pos.y = ny
