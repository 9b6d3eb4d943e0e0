"""logic/player_controller.py — Per-tick owner of the player's motion.

Glues the path-following state machine (``ClickToMove``) to the
movement integrator (``MovementController``) and decides whose intent
owns the avatar at any instant.

Each tick, in this order and exactly once:

    vector = click.get_movement_vector(pos)      # may advance / arrive
    result = motion.step(dt, now, held, vector)  # keys beat the path

Any competing source of intent or scene discontinuity drops the
in-flight path instead of trying to resume it:

    movement keys held while pathing      → "input"
    cutscene starts                       → "cutscene"
    modal UI overlay opens                → "ui"
    NPC dialogue opens                    → "dialogue"
    radial / context menu opens           → "menu"
    map changes                           → "map"
    teleport                              → "teleport"

Usage::

    ctl = PlayerController(world, player_eid, tilemap, input=input_mgr)
    ctl.set_destination((9.5, 9.5))
    ...
    result = ctl.update_movement(dt, now_ms)
"""

from __future__ import annotations
from typing import Callable

from components import DevLog, Facing, Player, Position, WalkCycle, Collider
from core.collision import NpcObstacle, WalkabilityResolver
from core.constants import PLAYER_HALF
from core.ecs import World
from core.events import (
    EventBus, PathPlanned, PathRejected, PathCancelled,
    DestinationReached, Footstep, MapChanged,
)
from core.sprites import FootprintTable
from core.tilemap import TileMap
from core.tuning import get as _tun
from logic.click_to_move import ClickToMove
from logic.movement import MOVE_INTENTS, MovementController, MovementResult
from logic.pathfinding import Waypoint, path_length


class PlayerController:
    """Owns the player's Position / Facing / WalkCycle and current path."""

    def __init__(self, world: World, eid: int, tilemap: TileMap, *,
                 footprints: FootprintTable | None = None,
                 input=None,
                 max_iterations: int | None = None):
        self.world = world
        self.eid = eid
        self.input = input  # anything with .held(intent) -> bool

        half = float(_tun("movement", "player_size", PLAYER_HALF * 2)) / 2
        self.resolver = WalkabilityResolver(tilemap, footprints, half)

        player: Player = world.get(eid, Player) or Player()
        self.player = player
        if not world.has(eid, Position):
            world.add(eid, Position())
        if not world.has(eid, Facing):
            world.add(eid, Facing())
        if not world.has(eid, WalkCycle):
            world.add(eid, WalkCycle.for_skin(player.skin))
        self.click = ClickToMove(self.resolver, self.npc_snapshot,
                                 max_iterations=max_iterations)
        self.motion = MovementController(
            self.resolver,
            world.get(eid, Position),
            world.get(eid, Facing),
            world.get(eid, WalkCycle),
            speed=player.speed,
            animate_when_idle=player.animate_when_idle,
            on_footstep=self._on_footstep,
        )

        self._now = 0.0
        self._ui_active = False
        self._cutscene = False
        self._dialogue_npc: int | None = None
        self._radial_menu = False

    # ── read accessors ───────────────────────────────────────────────

    @property
    def position(self) -> Position:
        return self.motion.position

    @property
    def direction(self):
        return self.motion.facing.direction

    @property
    def animation_frame(self) -> int:
        return self.motion.walk.frame

    @property
    def is_pathing(self) -> bool:
        return self.click.is_pathing

    @property
    def destination(self) -> Waypoint | None:
        return self.click.destination

    @property
    def target_npc(self) -> NpcObstacle | None:
        return self.click.target_npc

    @property
    def interface_blocked(self) -> bool:
        return (self._ui_active or self._cutscene
                or self._dialogue_npc is not None or self._radial_menu)

    # ── NPC roster ───────────────────────────────────────────────────

    def npc_snapshot(self) -> list[NpcObstacle]:
        """Fresh copy of every NPC body in the world (never cached)."""
        return [
            NpcObstacle(eid, pos.x, pos.y, col.radius)
            for eid, pos, col in self.world.query(Position, Collider)
            if eid != self.eid
        ]

    def _npc_obstacle(self, npc_eid: int) -> NpcObstacle | None:
        pos = self.world.get(npc_eid, Position)
        if pos is None:
            return None
        col = self.world.get(npc_eid, Collider)
        return NpcObstacle(npc_eid, pos.x, pos.y, col.radius if col else None)

    # ── destination requests ─────────────────────────────────────────

    def set_destination(self, world_pos: Waypoint, target_npc: int | None = None,
                        on_arrival: Callable[[], None] | None = None) -> bool:
        """Start walking to *world_pos*, or up to NPC *target_npc*.

        Returns ``False`` (and changes nothing) when no route exists,
        click-to-move is disabled, or an overlay currently owns input.
        """
        if self.interface_blocked:
            return False

        npc = None
        if target_npc is not None:
            npc = self._npc_obstacle(target_npc)
            if npc is None:
                return False

        def arrived():
            self._on_arrival(npc)
            if on_arrival is not None:
                on_arrival()

        start = self.position.as_tuple()
        was_pathing = self.click.is_pathing
        if not self.click.set_destination(start, world_pos, npc, on_arrival=arrived):
            gx, gy = (npc.x, npc.y) if npc is not None else world_pos
            print(f"[PATH] no route from ({start[0]:.2f}, {start[1]:.2f}) "
                  f"to ({gx:.2f}, {gy:.2f})")
            self._emit(PathRejected(gx, gy, target_npc))
            self._log("path", "rejected", {"goal": (gx, gy), "npc": target_npc})
            return False

        if self.click.is_pathing:
            dx, dy = self.click.destination
            steps = path_length(self.click.path)
            self._emit(PathPlanned(dx, dy, steps, target_npc))
            self._log("path", "planned", {"dest": (dx, dy), "steps": steps, "npc": target_npc})
        elif was_pathing:
            # Already there: the old path is gone all the same
            self._emit(PathCancelled("superseded"))
            self._log("path", "cancelled", {"reason": "superseded"})
        return True

    def cancel_path(self, reason: str = "manual") -> None:
        """Drop the current path.  No-op (and no event) when Idle."""
        was_pathing = self.click.is_pathing
        self.click.cancel_path()
        if was_pathing:
            self._emit(PathCancelled(reason))
            self._log("path", "cancelled", {"reason": reason})

    # ── cancellation triggers ────────────────────────────────────────

    def sync_interface(self, *, ui_active: bool = False,
                       cutscene_playing: bool = False,
                       dialogue_npc: int | None = None,
                       radial_menu: bool = False) -> None:
        """Report which overlays are open this frame.

        Any of them being active cancels the in-flight path and blocks
        new destination requests until they close.
        """
        self._ui_active = ui_active
        self._cutscene = cutscene_playing
        self._dialogue_npc = dialogue_npc
        self._radial_menu = radial_menu
        if cutscene_playing:
            self.cancel_path("cutscene")
        elif ui_active:
            self.cancel_path("ui")
        elif dialogue_npc is not None:
            self.cancel_path("dialogue")
        elif radial_menu:
            self.cancel_path("menu")

    def change_map(self, tilemap: TileMap, spawn: Waypoint | None = None) -> None:
        """Switch to *tilemap*; the old path is meaningless there."""
        self.cancel_path("map")
        resolver = WalkabilityResolver(tilemap, self.resolver.footprints, self.resolver.half_size)
        self.resolver = resolver
        self.click.resolver = resolver
        self.motion.resolver = resolver
        if spawn is not None:
            self.position.x, self.position.y = spawn
        self._emit(MapChanged(tilemap.name, self.position.as_tuple()))
        self._log("move", "map changed", {"map": tilemap.name})

    def teleport(self, pos: Waypoint) -> None:
        """Place the avatar at *pos* without a collision check."""
        self.cancel_path("teleport")
        self.position.x, self.position.y = pos

    # ── per-tick update ──────────────────────────────────────────────

    def update_movement(self, dt: float, now: float) -> MovementResult:
        """Advance one simulation tick.  *now* is in milliseconds."""
        self._now = now
        held = self._held_intents()
        path_vector = self.click.get_movement_vector(self.position.as_tuple())
        result = self.motion.step(dt, now, held, path_vector, self.npc_snapshot())

        if result.is_keyboard_input and self.click.is_pathing:
            self.cancel_path("input")
        return result

    # ── internal ─────────────────────────────────────────────────────

    def _held_intents(self) -> set[str]:
        if self.input is None:
            return set()
        return {intent for intent in MOVE_INTENTS if self.input.held(intent)}

    def _on_arrival(self, npc: NpcObstacle | None) -> None:
        pos = self.position
        npc_id = npc.id if npc is not None else None
        self._emit(DestinationReached(pos.x, pos.y, npc_id))
        self._log("path", "arrived", {"at": (pos.x, pos.y), "npc": npc_id})

    def _on_footstep(self, x: float, y: float) -> None:
        self._emit(Footstep(x, y))

    def _emit(self, event) -> None:
        bus = self.world.res(EventBus)
        if bus is not None:
            bus.emit(event)

    def _log(self, cat: str, msg: str, details: dict | None = None) -> None:
        log = self.world.res(DevLog)
        if log is not None:
            log.record(self.eid, cat, msg, t=self._now, details=details)
