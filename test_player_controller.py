"""test_player_controller.py — End-to-end: the per-tick driver over an ECS
world, its cancellation triggers, events on the bus and DevLog records.

Run: python test_player_controller.py      (or: pytest test_player_controller.py)
"""
from __future__ import annotations
import sys, traceback, math

from core import tuning
from core.ecs import World
from core.events import (
    EventBus, PathPlanned, PathRejected, PathCancelled,
    DestinationReached, Footstep, MapChanged,
)
from core.tilemap import TileMap
from components import Collider, DevLog, Direction, Position, WalkCycle, Player
from logic.entity_factory import spawn_from_descriptor, spawn_npc, spawn_player
from logic.player_controller import PlayerController

tuning.reset()

DT = 1 / 60


class _Keys:
    """Stand-in for InputManager: only ``held`` is needed here."""

    def __init__(self, *held: str):
        self.down = set(held)

    def held(self, intent: str) -> bool:
        return intent in self.down


def _setup(rows: list[str] | None = None, keys: _Keys | None = None,
           start: tuple[float, float] = (0.5, 0.5)):
    world = World()
    bus = EventBus()
    log = DevLog()
    world.set_res(bus)
    world.set_res(log)
    tilemap = TileMap.from_rows(rows) if rows else TileMap(10, 10)
    eid = spawn_player(world, *start)
    ctl = PlayerController(world, eid, tilemap, input=keys)
    return world, bus, log, ctl


def _events(bus: EventBus, cls) -> list:
    return [e for e in bus.pending() if isinstance(e, cls)]


def _walk(ctl: PlayerController, max_ticks: int = 1000, now: float = 0.0) -> int:
    """Tick until the path is done.  Returns the number of ticks used."""
    for tick in range(1, max_ticks + 1):
        now += DT * 1000
        ctl.update_movement(DT, now)
        if not ctl.is_pathing:
            return tick
    return max_ticks


# ════════════════════════════════════════════════════════════════════════
#  Following a path
# ════════════════════════════════════════════════════════════════════════

def test_click_walks_to_far_corner():
    world, bus, log, ctl = _setup()
    arrived = []
    assert ctl.set_destination((9.5, 9.5), on_arrival=lambda: arrived.append(1))
    assert ctl.is_pathing
    assert ctl.destination == (9.5, 9.5)

    planned = _events(bus, PathPlanned)
    assert len(planned) == 1
    assert (planned[0].dest_x, planned[0].dest_y, planned[0].steps) == (9.5, 9.5, 18)

    ticks = _walk(ctl)
    assert ticks < 1000
    assert not ctl.is_pathing
    pos = ctl.position
    assert math.hypot(pos.x - 9.5, pos.y - 9.5) < 0.15
    assert arrived == [1]

    reached = _events(bus, DestinationReached)
    assert len(reached) == 1 and reached[0].target_npc is None
    assert _events(bus, Footstep)
    assert not _events(bus, PathCancelled)
    assert [e["msg"] for e in log.for_cat("path")] == ["planned", "arrived"]


def test_bus_delivers_arrival():
    world, bus, log, ctl = _setup()
    seen = []
    bus.subscribe("DestinationReached", seen.append)
    ctl.set_destination((3.5, 0.5))
    _walk(ctl)
    bus.drain()
    assert len(seen) == 1
    assert not bus.pending()


def test_accessors_track_motion():
    keys = _Keys("move_right")
    world, bus, log, ctl = _setup(keys=keys, start=(2.5, 2.5))
    for i in range(1, 4):
        ctl.update_movement(DT, 200 * i)
    assert ctl.direction == Direction.RIGHT
    assert ctl.animation_frame == 3
    assert world.get(ctl.eid, Position).x > 2.5
    assert world.get(ctl.eid, WalkCycle).frame == 3


# ════════════════════════════════════════════════════════════════════════
#  Requests that fail
# ════════════════════════════════════════════════════════════════════════

def test_rejected_request_changes_nothing():
    rows = [
        "..........",
        "..........",
        "......#...",
    ]
    world, bus, log, ctl = _setup(rows)
    assert ctl.set_destination((4.5, 1.5))
    path = ctl.click.path
    bus.clear()

    assert not ctl.set_destination((6.5, 2.5))
    assert ctl.click.path is path
    assert ctl.destination == (4.5, 1.5)
    rejected = _events(bus, PathRejected)
    assert len(rejected) == 1
    assert (rejected[0].goal_x, rejected[0].goal_y) == (6.5, 2.5)
    assert log.recent(1)[0]["msg"] == "rejected"


def test_already_there_reports_superseded_cancel():
    world, bus, log, ctl = _setup()
    assert ctl.set_destination((9.5, 9.5))
    bus.clear()

    assert ctl.set_destination((0.7, 0.2))
    assert not ctl.is_pathing
    assert [e.reason for e in _events(bus, PathCancelled)] == ["superseded"]
    assert not _events(bus, PathPlanned)
    assert log.cancel_reasons() == ["superseded"]

    bus.clear()
    assert ctl.set_destination((0.5, 0.5))
    assert bus.pending() == []


def test_missing_target_npc_refused():
    world, bus, log, ctl = _setup()
    assert not ctl.set_destination((0.0, 0.0), target_npc=999)
    assert not ctl.is_pathing


def test_disabled_click_to_move_refuses():
    world, bus, log, ctl = _setup()
    ctl.click.enabled = False
    assert not ctl.set_destination((3.5, 3.5))
    assert not ctl.is_pathing


# ════════════════════════════════════════════════════════════════════════
#  NPCs
# ════════════════════════════════════════════════════════════════════════

def test_walk_up_to_npc():
    world, bus, log, ctl = _setup(start=(5.5, 9.5))
    mira = spawn_npc(world, "Mira", 5.5, 5.5)

    assert ctl.set_destination((0.0, 0.0), target_npc=mira)
    assert ctl.destination == (5.5, 6.5)
    assert ctl.target_npc.id == mira
    assert _events(bus, PathPlanned)[0].target_npc == mira

    _walk(ctl)
    pos = ctl.position
    assert math.hypot(pos.x - 5.5, pos.y - 6.5) < 0.15
    reached = _events(bus, DestinationReached)
    assert len(reached) == 1 and reached[0].target_npc == mira


def test_bystanders_block_planning():
    rows = [
        "#####",
        ".....",
        "#####",
    ]
    world, bus, log, ctl = _setup(rows, start=(0.5, 1.5))
    guard = spawn_npc(world, "Guard", 2.5, 1.5)
    assert not ctl.set_destination((4.5, 1.5))
    world.get(guard, Collider).radius = 0.0
    assert ctl.set_destination((4.5, 1.5))


def test_npc_snapshot_is_fresh_and_skips_self():
    world, bus, log, ctl = _setup()
    world.add(ctl.eid, Collider(radius=0.4))
    npc = spawn_npc(world, "Mira", 3.5, 3.5)
    assert [n.id for n in ctl.npc_snapshot()] == [npc]
    world.get(npc, Position).x = 7.5
    assert ctl.npc_snapshot()[0].x == 7.5


# ════════════════════════════════════════════════════════════════════════
#  Cancellation triggers
# ════════════════════════════════════════════════════════════════════════

def test_movement_keys_cancel_path():
    keys = _Keys()
    world, bus, log, ctl = _setup(keys=keys)
    ctl.set_destination((0.5, 9.5))
    keys.down.add("move_right")

    result = ctl.update_movement(DT, 100)
    assert result.is_moving and result.is_keyboard_input
    assert not ctl.is_pathing
    assert ctl.destination is None
    assert ctl.position.x > 0.5 and ctl.position.y == 0.5
    assert [e.reason for e in _events(bus, PathCancelled)] == ["input"]


def test_keys_while_idle_do_not_emit_cancel():
    world, bus, log, ctl = _setup(keys=_Keys("move_down"))
    ctl.update_movement(DT, 100)
    assert not _events(bus, PathCancelled)


def test_overlays_cancel_and_block_requests():
    cases = [
        ({"ui_active": True}, "ui"),
        ({"cutscene_playing": True}, "cutscene"),
        ({"dialogue_npc": 42}, "dialogue"),
        ({"radial_menu": True}, "menu"),
    ]
    for overlay, reason in cases:
        world, bus, log, ctl = _setup()
        assert ctl.set_destination((5.5, 5.5))
        ctl.sync_interface(**overlay)
        assert not ctl.is_pathing, reason
        assert [e.reason for e in _events(bus, PathCancelled)] == [reason]
        assert log.cancel_reasons() == [reason]
        assert not ctl.set_destination((5.5, 5.5))

        ctl.sync_interface()
        assert ctl.set_destination((5.5, 5.5))


def test_overlay_while_idle_is_silent():
    world, bus, log, ctl = _setup()
    ctl.sync_interface(ui_active=True)
    ctl.cancel_path()
    assert bus.pending() == []


def test_change_map_cancels_and_replans_on_new_grid():
    world, bus, log, ctl = _setup()
    ctl.set_destination((9.5, 9.5))
    cellar = TileMap(5, 5, name="cellar")
    ctl.change_map(cellar, spawn=(2.5, 2.5))

    assert not ctl.is_pathing
    assert [e.reason for e in _events(bus, PathCancelled)] == ["map"]
    changed = _events(bus, MapChanged)
    assert len(changed) == 1
    assert changed[0].name == "cellar" and changed[0].spawn == (2.5, 2.5)
    assert ctl.position.as_tuple() == (2.5, 2.5)

    assert not ctl.set_destination((9.5, 9.5))
    assert ctl.set_destination((4.5, 4.5))
    assert ctl.click.resolver is ctl.motion.resolver


def test_teleport_cancels():
    world, bus, log, ctl = _setup()
    ctl.set_destination((9.5, 9.5))
    ctl.teleport((7.5, 1.5))
    assert not ctl.is_pathing
    assert ctl.position.as_tuple() == (7.5, 1.5)
    assert [e.reason for e in _events(bus, PathCancelled)] == ["teleport"]


# ════════════════════════════════════════════════════════════════════════
#  Entity factory
# ════════════════════════════════════════════════════════════════════════

def test_descriptor_spawns_npc_and_player():
    world = World()
    npc = spawn_from_descriptor(world, {
        "identity": {"name": "Mira"},
        "position": {"x": 6.5, "y": "4.5"},
        "facing": {"direction": "LEFT"},
        "collider": {"radius": 0.4},
    })
    assert world.get(npc, Position).as_tuple() == (6.5, 4.5)
    assert world.get(npc, Collider).radius == 0.4
    assert world.get(npc, Player) is None

    hero = spawn_from_descriptor(world, {
        "position": {"x": 1.5, "y": 1.5},
        "player": {"skin": "character2", "speed": 3},
    })
    assert world.get(hero, Player).speed == 3.0
    assert world.get(hero, WalkCycle).frame_counts == {"up": 2, "down": 2, "left": 3, "right": 3}
    ctl = PlayerController(world, hero, TileMap(5, 5))
    assert ctl.motion.speed == 3.0


def test_descriptor_entity_without_player_table_can_walk():
    world = World()
    eid = spawn_from_descriptor(world, {"position": {"x": 2.5, "y": 2.5}})
    assert world.get(eid, WalkCycle) is None

    ctl = PlayerController(world, eid, TileMap(5, 5), input=_Keys("move_right"))
    assert world.get(eid, WalkCycle) is not None
    result = ctl.update_movement(DT, 200)
    assert result.is_moving
    assert ctl.position.x > 2.5
    assert ctl.direction == Direction.RIGHT


# ════════════════════════════════════════════════════════════════════════

def _run_all() -> int:
    passed = failed = 0
    for name, fn in list(globals().items()):
        if not name.startswith("test_") or not callable(fn):
            continue
        try:
            fn()
        except Exception:
            failed += 1
            print(f"  [FAIL] {name}")
            for line in traceback.format_exc().strip().splitlines():
                print(f"         {line}")
        else:
            passed += 1
            print(f"  [PASS] {name}")
    print(f"\n{passed} passed, {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(_run_all())
