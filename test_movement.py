"""test_movement.py — Movement controller: key/path arbitration, wall sliding,
facing, the ping-pong walk cycle, idle animation and footsteps.

Run: python test_movement.py      (or: pytest test_movement.py)
"""
from __future__ import annotations
import sys, traceback, math

from core import tuning
from core.collision import NpcObstacle, WalkabilityResolver
from core.tilemap import TileMap
from components import Direction, Facing, Position, WalkCycle
from logic.movement import (
    MovementController, key_vector, direction_from_vector, next_walk_frame,
)

tuning.reset()

FOUR = {"up": 4, "down": 4, "left": 4, "right": 4}


def _ctl(x: float = 2.5, y: float = 2.5, rows: list[str] | None = None,
         counts: dict | None = None, **kw) -> MovementController:
    tilemap = TileMap.from_rows(rows) if rows else TileMap(5, 5)
    return MovementController(
        WalkabilityResolver(tilemap),
        Position(x, y), Facing(), WalkCycle(frame_counts=dict(counts or FOUR)),
        speed=5.0, animation_interval_ms=150, footstep_interval_ms=280, **kw)


# ════════════════════════════════════════════════════════════════════════
#  Pure helpers
# ════════════════════════════════════════════════════════════════════════

def test_key_vector():
    assert key_vector([]) == (0.0, 0.0, False)
    assert key_vector(["move_up"]) == (0.0, -1.0, True)
    assert key_vector(["move_down", "move_right"]) == (1.0, 1.0, True)
    # opposite keys cancel but still count as keyboard input
    assert key_vector(["move_left", "move_right"]) == (0.0, 0.0, True)
    assert key_vector(["interact"]) == (0.0, 0.0, False)


def test_direction_from_dominant_axis():
    assert direction_from_vector(0.0, 0.0) is None
    assert direction_from_vector(1.0, 0.2) == Direction.RIGHT
    assert direction_from_vector(-0.9, 0.3) == Direction.LEFT
    assert direction_from_vector(0.6, -0.8) == Direction.UP
    assert direction_from_vector(0.1, 0.9) == Direction.DOWN
    # exact diagonal → horizontal
    assert direction_from_vector(-1.0, 1.0) == Direction.LEFT


def _cycle(max_frame: int, n: int) -> list[int]:
    frame, step = 0, 1
    out = []
    for _ in range(n):
        frame, step = next_walk_frame(frame, step, max_frame)
        out.append(frame)
    return out


def test_ping_pong_sequences():
    assert _cycle(3, 12) == [1, 2, 3, 2, 1, 0, 1, 2, 3, 2, 1, 0]
    assert _cycle(2, 8) == [1, 2, 1, 0, 1, 2, 1, 0]
    assert _cycle(1, 4) == [1, 0, 1, 0]
    assert _cycle(0, 3) == [0, 0, 0]


def test_ping_pong_bounds_and_coverage():
    for m in range(1, 8):
        seq = _cycle(m, 50)
        assert min(seq) >= 0 and max(seq) <= m
        assert set(_cycle(m, 2 * m)) | {0} == set(range(m + 1))
        for a, b in zip(seq, seq[1:]):
            assert abs(a - b) == 1


# ════════════════════════════════════════════════════════════════════════
#  Arbitration
# ════════════════════════════════════════════════════════════════════════

def test_keys_beat_path_vector():
    c = _ctl()
    r = c.step(0.1, 200, held={"move_right"}, path_vector=(0.0, 1.0))
    assert r.is_moving and r.is_keyboard_input
    assert math.isclose(c.position.x, 3.0)
    assert math.isclose(c.position.y, 2.5)
    assert c.facing.direction == Direction.RIGHT


def test_path_vector_used_without_keys():
    c = _ctl()
    r = c.step(0.1, 200, held=(), path_vector=(0.0, 1.0))
    assert r.is_moving and not r.is_keyboard_input
    assert math.isclose(c.position.x, 2.5)
    assert math.isclose(c.position.y, 3.0)
    assert c.facing.direction == Direction.DOWN


def test_no_input_holds_position_and_facing():
    c = _ctl()
    c.step(0.1, 200, held={"move_left"})
    x, y = c.position.as_tuple()
    r = c.step(0.1, 400)
    assert not r.is_moving and not r.is_keyboard_input
    assert c.position.as_tuple() == (x, y)
    assert c.facing.direction == Direction.LEFT


def test_diagonal_keys_are_normalised():
    c = _ctl()
    c.step(0.1, 200, held={"move_right", "move_down"})
    moved = math.hypot(c.position.x - 2.5, c.position.y - 2.5)
    assert math.isclose(moved, 0.5)


# ════════════════════════════════════════════════════════════════════════
#  Collision
# ════════════════════════════════════════════════════════════════════════

def test_slides_along_wall():
    rows = ["...#."] * 5
    c = _ctl(2.5, 2.5, rows)
    c.step(0.1, 200, held={"move_right", "move_down"})
    assert c.position.x == 2.5                      # x blocked by the wall
    assert math.isclose(c.position.y, 2.5 + 0.5 / math.sqrt(2))


def test_blocked_on_both_axes_stays_put():
    rows = [
        ".....",
        ".....",
        "...#.",
        "..##.",
        ".....",
    ]
    c = _ctl(2.5, 2.5, rows)
    r = c.step(0.1, 200, held={"move_right", "move_down"})
    assert r.is_moving
    assert c.position.as_tuple() == (2.5, 2.5)


def test_npc_blocks_movement():
    c = _ctl()
    npcs = [NpcObstacle(1, 3.5, 2.5, 0.4)]
    c.step(0.1, 200, held={"move_right"}, npcs=npcs)
    assert c.position.x == 2.5
    c.step(0.1, 400, held={"move_right"}, npcs=[NpcObstacle(1, 3.5, 2.5, None)])
    assert math.isclose(c.position.x, 3.0)


def test_overlapping_npc_lets_avatar_step_away():
    npcs = [NpcObstacle(1, 2.7, 2.5, 0.4)]
    c = _ctl()
    c.step(0.02, 200, held={"move_right"}, npcs=npcs)
    assert c.position.as_tuple() == (2.5, 2.5)
    c.step(0.1, 400, held={"move_left"}, npcs=npcs)
    assert math.isclose(c.position.x, 2.0)

    for key in ("move_up", "move_down"):
        c = _ctl()
        c.step(0.1, 200, held={key}, npcs=npcs)
        assert math.isclose(c.position.y, 2.0 if key == "move_up" else 3.0), key


def test_clamped_to_map():
    c = _ctl(0.5, 4.5)
    c.step(0.1, 200, held={"move_left"})
    assert math.isclose(c.position.x, 0.4)
    c.step(0.2, 400, held={"move_down"})
    assert math.isclose(c.position.y, 4.6)


# ════════════════════════════════════════════════════════════════════════
#  Walk cycle
# ════════════════════════════════════════════════════════════════════════

def test_frames_advance_only_after_interval():
    c = _ctl(counts={"up": 4, "down": 4, "left": 4, "right": 4})
    frames = []
    for now in (100, 200, 300, 400, 500):
        c.step(0.001, now, held={"move_up"})
        frames.append(c.walk.frame)
    assert frames == [0, 1, 1, 2, 2]


def test_walking_follows_ping_pong():
    c = _ctl()
    frames = []
    for i in range(1, 8):
        c.step(0.001, 200 * i, held={"move_down"})
        frames.append(c.walk.frame)
    assert frames == [1, 2, 3, 2, 1, 0, 1]


def test_per_direction_frame_counts():
    c = _ctl(counts={"up": 3, "down": 3, "left": 2, "right": 2})
    frames = []
    for i in range(1, 6):
        c.step(0.001, 200 * i, held={"move_left"})
        frames.append(c.walk.frame)
    assert frames == [1, 0, 1, 0, 1]


def test_idle_resets_to_base_pose_ascending():
    c = _ctl()
    for i in range(1, 5):
        c.step(0.001, 200 * i, held={"move_right"})
    assert (c.walk.frame, c.walk.step) == (2, -1)
    c.step(0.001, 1000)
    assert (c.walk.frame, c.walk.step) == (0, 1)
    c.step(0.001, 1200, held={"move_right"})
    assert c.walk.frame == 1


def test_idle_animation_when_enabled():
    c = _ctl(animate_when_idle=True)
    frames = []
    for i in range(1, 6):
        r = c.step(0.016, 200 * i)
        assert not r.is_moving
        frames.append(c.walk.frame)
    assert frames == [1, 2, 1, 2, 1]
    assert c.position.as_tuple() == (2.5, 2.5)


# ════════════════════════════════════════════════════════════════════════
#  Footsteps
# ════════════════════════════════════════════════════════════════════════

def test_footsteps_on_interval_while_moving():
    steps = []
    c = _ctl(0.5, 2.5, on_footstep=lambda x, y: steps.append((x, y)))
    for now in range(100, 1100, 100):
        c.step(0.001, now, held={"move_right"})
    assert len(steps) == 3                          # 300, 600, 900
    for now in range(1100, 2100, 100):
        c.step(0.001, now)
    assert len(steps) == 3


def test_speed_from_tuning():
    tuning._data = {"movement": {"speed": 2.0}}
    try:
        c = MovementController(WalkabilityResolver(TileMap(5, 5)),
                               Position(2.5, 2.5), Facing(), WalkCycle())
        c.step(0.5, 200, held={"move_right"})
        assert math.isclose(c.position.x, 3.5)
    finally:
        tuning.reset()


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
