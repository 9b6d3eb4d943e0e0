"""
main.py — Headless demo

1. Load tuning
2. Build a small arena with a wall and a tree
3. Create the player, load NPCs from data/characters.toml
4. Click-to-move across the map and tick until arrival
5. Walk up to an NPC
"""

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib
from pathlib import Path

from core import tuning
from core.ecs import World
from core.events import EventBus
from core.tilemap import TileMap
from components import DevLog, GameClock, Identity
from logic.entity_factory import spawn_from_descriptor, spawn_player
from logic.player_controller import PlayerController


ARENA = [
    "..........",
    "..........",
    "..#####...",
    "......#...",
    "......#...",
    "...t..#...",
    "..........",
    "..........",
    "..........",
    "..........",
]

TICK = 1 / 60


def _spawn_characters(world: World, path: Path) -> dict[str, int]:
    """Spawn every table in *path* via entity_factory.  Returns name → eid."""
    if not path.exists():
        return {}
    with open(path, "rb") as f:
        data = tomllib.load(f)
    spawned = {}
    for char_id, desc in data.items():
        if not isinstance(desc, dict):
            continue
        eid = spawn_from_descriptor(world, desc)
        ident = world.get(eid, Identity)
        spawned[ident.name if ident else char_id] = eid
    print(f"[DATA] Spawned {len(spawned)} characters from {path}")
    return spawned


def _run_until_idle(ctl: PlayerController, clock: GameClock, bus: EventBus,
                    max_ticks: int = 2000) -> int:
    ticks = 0
    while ctl.is_pathing and ticks < max_ticks:
        ctl.update_movement(TICK, clock.advance(TICK))
        bus.drain()
        ticks += 1
    return ticks


def main():
    tuning.load()

    world = World()
    bus = EventBus()
    clock = GameClock()
    world.set_res(bus)
    world.set_res(DevLog())
    world.set_res(clock)

    bus.subscribe("PathPlanned", lambda e: print(f"[EVENT] path planned → ({e.dest_x}, {e.dest_y}), {e.steps} steps"))
    bus.subscribe("DestinationReached", lambda e: print(f"[EVENT] arrived at ({e.x:.2f}, {e.y:.2f})"))
    bus.subscribe("PathRejected", lambda e: print("[EVENT] can't get there"))

    tilemap = TileMap.from_rows(ARENA, name="arena")
    player = spawn_player(world, 0.5, 0.5)
    npcs = _spawn_characters(world, Path(__file__).resolve().parent / "data" / "characters.toml")

    ctl = PlayerController(world, player, tilemap)

    ctl.set_destination((9.5, 9.5))
    bus.drain()
    ticks = _run_until_idle(ctl, clock, bus)
    pos = ctl.position
    print(f"Walked for {ticks} ticks, now at ({pos.x:.2f}, {pos.y:.2f}) facing {ctl.direction.value}")

    mira = npcs.get("Mira")
    if mira is not None and ctl.set_destination((0.0, 0.0), target_npc=mira):
        bus.drain()
        _run_until_idle(ctl, clock, bus)
        pos = ctl.position
        print(f"Standing next to Mira at ({pos.x:.2f}, {pos.y:.2f})")

    # Off the map
    ctl.set_destination((-3.0, 4.0))
    bus.drain()


if __name__ == "__main__":
    main()
