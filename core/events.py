"""core/events.py — Lightweight event bus.

Decouples the movement core from whatever reacts to it (destination
marker, "can't get there" sound, footstep audio).  The bus lives as an
ECS resource::

    from core.events import EventBus
    bus = world.res(EventBus)
    bus.emit(PathRejected(goal_x=4.5, goal_y=9.5))

Consumers subscribe with a callable::

    bus.subscribe("PathRejected", play_reject_cue)

And the orchestrator drains once per frame::

    bus.drain()

Events are plain dataclasses with no behaviour.  A handler that raises
is reported and skipped; the rest of the queue still runs.
"""

from __future__ import annotations
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable
from collections import Counter, defaultdict, deque


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class PathPlanned:
    """A destination request succeeded and a new path is being followed."""
    dest_x: float
    dest_y: float
    steps: int = 0
    target_npc: int | None = None


@dataclass
class PathRejected:
    """A destination request found no route (UI: "can't get there")."""
    goal_x: float = 0.0
    goal_y: float = 0.0
    target_npc: int | None = None


@dataclass
class PathCancelled:
    """The in-flight path was dropped before arrival."""
    reason: str = ""          # "input", "ui", "cutscene", "dialogue", "menu", "map", "teleport", "superseded"


@dataclass
class DestinationReached:
    """The avatar arrived at the final waypoint."""
    x: float = 0.0
    y: float = 0.0
    target_npc: int | None = None


@dataclass
class Footstep:
    """The avatar is walking — play a step sound here."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class MapChanged:
    """The avatar was moved onto a different tile map."""
    name: str = ""
    spawn: tuple[float, float] = field(default=(0.0, 0.0))


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """FIFO event queue with name-keyed subscribers (an ECS resource)."""

    # Upper bound on events handled by one drain(), so handlers that
    # keep re-emitting cannot stall the frame.
    MAX_PER_DRAIN = 10_000

    def __init__(self):
        self._queue: deque[Any] = deque()
        self._handlers: dict[str, list[Callable]] = defaultdict(list)
        self._counts: Counter[str] = Counter()

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue *event*; nothing runs until ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """Call *handler(event)* for every drained event of *event_type*.

        *event_type* is the class name, e.g. ``"PathCancelled"``.
        """
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def drain(self) -> int:
        """Deliver queued events oldest first.  Returns how many ran.

        Events emitted by a handler join the back of the queue and are
        delivered in this same call.
        """
        handled = 0
        while self._queue and handled < self.MAX_PER_DRAIN:
            event = self._queue.popleft()
            name = type(event).__name__
            self._counts[name] += 1
            handled += 1
            for handler in list(self._handlers.get(name, ())):
                try:
                    handler(event)
                except Exception as exc:
                    print(f"[EVENT] {name} handler {getattr(handler, '__name__', handler)!r} failed: {exc}")
                    traceback.print_exc()
        if self._queue:
            print(f"[EVENT] drain stopped with {len(self._queue)} events still queued")
        return handled

    def clear(self) -> None:
        """Drop everything still queued."""
        self._queue.clear()

    def pending(self) -> list[Any]:
        """Copy of the events waiting to be drained (oldest first)."""
        return list(self._queue)

    def pending_count(self) -> int:
        return len(self._queue)

    def stats(self) -> dict[str, int]:
        """Events delivered so far, by class name."""
        return dict(self._counts)

    def __repr__(self) -> str:
        return f"EventBus(pending={len(self._queue)}, types={len(self._handlers)})"
