"""components.dev_log — Structured movement / pathfinding event log.

A bounded resource recording what the player controller decided and
why: paths planned or rejected, cancellations with their trigger,
arrivals, map changes.  Read by a debug overlay, or by tests that
assert on the order of decisions.

Usage:
    log = world.res(DevLog)
    log.record(eid, "path", "rejected", details={"goal": (4.5, 9.5)})
    log.cancel_reasons()        # → ["input", "map", ...]

Each entry is a dict:
    {"t": float, "eid": int, "cat": str, "msg": str, "details": dict | None}

Categories: ``path`` (planned / rejected / cancelled / arrived) and
``move`` (map changed).
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field


@dataclass
class DevLog:
    """Newest-last log of controller decisions, capped at ``max_entries``."""

    max_entries: int = 500
    # Only these categories are kept; empty keeps everything.
    cat_filter: set[str] = field(default_factory=set)
    entries: deque = field(default_factory=deque, init=False, repr=False)

    def __post_init__(self):
        self.entries = deque(maxlen=self.max_entries)

    def record(self, eid: int, cat: str, msg: str, *,
               t: float = 0.0, details: dict | None = None) -> None:
        if self.cat_filter and cat not in self.cat_filter:
            return
        self.entries.append({"t": t, "eid": eid, "cat": cat,
                             "msg": msg, "details": details})

    def clear(self):
        self.entries.clear()

    def recent(self, n: int = 50) -> list[dict]:
        """The *n* newest entries, oldest of them first."""
        return list(self.entries)[-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        return [e for e in self.entries if e["cat"] == cat][-n:]

    def cancel_reasons(self) -> list[str]:
        """Trigger of every recorded path cancellation, in order."""
        return [e["details"]["reason"] for e in self.entries
                if e["cat"] == "path" and e["msg"] == "cancelled" and e["details"]]
