"""
core/ecs.py — Entity-Component-System

Entities are ints, components are plain objects keyed by their type,
and resources are one-per-type singletons that belong to no entity.

    w = World()
    npc = w.spawn()
    w.add(npc, Position(5.5, 3.5))
    w.add(npc, Collider(radius=0.4))

    for eid, pos, col in w.query(Position, Collider):
        ...

    w.set_res(EventBus())
    bus = w.res(EventBus)

The player controller keeps the avatar's Position / Facing / WalkCycle
here and builds its NPC roster from a ``query(Position, Collider)``.
"""

from __future__ import annotations
from typing import Any, Iterator


class World:
    def __init__(self):
        self._last_eid = 0
        # component type → {eid: component}
        self._tables: dict[type, dict[int, Any]] = {}
        self._resources: dict[type, Any] = {}
        self._doomed: set[int] = set()

    # -- Entities --

    def spawn(self) -> int:
        self._last_eid += 1
        return self._last_eid

    def kill(self, eid: int):
        """Mark *eid* for removal; it stops showing up in queries at once."""
        self._doomed.add(eid)

    def alive(self, eid: int) -> bool:
        return eid not in self._doomed

    def purge(self):
        """Drop every component of killed entities."""
        if not self._doomed:
            return
        for table in self._tables.values():
            for eid in self._doomed & table.keys():
                del table[eid]
        self._doomed.clear()

    # -- Components --

    def add(self, eid: int, comp: Any):
        self._tables.setdefault(type(comp), {})[eid] = comp

    def get(self, eid: int, comp_type: type) -> Any | None:
        table = self._tables.get(comp_type)
        return table.get(eid) if table else None

    def has(self, eid: int, comp_type: type) -> bool:
        return eid in self._tables.get(comp_type, ())

    def remove(self, eid: int, comp_type: type):
        self._tables.get(comp_type, {}).pop(eid, None)

    # -- Queries --

    def query(self, *types: type) -> Iterator[tuple]:
        """Yield (eid, comp1, comp2, ...) for live entities holding ALL types.

        Results come out in spawn order, so snapshots built from a query
        are ordered the same way every time.
        """
        if not types:
            return
        tables = [self._tables.get(t) for t in types]
        if any(not t for t in tables):
            return
        for eid in sorted(min(tables, key=len)):
            if eid in self._doomed:
                continue
            if all(eid in t for t in tables):
                yield (eid, *(t[eid] for t in tables))

    def query_one(self, *types: type) -> tuple | None:
        """First match in spawn order, or None."""
        return next(self.query(*types), None)

    # -- Resources --

    def set_res(self, resource: Any):
        self._resources[type(resource)] = resource

    def res(self, res_type: type) -> Any | None:
        return self._resources.get(res_type)
