from __future__ import annotations

import threading
from uuid import UUID

from westworld.world import World


class WorldStore:
    """In-process registry of worlds keyed by id.

    Worlds live only as long as the process; nothing is persisted.
    """

    def __init__(self) -> None:
        self._worlds: dict[UUID, World] = {}
        self._locks: dict[UUID, threading.Lock] = {}
        self._guard = threading.Lock()

    def add(self, world: World) -> World:
        with self._guard:
            if world.world_id in self._worlds:
                raise ValueError(f"World already registered: {world.world_id}")
            self._worlds[world.world_id] = world
            self._locks[world.world_id] = threading.Lock()
        return world

    def get(self, world_id: UUID) -> World | None:
        return self._worlds.get(world_id)

    def list_worlds(self) -> list[World]:
        with self._guard:
            return list(self._worlds.values())

    def lock_for(self, world_id: UUID) -> threading.Lock:
        lock = self._locks.get(world_id)
        if lock is None:
            raise ValueError("World not found")
        return lock

    def remove(self, world_id: UUID) -> None:
        with self._guard:
            self._worlds.pop(world_id, None)
            self._locks.pop(world_id, None)


store = WorldStore()
