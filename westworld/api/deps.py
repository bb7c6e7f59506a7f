from __future__ import annotations

from westworld.world_store import WorldStore, store


def get_store() -> WorldStore:
    return store
