from __future__ import annotations

from contextlib import contextmanager
from uuid import UUID

from westworld.world_store import WorldStore


@contextmanager
def world_lock(*, store: WorldStore, world_id: UUID):
    """Per-world lock so only one caller drives a world's stacks at a time.

    Non-blocking: a second caller fails fast instead of queueing behind a long tick run.
    """

    lock = store.lock_for(world_id)
    if not lock.acquire(blocking=False):
        raise ValueError("World is busy")
    try:
        yield
    finally:
        lock.release()
