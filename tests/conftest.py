from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from westworld.api.deps import get_store
from westworld.main import app
from westworld.world_store import WorldStore


@pytest.fixture()
def store() -> WorldStore:
    return WorldStore()


@pytest.fixture()
def client(store: WorldStore) -> Generator[TestClient, None, None]:
    """TestClient backed by a fresh, per-test world store."""

    def _override() -> WorldStore:
        return store

    app.dependency_overrides[get_store] = _override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
