"""Shared fixtures: backends, managers and seeded random vectors."""

from __future__ import annotations

import numpy as np
import pytest

from vectable.collection import CollectionManager
from vectable.core.config import SearchConfig, StorageConfig
from vectable.storage.engine import SQLiteBackend
from vectable.storage.memory import InMemoryBackend


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def sqlite_backend(tmp_path):
    backend = SQLiteBackend(StorageConfig(db_path=tmp_path / "vectors.db"))
    backend.open().unwrap()
    yield backend
    backend.close()


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture(params=["sqlite", "memory"])
def backend(request, tmp_path):
    """Each backend in turn, so behavior is checked on both."""
    if request.param == "memory":
        yield InMemoryBackend()
        return
    sqlite = SQLiteBackend(StorageConfig(db_path=tmp_path / "vectors.db"))
    sqlite.open().unwrap()
    yield sqlite
    sqlite.close()


@pytest.fixture
def manager(backend) -> CollectionManager:
    return CollectionManager(backend, SearchConfig())
