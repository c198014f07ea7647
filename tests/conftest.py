"""Pytest fixtures for Reckon tests."""

import os
from collections.abc import Iterator

import pytest

from reckon.computation import Store
from reckon.foundation.config import reset_config


@pytest.fixture
def store() -> Iterator[Store]:
    """A fresh cache_all store, closed after the test."""
    store = Store("cache_all", max_workers=4)
    yield store
    store.close()


@pytest.fixture
def make_store() -> Iterator:
    """Factory for stores with other policies; all are closed after the test."""
    created: list[Store] = []

    def _make(policy: str = "cache_all", **kwargs) -> Store:
        kwargs.setdefault("max_workers", 4)
        created.append(Store(policy, **kwargs))
        return created[-1]

    yield _make
    for s in created:
        s.close()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep RECKON_* env vars and the global config from leaking between tests."""
    for key in list(os.environ):
        if key.startswith("RECKON_"):
            monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()
