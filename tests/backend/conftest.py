# tests/backend/conftest.py

import copy
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.plugins.kintone.repository import KintoneRepository
from backend.utils.dependencies import get_clock, get_fallback_client, get_tree_store
from backend.utils.exceptions import StoreError
from backend.utils.tree_store import Snapshot


class InMemoryTreeStore:
    """A nested-dict tree store with the same get/set/update semantics as Redis."""

    def __init__(self):
        self.data: dict[str, Any] = {}

    def _segments(self, path: str) -> list[str]:
        return [segment for segment in path.split("/") if segment]

    async def get(self, path: str) -> Snapshot:
        node: Any = self.data
        for segment in self._segments(path):
            if not isinstance(node, dict) or segment not in node:
                return Snapshot(path)
            node = node[segment]
        return Snapshot(path, copy.deepcopy(node))

    async def set(self, path: str, value: Any) -> None:
        *parents, leaf = self._segments(path)
        node = self.data
        for segment in parents:
            node = node.setdefault(segment, {})
        node[leaf] = copy.deepcopy(value)

    async def update(self, path: str, fields: dict[str, Any]) -> None:
        current = (await self.get(path)).val() or {}
        current.update(fields)
        await self.set(path, current)

    def read(self, path: str) -> Any:
        node: Any = self.data
        for segment in self._segments(path):
            node = node.get(segment) if isinstance(node, dict) else None
        return node


class FailingTreeStore(InMemoryTreeStore):
    """Raises StoreError for any path starting with one of ``failing_prefixes``."""

    def __init__(self, *failing_prefixes: str):
        super().__init__()
        self.failing_prefixes = failing_prefixes

    def _check(self, path: str) -> None:
        if any(path.startswith(prefix) for prefix in self.failing_prefixes):
            raise StoreError(f"Store unavailable for '{path}'")

    async def get(self, path: str) -> Snapshot:
        self._check(path)
        return await super().get(path)

    async def set(self, path: str, value: Any) -> None:
        self._check(path)
        await super().set(path, value)


class FakeClock:
    """Callable returning a settable local time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def store() -> InMemoryTreeStore:
    return InMemoryTreeStore()


@pytest.fixture
def failing_store_factory():
    return FailingTreeStore


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 19, 10, 30))


@pytest.fixture
def repository(store: InMemoryTreeStore) -> KintoneRepository:
    return KintoneRepository(store, root="kintone")


@pytest.fixture
def mock_fallback() -> MagicMock:
    """Provides a mock for the FallbackClient."""
    mock = MagicMock()
    mock.configured = True
    mock.deliver = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def test_client(store, clock, mock_fallback):
    """
    A TestClient whose tree store, clock and fallback client are replaced with
    the fixtures above. Server exceptions are returned as responses so 500s
    can be asserted on.
    """
    app.dependency_overrides[get_tree_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_fallback_client] = lambda: mock_fallback
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def raising_test_client(store, clock, mock_fallback):
    """Like ``test_client`` but unhandled server exceptions propagate to the test."""
    app.dependency_overrides[get_tree_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_fallback_client] = lambda: mock_fallback
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
