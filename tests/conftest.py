"""Shared fixtures for memex tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from memex.store.database import DatabaseEventStore
from tests.fakes import FakeProvider

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Async in-memory SQLite engine."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False)
    yield eng
    await eng.dispose()


@pytest.fixture
async def store(async_engine: AsyncEngine) -> DatabaseEventStore:
    """Event store over the in-memory engine with all tables created."""
    s = DatabaseEventStore(async_engine)
    await s.create_tables()
    return s


@pytest.fixture
def provider() -> FakeProvider:
    """Fresh deterministic embedding provider."""
    return FakeProvider()
