"""
Shared pytest fixtures for all tests.

Provides pattern factories for the pure resolution tests, an isolated async
SQLite session for store and seeding tests, and an API client backed by a
temporary database.
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Ensure test environment
os.environ["APP_ENV"] = "test"
os.environ["SCHEDULER_ENABLED"] = "false"

from fitout.config import get_settings  # noqa: E402
from fitout.models import database  # noqa: E402
from fitout.models.database import Base  # noqa: E402
from fitout.services.matching import Pattern  # noqa: E402
from fitout.services.pattern_store import PatternSet, load, pattern_store  # noqa: E402


# ============================================================================
# PATTERN FIXTURES
# ============================================================================


@pytest.fixture
def make_pattern():
    """Factory for user-sourced pattern rules."""
    counter = {"n": 0}

    def _make(**overrides) -> Pattern:
        counter["n"] += 1
        fields = {
            "id": f"user-{counter['n']}",
            "name": "Custom rule",
            "pattern": "custom",
            "match_type": "contains",
            "category": "service",
            "source": "user",
        }
        fields.update(overrides)
        return Pattern(**fields)

    return _make


@pytest.fixture
def core_set() -> PatternSet:
    """Snapshot holding only the shipped core rules."""
    return load()


@pytest.fixture
def with_user_patterns(core_set):
    """Build a snapshot of core rules followed by the given user rules."""

    def _build(*patterns: Pattern) -> PatternSet:
        return PatternSet(list(core_set) + list(patterns))

    return _build


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Async session on a throwaway SQLite file with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'unit.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture
def client(tmp_path, monkeypatch) -> TestClient:
    """API client with a fresh database, seeded trades and a core-only snapshot."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    get_settings.cache_clear()
    database._engine = None
    database._session_factory = None

    from fitout.main import app

    with TestClient(app) as test_client:
        yield test_client

    get_settings.cache_clear()
    pattern_store._snapshot = load()
