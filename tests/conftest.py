"""
Shared fixtures.

Storage fixtures run against an in-memory SQLite database
(aiosqlite); everything else uses the in-memory fakes from
tests.helpers.
"""

import pytest
import pytest_asyncio

from core.clock import MockClock
from platform_connectors.registry import ConnectorRegistry
from scoring_engine.aggregator import ProfileAggregator
from scoring_engine.engine import ScoringEngine
from storage import Database, DatabaseConfig, SqlAlchemyPersistence

from tests.helpers import NOW, FakePersistence


SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================
# CORE FIXTURES
# ============================================================

@pytest.fixture
def clock():
    """Clock frozen at NOW."""
    return MockClock(NOW)


@pytest.fixture
def persistence(clock):
    """In-memory persistence with one candidate, c1."""
    store = FakePersistence(clock)
    store.add_candidate("c1", "Candidate One")
    return store


@pytest.fixture
def registry():
    return ConnectorRegistry()


@pytest.fixture
def aggregator(persistence, registry, clock):
    return ProfileAggregator(persistence, registry=registry, clock=clock)


@pytest.fixture
def engine(persistence, aggregator, clock):
    return ScoringEngine(persistence, aggregator, clock=clock)


# ============================================================
# STORAGE FIXTURES
# ============================================================

@pytest_asyncio.fixture
async def database():
    """Fresh in-memory database with all tables."""
    db = Database(DatabaseConfig(url=SQLITE_MEMORY_URL))
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def sql_persistence(database, clock):
    """SQL persistence with one candidate, c1."""
    store = SqlAlchemyPersistence(database.session_factory, clock=clock)
    await store.create_candidate("c1", "Candidate One")
    return store
