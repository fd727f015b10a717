"""Shared fixtures for fingerprint gate tests."""

import pytest
from sqlalchemy.pool import NullPool

from fingerprint_gate.config import GateConfig
from fingerprint_gate.db.database import build_engine, build_session_factory, init_db
from fingerprint_gate.gate import ThresholdGate
from fingerprint_gate.store import InMemoryFingerprintStore, SQLFingerprintStore


@pytest.fixture
def config():
    """Gate config with the default threshold of 3."""
    return GateConfig(threshold=3, store_timeout_seconds=1.0)


@pytest.fixture
def memory_store():
    """Fresh in-memory store."""
    return InMemoryFingerprintStore()


@pytest.fixture
def gate(memory_store, config):
    """Gate over the in-memory store."""
    return ThresholdGate(memory_store, config)


@pytest.fixture
async def engine(tmp_path):
    """SQLite engine on a per-test database file."""
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'gate.db'}", poolclass=NullPool
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    """Async session; tests commit explicitly when they need durability."""
    async with build_session_factory(engine)() as session:
        yield session


@pytest.fixture
def sql_store(session):
    """SQL store bound to the test session."""
    return SQLFingerprintStore(session)
