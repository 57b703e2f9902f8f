"""Root conftest: shared test configuration and the per-test store."""

import os

import pytest

from tracker.infrastructure.database import Store

# Keep tests away from a developer's .env / real database file
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")


@pytest.fixture
async def store(tmp_path):
    """A fresh file-backed SQLite store with the schema created."""
    store = Store(f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}")
    await store.create_schema()
    yield store
    await store.dispose()
