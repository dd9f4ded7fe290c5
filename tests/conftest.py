# PerfBoard/tests/conftest.py
# @ai-rules:
# 1. [Constraint]: No real PostgreSQL. Every test gets its own SQLite file under tmp_path (aiosqlite driver).
# 2. [Pattern]: `client` runs the real lifespan with schema_path="" so tables come from SQLAlchemy metadata.
"""Shared fixtures: SQLite-backed DatabaseClient, repository, and app client."""
from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from perfboard.main import create_app
from perfboard.state.database import DatabaseClient
from perfboard.state.measurements import MeasurementRepository, metadata


def _sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'perf.db'}"


def make_client(url: str) -> DatabaseClient:
    return DatabaseClient(url=url, retry_attempts=1, retry_delay=0.0, statement_timeout=5.0)


@pytest_asyncio.fixture
async def database(tmp_path: Path):
    db = make_client(_sqlite_url(tmp_path))
    await db.connect()
    await db.create_all(metadata)
    yield db
    await db.close()


@pytest_asyncio.fixture
async def repository(database: DatabaseClient) -> MeasurementRepository:
    return MeasurementRepository(database)


@pytest.fixture
def client(tmp_path: Path):
    app = create_app(database=make_client(_sqlite_url(tmp_path)), schema_path="")
    with TestClient(app) as c:
        yield c


@pytest.fixture
def offline_client(tmp_path: Path):
    """App whose database file lives in a directory that does not exist."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'perf.db'}"
    app = create_app(database=make_client(url), schema_path="")
    with TestClient(app) as c:
        yield c
