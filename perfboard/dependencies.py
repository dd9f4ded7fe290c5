# PerfBoard/perfboard/dependencies.py
"""FastAPI dependency injection for PerfBoard."""
from __future__ import annotations

from typing import Optional

from .charts.renderer import ChartRenderer
from .state.database import DatabaseClient
from .state.measurements import MeasurementRepository

# Global instances (initialized in main.py lifespan)
_database: Optional[DatabaseClient] = None
_repository: Optional[MeasurementRepository] = None
_renderer: ChartRenderer = ChartRenderer()


def set_database(database: Optional[DatabaseClient]) -> None:
    """Set the global database client and the repository built on it."""
    # Set even when startup could not connect: requests then fail with
    # StoreConnectionError (503) until the database is reachable.
    global _database, _repository
    _database = database
    _repository = MeasurementRepository(database) if database is not None else None


def set_renderer(renderer: ChartRenderer) -> None:
    """Replace the global chart renderer."""
    global _renderer
    _renderer = renderer


async def get_database() -> DatabaseClient:
    """
    Get the database client instance.

    FastAPI dependency.
    """
    if _database is None:
        raise RuntimeError("Database not initialized. Check startup sequence.")
    return _database


async def get_repository() -> MeasurementRepository:
    """Get the MeasurementRepository instance."""
    if _repository is None:
        raise RuntimeError("MeasurementRepository not initialized. Check startup sequence.")
    return _repository


async def get_renderer() -> ChartRenderer:
    """Get the ChartRenderer instance."""
    return _renderer
