# PerfBoard/perfboard/state/__init__.py
"""State management layer for PerfBoard."""
from .database import DatabaseClient, Session
from .measurements import MAX_WINDOW_SIZE, MeasurementRepository

__all__ = ["DatabaseClient", "Session", "MeasurementRepository", "MAX_WINDOW_SIZE"]
