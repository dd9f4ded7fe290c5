# PerfBoard/perfboard/errors.py
# @ai-rules:
# 1. [Pattern]: Store failures share StoreError so the app-level handler can map them to 503 in one place.
# 2. [Constraint]: StatementError is an OUTCOME for MeasurementRepository.record, never a crash.
"""Error taxonomy for PerfBoard."""
from __future__ import annotations


class PerfBoardError(Exception):
    """Base class for all PerfBoard errors."""


class StoreError(PerfBoardError):
    """Base class for failures reported by the Store Gateway."""


class StoreConnectionError(StoreError, ConnectionError):
    """The store is unreachable or rejected our credentials."""


class StoreTimeoutError(StoreError):
    """A statement exceeded the configured timeout. Safe to retry."""


class StatementError(StoreError):
    """Constraint violation or malformed statement."""


class MeasurementValidationError(PerfBoardError):
    """A measurement failed validation before reaching the store."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


class RenderError(PerfBoardError):
    """The chart canvas could not be created or encoded."""


class SchemaBootstrapError(PerfBoardError):
    """The schema could not be read or applied to the store."""
