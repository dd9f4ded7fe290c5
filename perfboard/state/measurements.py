# PerfBoard/perfboard/state/measurements.py
# @ai-rules:
# 1. [Constraint]: Insert-only. No UPDATE/DELETE statements for measurements anywhere.
# 2. [Pattern]: Validation and constraint failures are RecordOutcome values; connectivity/timeouts propagate as exceptions.
# 3. [Gotcha]: Column `runtime` maps to Measurement.elapsed_time (JSON "time"). Keep the mapping in _to_measurement only.
# 4. [Pattern]: list_all orders by id (insertion order); list_range orders by build_number. Never rely on storage order.
"""
Measurement Repository - business-level access to recorded build timings.

Table (mirrors CreateDatabase.sql):
    default_tests
        id            BIGSERIAL PK   insertion order
        name          VARCHAR        test / benchmark name
        branch        VARCHAR        source branch
        build_number  BIGINT
        runtime       BIGINT >= 0    elapsed time in milliseconds
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    insert,
    select,
)

from ..errors import MeasurementValidationError, StatementError
from ..models import Measurement, RecordOutcome

if TYPE_CHECKING:
    from sqlalchemy.engine import Row

    from .database import DatabaseClient

logger = logging.getLogger(__name__)

# Plot windows are capped to bound response size and rendering cost
MAX_WINDOW_SIZE = 100

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

metadata = MetaData()

measurements_table = Table(
    "default_tests",
    metadata,
    Column("id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("branch", String(255), nullable=False),
    Column("build_number", BigInteger, nullable=False),
    Column("runtime", BigInteger, nullable=False),
    CheckConstraint("runtime >= 0", name="runtime_non_negative"),
    Index("ix_default_tests_name_build", "name", "build_number"),
)


def validate(measurement: Measurement) -> list[str]:
    """Return the list of problems with a measurement (empty when valid)."""
    problems = []
    if not measurement.name.strip():
        problems.append("name must not be empty")
    if not measurement.branch.strip():
        problems.append("branch must not be empty")
    if measurement.elapsed_time < 0:
        problems.append("time must be >= 0")
    if not INT64_MIN <= measurement.build_number <= INT64_MAX:
        problems.append("build_number must fit in 64 bits")
    if measurement.elapsed_time > INT64_MAX:
        problems.append("time must fit in 64 bits")
    return problems


def ensure_valid(measurement: Measurement) -> Measurement:
    """Raise MeasurementValidationError unless the measurement is valid."""
    problems = validate(measurement)
    if problems:
        raise MeasurementValidationError(problems)
    return measurement


def clamp_window(window_size: int) -> int:
    """Clamp a requested build window to [0, MAX_WINDOW_SIZE]."""
    return max(0, min(window_size, MAX_WINDOW_SIZE))


def _to_measurement(row: "Row") -> Measurement:
    return Measurement(
        name=row.name,
        branch=row.branch,
        build_number=row.build_number,
        elapsed_time=row.runtime,
    )


class MeasurementRepository:
    """Record and query measurements through the Store Gateway."""

    def __init__(self, database: "DatabaseClient"):
        self._db = database

    async def record(self, measurement: Measurement) -> RecordOutcome:
        """
        Insert exactly one measurement row.

        Returns:
            RECORDED on success, INVALID if validation failed (store untouched),
            REJECTED if the store refused the statement.

        Raises StoreConnectionError / StoreTimeoutError for connectivity problems.
        """
        try:
            ensure_valid(measurement)
        except MeasurementValidationError as e:
            logger.info(f"Rejected invalid measurement {measurement.name!r}: {e}")
            return RecordOutcome.INVALID

        statement = insert(measurements_table).values(
            name=measurement.name,
            branch=measurement.branch,
            build_number=measurement.build_number,
            runtime=measurement.elapsed_time,
        )
        try:
            async with self._db.session() as session:
                await session.execute(statement)
        except StatementError as e:
            logger.warning(
                f"Store rejected measurement {measurement.name}@{measurement.branch}"
                f"#{measurement.build_number}: {e}"
            )
            return RecordOutcome.REJECTED

        logger.debug(
            f"Recorded {measurement.name}@{measurement.branch}#{measurement.build_number} "
            f"= {measurement.elapsed_time}ms"
        )
        return RecordOutcome.RECORDED

    async def list_all(self) -> list[Measurement]:
        """All measurements in insertion order."""
        statement = select(
            measurements_table.c.name,
            measurements_table.c.branch,
            measurements_table.c.build_number,
            measurements_table.c.runtime,
        ).order_by(measurements_table.c.id)
        async with self._db.session() as session:
            rows = await session.query(statement)
        return [_to_measurement(row) for row in rows]

    async def list_range(
        self,
        name: str,
        from_build: int,
        window_size: int,
    ) -> list[tuple[int, int]]:
        """
        (build_number, elapsed_time) pairs for one test within a build window.

        The window is [from_build, from_build + window_size] inclusive, with
        window_size clamped to MAX_WINDOW_SIZE. A non-positive window yields
        an empty list without touching the store.
        """
        if window_size <= 0:
            return []
        window = clamp_window(window_size)
        to_build = min(from_build + window, INT64_MAX)

        table = measurements_table
        statement = (
            select(table.c.build_number, table.c.runtime)
            .where(table.c.name == name)
            .where(table.c.build_number >= from_build)
            .where(table.c.build_number <= to_build)
            .order_by(table.c.build_number, table.c.id)
        )
        async with self._db.session() as session:
            rows = await session.query(statement)
        return [(row.build_number, row.runtime) for row in rows]
