# PerfBoard/perfboard/models.py
# @ai-rules:
# 1. [Constraint]: All models are Pydantic BaseModel. Use Field() for defaults and descriptions.
# 2. [Gotcha]: Measurement.elapsed_time is serialized as "time" (alias). FastAPI responses dump by_alias.
# 3. [Pattern]: Measurement is frozen -- persisted rows are never mutated.
"""Pydantic schemas for PerfBoard."""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Measurement
# =============================================================================

class Measurement(BaseModel):
    """One recorded (test name, branch, build number, elapsed time) data point."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Test or benchmark identifier")
    branch: str = Field(..., description="Source branch the build ran on")
    build_number: int = Field(..., description="Build number, ordered per test name")
    elapsed_time: int = Field(..., alias="time", description="Measured duration in milliseconds")


class RecordOutcome(str, Enum):
    """Result of MeasurementRepository.record."""
    RECORDED = "recorded"
    INVALID = "invalid"    # failed validation, store untouched
    REJECTED = "rejected"  # store refused the insert


# =============================================================================
# Charts
# =============================================================================

class ChartBounds(BaseModel):
    """Axis domains derived from a series of (build_number, elapsed_time) pairs."""
    x_min: int = 0
    x_max: int = 0
    y_min: int = 0
    y_max: int = 0


# =============================================================================
# Service
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "store_online"


class SampleDataSummary(BaseModel):
    """Result of a sample-data generation run."""
    requested: int = 0
    recorded: int = 0
    failed: int = 0
