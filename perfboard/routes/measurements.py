# PerfBoard/perfboard/routes/measurements.py
# @ai-rules:
# 1. [Pattern]: Thin routes -- delegate to MeasurementRepository, map RecordOutcome to status codes here.
# 2. [Constraint]: Paths and response texts are consumed by existing CI scripts. Keep /commit, /show, /generateTestData casing.
# 3. [Pattern]: Every route accepts any method (ANY_METHOD); CI callers use both GET and POST.
"""
Measurement ingestion and listing endpoints.

- Record one measurement from path parameters
- List every recorded measurement
- Generate demo sample data
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..dependencies import get_repository
from ..models import Measurement, RecordOutcome
from ..samples import generate_samples, record_samples
from ..state.measurements import MeasurementRepository, validate

logger = logging.getLogger(__name__)

ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE"]

router = APIRouter(tags=["measurements"])


@router.api_route(
    "/commit/{name}/{branch}/{build_number}/{time}",
    methods=ANY_METHOD,
    response_class=PlainTextResponse,
)
async def commit_measurement(
    name: str,
    branch: str,
    build_number: int,
    time: int,
    repository: MeasurementRepository = Depends(get_repository),
) -> PlainTextResponse:
    """
    Record one measurement.

    200 on success, 400 when validation fails, 405 when the store rejects it.
    """
    measurement = Measurement(
        name=name, branch=branch, build_number=build_number, elapsed_time=time
    )
    outcome = await repository.record(measurement)

    if outcome is RecordOutcome.RECORDED:
        return PlainTextResponse("inserting was successful")
    if outcome is RecordOutcome.INVALID:
        problems = "; ".join(validate(measurement))
        return PlainTextResponse(f"fail: {problems}", status_code=400)
    return PlainTextResponse("fail", status_code=405)


@router.api_route("/show", methods=ANY_METHOD, response_model=List[Measurement])
async def show_measurements(
    repository: MeasurementRepository = Depends(get_repository),
) -> List[Measurement]:
    """All recorded measurements in insertion order."""
    return await repository.list_all()


@router.api_route(
    "/generateTestData",
    methods=ANY_METHOD,
    response_class=PlainTextResponse,
)
async def generate_test_data(
    repository: MeasurementRepository = Depends(get_repository),
) -> PlainTextResponse:
    """Record a fixed batch of synthetic measurements for demos."""
    summary = await record_samples(repository, generate_samples())
    return PlainTextResponse(
        f"generating test data was successful "
        f"({summary.recorded}/{summary.requested} recorded)"
    )
