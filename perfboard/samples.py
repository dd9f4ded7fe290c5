# PerfBoard/perfboard/samples.py
# @ai-rules:
# 1. [Pattern]: Demo/test utility only. Each sample is recorded independently -- one failure never aborts the rest.
# 2. [Constraint]: Elapsed times are drawn from [SAMPLE_MIN_MS, SAMPLE_MAX_MS) (upper bound exclusive).
"""Synthetic measurement generator for demos and tests."""
from __future__ import annotations

import logging
import random
from typing import Optional

from .models import Measurement, RecordOutcome, SampleDataSummary
from .state.measurements import MeasurementRepository

logger = logging.getLogger(__name__)

SAMPLE_COUNT = 30
SAMPLE_NAME = "ivy-default-case"
SAMPLE_BRANCH = "master"
SAMPLE_MIN_MS = 90
SAMPLE_MAX_MS = 110


def generate_samples(
    count: int = SAMPLE_COUNT,
    name: str = SAMPLE_NAME,
    branch: str = SAMPLE_BRANCH,
    rng: Optional[random.Random] = None,
) -> list[Measurement]:
    """Measurements for builds 1..count with random elapsed times."""
    rng = rng or random.Random()
    return [
        Measurement(
            name=name,
            branch=branch,
            build_number=build,
            elapsed_time=rng.randrange(SAMPLE_MIN_MS, SAMPLE_MAX_MS),
        )
        for build in range(1, count + 1)
    ]


async def record_samples(
    repository: MeasurementRepository,
    samples: list[Measurement],
) -> SampleDataSummary:
    """Record each sample through the repository and tally the outcomes."""
    summary = SampleDataSummary(requested=len(samples))
    for sample in samples:
        outcome = await repository.record(sample)
        if outcome is RecordOutcome.RECORDED:
            summary.recorded += 1
        else:
            summary.failed += 1

    logger.info(
        f"Sample data: {summary.recorded}/{summary.requested} recorded "
        f"({summary.failed} failed)"
    )
    return summary
