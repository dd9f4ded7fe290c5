# PerfBoard/scripts/seed_measurements.py
# @ai-rules:
# 1. [Constraint]: Standalone script -- talks to a running PerfBoard over HTTP only, never to the database.
# 2. [Pattern]: Measurements are validated locally (ensure_valid) before any request is sent.
"""
Seed a running PerfBoard instance with synthetic measurements.

Usage:
  python -m scripts.seed_measurements [--base-url http://127.0.0.1:7777]
      [--name ivy-default-case] [--branch master] [--count 30] [--start-build 1]
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from urllib.parse import quote

import httpx

sys.path.insert(0, str(Path(__file__).parent.parent))

from perfboard.errors import MeasurementValidationError
from perfboard.models import Measurement
from perfboard.samples import SAMPLE_BRANCH, SAMPLE_COUNT, SAMPLE_NAME, generate_samples
from perfboard.state.measurements import ensure_valid

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("perfboard.seed")


def commit_path(measurement: Measurement) -> str:
    """Path of the /commit request recording one measurement."""
    return (
        f"/commit/{quote(measurement.name, safe='')}/{quote(measurement.branch, safe='')}"
        f"/{measurement.build_number}/{measurement.elapsed_time}"
    )


async def seed(base_url: str, measurements: list[Measurement]) -> int:
    """POST each measurement; returns how many the service accepted."""
    accepted = 0
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        for measurement in measurements:
            resp = await client.post(commit_path(measurement))
            if resp.status_code == 200:
                accepted += 1
            else:
                logger.warning(
                    f"Build {measurement.build_number} rejected: {resp.status_code} {resp.text}"
                )
    return accepted


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--base-url", default="http://127.0.0.1:7777")
    parser.add_argument("--name", default=SAMPLE_NAME)
    parser.add_argument("--branch", default=SAMPLE_BRANCH)
    parser.add_argument("--count", type=int, default=SAMPLE_COUNT)
    parser.add_argument("--start-build", type=int, default=1)
    args = parser.parse_args()

    samples = generate_samples(count=args.count, name=args.name, branch=args.branch)
    offset = args.start_build - 1
    measurements = [
        sample.model_copy(update={"build_number": sample.build_number + offset})
        for sample in samples
    ]
    try:
        for measurement in measurements:
            ensure_valid(measurement)
    except MeasurementValidationError as e:
        logger.error(f"Refusing to seed invalid measurements: {e}")
        return 2

    try:
        accepted = asyncio.run(seed(args.base_url, measurements))
    except httpx.HTTPError as e:
        logger.error(f"Could not reach PerfBoard at {args.base_url}: {e}")
        return 1

    logger.info(f"Seeded {accepted}/{len(measurements)} measurements for {args.name}@{args.branch}")
    return 0 if accepted == len(measurements) else 1


if __name__ == "__main__":
    sys.exit(main())
