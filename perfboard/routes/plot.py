# PerfBoard/perfboard/routes/plot.py
# @ai-rules:
# 1. [Pattern]: Store errors are NOT caught here -- the app-level handlers in main.py map them to 503/500.
# 2. [Constraint]: build_count is clamped before querying; never pass the raw value to the repository.
"""
Plot endpoint.

Renders the build-time chart for one test as a PNG.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..charts.renderer import ChartRenderer
from ..dependencies import get_renderer, get_repository
from ..errors import RenderError
from ..state.measurements import MeasurementRepository, clamp_window
from .measurements import ANY_METHOD

logger = logging.getLogger(__name__)

router = APIRouter(tags=["plot"])


@router.api_route(
    "/plot/{test_name}/{from_build}/{build_count}",
    methods=ANY_METHOD,
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def plot_measurements(
    test_name: str,
    from_build: int,
    build_count: int,
    repository: MeasurementRepository = Depends(get_repository),
    renderer: ChartRenderer = Depends(get_renderer),
) -> Response:
    """
    Chart of builds [from_build, from_build + build_count] for test_name.

    build_count is capped at 100.
    """
    window = clamp_window(build_count)
    pairs = await repository.list_range(test_name, from_build, window)

    try:
        png = await renderer.render_async(test_name, pairs)
    except RenderError as e:
        logger.error(f"Plot failed for {test_name} from build {from_build}: {e}")
        raise HTTPException(status_code=500, detail="Chart rendering failed")

    return Response(content=png, media_type="image/png")
