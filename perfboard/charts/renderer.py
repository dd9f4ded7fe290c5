# PerfBoard/perfboard/charts/renderer.py
# @ai-rules:
# 1. [Constraint]: Use matplotlib.figure.Figure + FigureCanvasAgg only. NEVER pyplot -- its global state is not thread-safe.
# 2. [Pattern]: compute_bounds is the single source of axis domains. Degenerate domains are widened only when drawing.
# 3. [Gotcha]: y_max = ceil(max * 1.1) is computed with integers. 100 * 1.1 in floats is 110.00000000000001.
# 4. [Pattern]: Empty series renders a placeholder chart (domain [0, 0]) instead of raising.
"""
Chart Renderer - build-time series to PNG.

Produces a fixed 1000x1000 line+point chart of (build_number, elapsed_time)
pairs. Stateless: every call builds its own Figure.
"""
from __future__ import annotations

import asyncio
import io
import logging
from typing import Sequence

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.ticker import AutoMinorLocator, MaxNLocator

from ..errors import RenderError
from ..models import ChartBounds

logger = logging.getLogger(__name__)

# Canvas geometry (pixels)
CANVAS_SIZE = 1000
DPI = 100
MARGIN = 10
LABEL_AREA = 60

# Styling
CAPTION_FONT_SIZE = 40  # pixels
CAPTION_FONT_FAMILY = "sans-serif"
X_LABEL_COUNT = 30  # at most, including both ends
LIGHT_LINES_PER_MAJOR = 3
MARKER_RADIUS = 4  # pixels
SERIES_COLOR = "#0000ff"
Y_AXIS_LABEL = "Execution Time [ms]"
EMPTY_NOTE = "No measurements"

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

Pairs = Sequence[tuple[int, int]]


def compute_bounds(pairs: Pairs) -> ChartBounds:
    """
    Axis domains for a series.

    X spans [min(build_number), max(build_number)].
    Y spans [0, ceil(max(elapsed_time) * 1.1)] - 10% headroom so the top
    point is not clipped. An empty series yields all-zero bounds.
    """
    if not pairs:
        return ChartBounds()
    builds = [build for build, _ in pairs]
    max_time = max(elapsed for _, elapsed in pairs)
    y_max = max(0, -(-max_time * 11 // 10))
    return ChartBounds(x_min=min(builds), x_max=max(builds), y_min=0, y_max=y_max)


def _px_to_fraction(px: float) -> float:
    return px / CANVAS_SIZE


def _px_to_points(px: float) -> float:
    return px * 72.0 / DPI


class ChartRenderer:
    """Rasterizes ordered (build_number, elapsed_time) pairs into a PNG."""

    def render(self, title: str, pairs: Pairs) -> bytes:
        """
        Render a line+point chart and return the encoded PNG bytes.

        Raises RenderError if the canvas cannot be drawn or encoded.
        """
        series = sorted(pairs, key=lambda pair: pair[0])
        bounds = compute_bounds(series)
        try:
            figure = self._draw(title, series, bounds)
            buffer = io.BytesIO()
            FigureCanvasAgg(figure).print_png(buffer)
        except (ValueError, RuntimeError, OverflowError, MemoryError) as e:
            logger.error(f"Chart rendering failed for {title!r}: {e}")
            raise RenderError(f"Failed to render chart {title!r}: {e}") from e

        png = buffer.getvalue()
        logger.debug(f"Rendered chart {title!r}: {len(series)} points, {len(png)} bytes")
        return png

    async def render_async(self, title: str, pairs: Pairs) -> bytes:
        """Render in a worker thread so rasterization does not block the event loop."""
        return await asyncio.to_thread(self.render, title, pairs)

    def _draw(self, title: str, series: list[tuple[int, int]], bounds: ChartBounds) -> Figure:
        size_in = CANVAS_SIZE / DPI
        figure = Figure(figsize=(size_in, size_in), dpi=DPI, facecolor="white")

        left = _px_to_fraction(MARGIN + LABEL_AREA)
        bottom = _px_to_fraction(MARGIN + LABEL_AREA)
        right = 1.0 - _px_to_fraction(MARGIN)
        top = 1.0 - _px_to_fraction(MARGIN + CAPTION_FONT_SIZE + MARGIN)

        figure.suptitle(
            title,
            fontsize=_px_to_points(CAPTION_FONT_SIZE),
            fontfamily=CAPTION_FONT_FAMILY,
            y=1.0 - _px_to_fraction(MARGIN),
            va="top",
        )
        ax = figure.add_axes((left, bottom, right - left, top - bottom))

        # Mesh: no vertical lines, light horizontal lines between major ticks
        ax.xaxis.set_major_locator(MaxNLocator(nbins=X_LABEL_COUNT - 1, integer=True))
        ax.yaxis.set_major_locator(MaxNLocator(integer=True))
        ax.yaxis.set_minor_locator(AutoMinorLocator(LIGHT_LINES_PER_MAJOR + 1))
        ax.grid(False, axis="x")
        ax.grid(True, axis="y", which="major", color="#c8c8c8", linewidth=0.8)
        ax.grid(True, axis="y", which="minor", color="#ebebeb", linewidth=0.5)
        ax.tick_params(axis="x", labelsize=8, labelrotation=90)
        ax.set_ylabel(Y_AXIS_LABEL)

        x_low, x_high = bounds.x_min, bounds.x_max
        if x_low == x_high:
            x_low, x_high = x_low - 1, x_high + 1
        y_high = bounds.y_max if bounds.y_max > bounds.y_min else bounds.y_min + 1
        ax.set_xlim(x_low, x_high)
        ax.set_ylim(bounds.y_min, y_high)

        if not series:
            ax.text(0.5, 0.5, EMPTY_NOTE, transform=ax.transAxes, ha="center", va="center")
            return figure

        builds = [build for build, _ in series]
        times = [elapsed for _, elapsed in series]
        ax.plot(builds, times, color=SERIES_COLOR, linewidth=1.0)
        ax.plot(
            builds,
            times,
            linestyle="none",
            marker="o",
            markersize=_px_to_points(2 * MARKER_RADIUS),
            color=SERIES_COLOR,
            clip_on=False,
        )
        return figure
