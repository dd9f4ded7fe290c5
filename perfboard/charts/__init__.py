# PerfBoard/perfboard/charts/__init__.py
"""Chart rendering for PerfBoard."""
from .renderer import ChartRenderer, compute_bounds

__all__ = ["ChartRenderer", "compute_bounds"]
