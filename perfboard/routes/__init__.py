# PerfBoard/perfboard/routes/__init__.py
"""API routes for PerfBoard."""
from .measurements import router as measurements_router
from .plot import router as plot_router

__all__ = [
    "measurements_router",
    "plot_router",
]
