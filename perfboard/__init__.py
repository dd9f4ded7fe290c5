"""PerfBoard - build performance measurement recorder and chart service."""

__version__ = "1.0.0"
