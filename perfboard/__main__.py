# PerfBoard/perfboard/__main__.py
"""Run PerfBoard with uvicorn: `python -m perfboard` or the `perfboard` script."""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "perfboard.main:app",
        host=os.getenv("PERFBOARD_HOST", "127.0.0.1"),
        port=int(os.getenv("PERFBOARD_PORT", "7777")),
    )


if __name__ == "__main__":
    main()
