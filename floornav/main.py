"""Application entry point for the floornav routing API.

Run locally:
    uvicorn floornav.main:app --reload --host 0.0.0.0 --port 8000

Routing tunables come from `FLOORNAV_*` environment variables, see
`floornav.config.load_config`.
"""

from __future__ import annotations

import logging
import os

import uvicorn

from floornav.api import create_app

logging.basicConfig(
    level=os.getenv("FLOORNAV_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "floornav.main:app",
        host=os.getenv("FLOORNAV_HOST", "127.0.0.1"),
        port=int(os.getenv("FLOORNAV_PORT", "8000")),
    )
