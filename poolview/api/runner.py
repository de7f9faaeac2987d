#!/usr/bin/env python3
"""FastAPI server runner."""

import logging

import uvicorn

from poolview.api.main import app
from poolview.config import Settings

logger = logging.getLogger(__name__)


def main():
    """Run the FastAPI server. Exits on missing GRAPH_API_KEY / SUBGRAPH_ID."""
    settings = Settings.from_env()

    logger.info(f"Starting PoolView on {settings.host}:{settings.port}")

    try:
        uvicorn.run(app, host=settings.host, port=settings.port)
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise


if __name__ == "__main__":
    main()
