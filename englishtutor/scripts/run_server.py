#!/usr/bin/env python3
"""
Server runner script.

Starts the API with uvicorn; HOST, PORT and RELOAD come from the environment.
"""

import os
import sys

import uvicorn

from englishtutor.common.logger import app_logger
from englishtutor.config import settings

logger = app_logger.getChild("scripts.run_server")


def main():
    """Run the API server."""
    try:
        host = os.getenv("HOST", "0.0.0.0")
        port = int(os.getenv("PORT", 8000))
        reload_enabled = os.getenv("RELOAD", "false").lower() == "true"

        logger.info(f"Starting server on {host}:{port} (reload: {reload_enabled})")
        uvicorn.run(
            "englishtutor.main:app",
            host=host,
            port=port,
            reload=reload_enabled,
            log_level=settings.LOG_LEVEL.lower(),
        )
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
