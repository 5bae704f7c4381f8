"""Run the FastAPI application with uvicorn."""

import logging
import sys

import uvicorn

from app.utils.config import get_settings

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    settings = get_settings()
    try:
        uvicorn.run(
            "app.main:app",
            host=settings.api_host,
            port=settings.api_port,
            reload=settings.debug,
            log_level=settings.log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Server stopped")
        sys.exit(0)
