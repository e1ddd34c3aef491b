"""Run the status backend with uvicorn: ``python -m backend``."""

from __future__ import annotations

import logging

import uvicorn

from backend.config import settings
from backend.main import app

logger = logging.getLogger("backend")


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    base_url = f"http://localhost:{settings.port}"
    logger.info("%s backend API running on port %d", settings.app_name, settings.port)
    logger.info("Health endpoint: %s/health", base_url)
    logger.info("Status endpoint: %s/api/status", base_url)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
