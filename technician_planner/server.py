# technician_planner/server.py
"""Process entry point: read settings, configure logging, serve with uvicorn."""

import logging
import sys

import uvicorn

from technician_planner.config import Settings
from technician_planner.errors import ConfigError
from technician_planner.main import create_app

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        configure_logging("ERROR")
        logger.error("Error starting the server: %s", exc)
        raise SystemExit(1) from exc

    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("Backend server starting at http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
