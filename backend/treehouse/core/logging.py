"""Logging setup: JSON lines in production, plain text everywhere else."""
import logging
import sys

from pythonjsonlogger import jsonlogger

from treehouse.core.config import settings

PLAIN_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Install the root handler once per process.

    The import pipeline logs one line per run and per rollback, so INFO is
    the useful default; per-row failures are stored on ImportHistory rather
    than logged.
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    if settings.APP_ENV == "production":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            jsonlogger.JsonFormatter(
                PLAIN_FORMAT,
                rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
            )
        )
        logging.root.handlers = [handler]
        logging.root.setLevel(log_level)
    else:
        logging.basicConfig(level=log_level, format=PLAIN_FORMAT)

    # SQL echo is controlled by DATABASE_ECHO, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
