"""
Logging configuration for the task log backend
"""
import logging
import sys
from tasklog.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """
    Configure the root logger from settings.LOG_LEVEL

    Application loggers (tasklog.*) follow LOG_LEVEL; uvicorn access lines,
    SQLAlchemy statements and multipart parsing are kept at WARNING so that
    approval transitions and submissions stay readable in the console.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("tasklog").setLevel(log_level)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s, env=%s, timezone=%s",
        settings.LOG_LEVEL, settings.APP_ENV, settings.APP_TIMEZONE,
    )
