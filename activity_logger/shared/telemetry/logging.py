"""Logging configuration for the activity logger.

The package logs through stdlib logging only; this module wires the root
handler once per process and hands out module loggers.
"""

import logging
import sys

from activity_logger.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int | None = None) -> None:
    """Configure process-wide logging.

    Level defaults to DEBUG when settings.debug is True, otherwise INFO.
    SQLAlchemy engine chatter is kept at WARNING unless database_echo is on,
    since echo already routes SQL through that logger.

    Args:
        level: Optional explicit level overriding the settings-derived one.
    """
    settings = get_settings()
    if level is None:
        level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    if not settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name (usually __name__)."""
    return logging.getLogger(name)
