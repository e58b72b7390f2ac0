"""Logging configuration."""

import sys
from loguru import logger
from typing import Any


CONSOLE_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>'
)


def configure_logging(
    log_level: str = 'INFO',
    log_file: str | None = None,
    serialize: bool = False,
) -> None:
    """Configure exporter logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a rotating log file
        serialize: Emit JSON records instead of the human-readable format
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=log_level,
        colorize=not serialize,
        serialize=serialize,
    )

    if log_file:
        logger.add(
            log_file,
            format='{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {message}',
            serialize=serialize,
            rotation='10 MB',
            retention='7 days',
            level=log_level,
        )


def get_logger(**context: Any) -> Any:
    """Get a logger with ``context`` bound to every record."""
    return logger.bind(**context)
