"""Logger setup for cs2cdn."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from cs2cdn.config import validate_log_level
from cs2cdn.constants import LOG_PREFIX, LOGGER_NAME


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger or one of its children."""
    if name is None or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def setup_logging(level: str = "info", console: Console | None = None) -> logging.Logger:
    """Configure the cs2cdn logger with a single rich handler.

    Safe to call repeatedly; the handler installed by a previous call is
    replaced rather than stacked.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(validate_log_level(level).upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_cs2cdn", False):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(f"{LOG_PREFIX} %(message)s"))
    handler._cs2cdn = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return logger
