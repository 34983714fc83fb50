"""
Logger utility for consistent logging across modules
"""

import logging
import sys

from tracker.core.config import settings


class ColorFormatter(logging.Formatter):
    """Formatter with color support like uvicorn."""

    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, use_color: bool = True) -> None:
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so other handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        if self.use_color:
            color = self.COLORS.get(record.levelno, "")
            # Pad levelname first, then apply color (so escape codes don't affect alignment)
            record.levelname = f"{color}{record.levelname + self.RESET + ':':<13}"
        else:
            record.levelname = f"{record.levelname + ':':<9}"
        return super().format(record)


def resolve_level(level: int | str | None = None) -> int:
    """Map an explicit level, a level name or the LOG_LEVEL setting to a logging level."""
    if level is None:
        level = settings.LOG_LEVEL
    if isinstance(level, str):
        return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    return level


def get_logger(name: str, level: int | str | None = None) -> logging.Logger:
    """
    Get a logger with uvicorn's handler for consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: LOG_LEVEL setting)

    Returns:
        Configured logger instance
    """
    resolved = resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(resolved)

    # Add a StreamHandler with uvicorn-like format if no handlers exist
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(resolved)
        handler.setFormatter(
            ColorFormatter(
                "%(levelname)s [%(name)s:%(funcName)s] %(message)s",
                use_color=sys.stdout.isatty(),
            )
        )
        logger.addHandler(handler)
        logger.propagate = False

    return logger
