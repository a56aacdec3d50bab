from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes.

Every line written to stdout starts with one of INFO|WARN|ERROR|SUMMARY (DEBUG
with ``--debug``). Library modules log through ``logging.getLogger(__name__)``;
since they all live under ``elastic_ops`` they share the handler installed here.
"""

__all__ = [
    "APP_LOGGER",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

APP_LOGGER = "elastic_ops"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formats records as ``LABEL message``.

    WARNING is shortened to WARN so the four labels a user normally sees
    (INFO, WARN, ERROR, SUMMARY) stay grep friendly.
    """

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        message = f"{level_label} {record.getMessage()}"
        if record.exc_info and record.levelno <= logging.DEBUG:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the application logger (idempotent).

    Args:
        debug: Lower logger and handler level to DEBUG

    Returns:
        The ``elastic_ops`` logger
    """
    global _logger

    level = logging.DEBUG if debug else logging.INFO
    if _logger is not None:
        _logger.setLevel(level)
        for h in _logger.handlers:
            h.setLevel(level)
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    # root に流すと二重出力になる
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Return the application logger, configuring it on first use."""
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log ``message`` at SUMMARY level (the formatter adds the ``SUMMARY`` label)."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Drop the configured handler. Mainly for tests."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers[:]:
            _logger.removeHandler(handler)
    _logger = None
