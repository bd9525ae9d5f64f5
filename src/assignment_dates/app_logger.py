"""Package logger setup shared by library modules and the CLI."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "assignment_dates"
_DEFAULT_LEVEL = os.getenv("ASSIGNMENT_DATES_LOG_LEVEL", "WARNING").upper()


def setup_logging(level: str | None = None, *, console: bool = False) -> logging.Logger:
    """Configure the package logger.

    Library use leaves handlers to the host application and only installs a
    ``NullHandler``. The CLI passes ``console=True`` to get a stderr handler.
    """

    resolved = getattr(logging, (level or _DEFAULT_LEVEL).upper(), logging.WARNING)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(resolved)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())

    if console:
        if not any(type(h) is logging.StreamHandler for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)
        logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(ROOT_LOGGER_NAME)
    return base.getChild(name) if name else base
