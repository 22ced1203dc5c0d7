import logging
import sys
from typing import Optional

from .config import get_settings


_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _coerce_level(value: Optional[str]) -> int:
    if isinstance(value, str):
        return _LEVELS.get(value.upper().strip(), logging.INFO)
    return logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Return a stdout logger with the project's formatting.

    Level comes from LOG_LEVEL. Calling it twice for the same name does not
    stack handlers.
    """
    logger = logging.getLogger(name)
    if getattr(logger, "_inventory_configured", False):
        return logger

    level = _coerce_level(get_settings().LOG_LEVEL)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.propagate = False
    setattr(logger, "_inventory_configured", True)
    return logger
