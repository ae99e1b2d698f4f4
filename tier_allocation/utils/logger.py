"""Package-scoped logging.

Module loggers hang off the ``tier_allocation`` logger, which owns a single
stdout handler. The root logger is never configured here, so uvicorn and
pytest keep control of their own handlers.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from tier_allocation.utils.config import get_settings


PACKAGE_LOGGER_NAME = "tier_allocation"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach the package handler once; an explicit ``level`` is always applied."""

    global _handler
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(_handler)

    if level is not None:
        package_logger.setLevel(level.upper())
    elif package_logger.level == logging.NOTSET:
        package_logger.setLevel(get_settings().log_level.upper())
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace.

    Names from outside the package (``__main__``, scripts) are nested under
    it so every event goes through the same handler and level.
    """
    configure_logging()
    if name != PACKAGE_LOGGER_NAME and not name.startswith(PACKAGE_LOGGER_NAME + "."):
        name = f"{PACKAGE_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
