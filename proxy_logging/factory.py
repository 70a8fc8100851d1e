# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Logger construction from explicit arguments or the environment."""

import os
from typing import Optional

from .logger import Logger
from .silent_logger import SilentLogger
from .stdout_logger import StdoutLogger

_DRIVERS = {
    "stdout": StdoutLogger,
    "silent": SilentLogger,
}


def create_logger(
    logger_type: Optional[str] = None,
    level: Optional[str] = None,
    name: Optional[str] = None,
) -> Logger:
    """Create a logger.

    Unset arguments fall back to LOG_TYPE, LOG_LEVEL and LOG_NAME, then to
    ``stdout``, ``INFO`` and ``airbrake-proxy``. The worker bootstrap calls
    this before configuration is loaded.

    Raises:
        ValueError: If logger_type or level is unknown
    """
    logger_type = (logger_type or os.getenv("LOG_TYPE") or "stdout").lower()
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    name = name or os.getenv("LOG_NAME") or "airbrake-proxy"

    try:
        driver = _DRIVERS[logger_type]
    except KeyError:
        raise ValueError(
            f"Unknown logger_type: {logger_type}. Must be one of: {', '.join(_DRIVERS)}"
        ) from None
    return driver(level=level, name=name)
