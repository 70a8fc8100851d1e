# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Structured logging for airbrake-proxy.

Example:
    >>> from proxy_logging import create_logger
    >>> logger = create_logger(logger_type="stdout", level="INFO")
    >>> relay_log = logger.bind(identifier="9f1c2b7e-...", backend="airbrake")
    >>> relay_log.warning("Airbrake rate limited the notice")
"""

__version__ = "0.1.0"

from .factory import create_logger
from .logger import LEVELS, BoundLogger, Logger
from .silent_logger import SilentLogger
from .stdout_logger import StdoutLogger
from .uvicorn_config import create_uvicorn_log_config

__all__ = [
    "__version__",
    "BoundLogger",
    "LEVELS",
    "Logger",
    "SilentLogger",
    "StdoutLogger",
    "create_logger",
    "create_uvicorn_log_config",
]
