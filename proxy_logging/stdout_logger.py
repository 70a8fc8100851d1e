# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""JSON-lines logger for production workers."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .logger import LEVELS, Logger


def build_entry(level: str, logger_name: str, message: str, fields: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build the JSON object written for one log entry.

    The worker pid is part of every entry so interleaved output from the
    pool can be told apart.
    """
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": level,
        "logger": logger_name,
        "pid": os.getpid(),
        "message": message,
    }
    if fields:
        entry["extra"] = fields
    return entry


class StdoutLogger(Logger):
    """Writes one JSON object per line to stdout and mirrors it to stdlib logging."""

    def __init__(self, level: str = "INFO", name: Optional[str] = None):
        """Initialize stdout logger.

        Args:
            level: Minimum level written (DEBUG, INFO, WARNING, ERROR)
            name: Logger name, also used for the stdlib logger

        Raises:
            ValueError: If level is not a known level
        """
        self.level = level.upper()
        if self.level not in LEVELS:
            raise ValueError(f"Invalid log level: {level}. Must be one of {list(LEVELS)}")
        self.name = name or "airbrake-proxy"
        self._threshold = getattr(logging, self.level)
        # Mirrored records let pytest's caplog and extra handlers see entries
        self._stdlib_logger = logging.getLogger(self.name)
        # Without a handler anywhere, stdlib would echo WARNING+ to stderr
        if not any(isinstance(h, logging.NullHandler) for h in self._stdlib_logger.handlers):
            self._stdlib_logger.addHandler(logging.NullHandler())

    def log(self, level: str, message: str, **fields: Any) -> None:
        levelno = getattr(logging, level)
        if levelno < self._threshold:
            return

        exc_info = fields.pop("exc_info", None)
        line = json.dumps(build_entry(level, self.name, message, fields), default=str)
        sys.stdout.write(line + "\n")
        sys.stdout.flush()

        self._stdlib_logger.log(levelno, message, exc_info=exc_info, extra={"fields": fields})
