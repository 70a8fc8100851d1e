# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Route uvicorn's own logging through the proxy's JSON line format."""

import json
import logging
from typing import Any, Dict

from .stdout_logger import build_entry


class JSONFormatter(logging.Formatter):
    """Formats stdlib records exactly like StdoutLogger entries."""

    def __init__(self, logger_name: str = "uvicorn"):
        super().__init__()
        self.logger_name = logger_name

    def format(self, record: logging.LogRecord) -> str:
        entry = build_entry(
            record.levelname,
            self.logger_name,
            record.getMessage(),
            getattr(record, "fields", None),
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def create_uvicorn_log_config(service_name: str, log_level: str = "INFO") -> Dict[str, Any]:
    """Build a ``log_config`` dict for ``uvicorn.Config``.

    Server and error logs follow ``log_level``. Access logs are held at
    WARNING since every notice would otherwise produce a line per worker.
    """
    handler = {"handlers": ["stdout"], "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JSONFormatter, "logger_name": service_name},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn": {**handler, "level": log_level},
            "uvicorn.error": {**handler, "level": log_level},
            "uvicorn.access": {**handler, "level": "WARNING"},
        },
    }
