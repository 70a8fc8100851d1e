# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""In-memory logger for tests."""

from typing import Any, Dict, List, Optional

from .logger import Logger


class SilentLogger(Logger):
    """Keeps every entry in ``logs`` regardless of level; writes nothing."""

    def __init__(self, level: str = "INFO", name: Optional[str] = None):
        self.level = level.upper()
        self.name = name or "airbrake-proxy"
        self.logs: List[Dict[str, Any]] = []

    def log(self, level: str, message: str, **fields: Any) -> None:
        fields.pop("exc_info", None)
        self.logs.append({"level": level, "message": message, "extra": fields})

    def clear_logs(self) -> None:
        self.logs.clear()

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        if level is None:
            return list(self.logs)
        return [entry for entry in self.logs if entry["level"] == level.upper()]

    def has_log(self, message: str, level: Optional[str] = None) -> bool:
        """True if an entry (optionally of ``level``) contains ``message``."""
        return any(message in entry["message"] for entry in self.get_logs(level))
