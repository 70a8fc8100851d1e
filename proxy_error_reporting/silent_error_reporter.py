# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""In-memory error reporter for tests."""

from typing import Any, Dict, List, Optional

from .error_reporter import Context, ErrorReporter, FaultReport


class SilentErrorReporter(ErrorReporter):
    """Keeps faults and messages for assertions; reports nothing."""

    def __init__(self):
        self.faults: List[FaultReport] = []
        self.messages: List[Dict[str, Any]] = []

    def report(self, error: Exception, context: Context = None) -> None:
        self.faults.append(FaultReport.from_exception(error, context))

    def capture_message(self, message: str, level: str = "error", context: Context = None) -> None:
        self.messages.append({"message": message, "level": level, "context": dict(context or {})})

    def get_errors(self, error_type: Optional[str] = None) -> List[FaultReport]:
        """Reported faults, optionally only those of the named exception class."""
        return [f for f in self.faults if error_type is None or f.error_type == error_type]

    def has_errors(self) -> bool:
        return bool(self.faults)

    def clear(self) -> None:
        self.faults.clear()
        self.messages.clear()
