# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Error reporter interface and the fault record shared by its drivers."""

import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

Context = Optional[Dict[str, Any]]


@dataclass(frozen=True)
class FaultReport:
    """An unexpected exception raised inside the proxy, with where it happened."""

    error_type: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    stack_trace: str = ""
    error: Optional[BaseException] = None

    @classmethod
    def from_exception(cls, error: BaseException, context: Context = None) -> "FaultReport":
        return cls(
            error_type=type(error).__name__,
            message=str(error),
            context=dict(context or {}),
            stack_trace="".join(traceback.format_exception(type(error), error, error.__traceback__)),
            error=error,
        )

    def summary(self) -> str:
        """One-line description, e.g. ``RuntimeError: boom [backend=sentry]``."""
        text = f"{self.error_type}: {self.message}"
        if self.context:
            text += " [" + " ".join(f"{k}={v}" for k, v in self.context.items()) + "]"
        return text


class ErrorReporter(ABC):
    """Destination for faults in the proxy itself.

    Relay outcomes such as timeouts or rejected notices are not faults and
    never reach a reporter.
    """

    @abstractmethod
    def report(self, error: Exception, context: Context = None) -> None:
        """Report an exception.

        Args:
            error: The exception to report
            context: Where it happened, e.g. ``{"identifier": ..., "backend": ...}``
        """

    @abstractmethod
    def capture_message(self, message: str, level: str = "error", context: Context = None) -> None:
        """Report a condition that has no exception attached."""
