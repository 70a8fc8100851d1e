# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Logger interface shared by every part of the proxy."""

from abc import ABC, abstractmethod
from typing import Any, Dict

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Logger(ABC):
    """Structured logger.

    Drivers implement ``log``; the level methods and ``bind`` are shared.
    Keyword arguments become structured fields of the entry, so callers pass
    ``identifier=...`` rather than formatting it into the message.
    """

    @abstractmethod
    def log(self, level: str, message: str, **fields: Any) -> None:
        """Emit one entry.

        Args:
            level: One of DEBUG, INFO, WARNING, ERROR
            message: Human-readable message
            **fields: Structured fields; ``exc_info`` is passed to stdlib logging
        """

    def debug(self, message: str, **fields: Any) -> None:
        self.log("DEBUG", message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self.log("INFO", message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.log("WARNING", message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.log("ERROR", message, **fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at ERROR with the active exception attached."""
        fields.setdefault("exc_info", True)
        self.log("ERROR", message, **fields)

    def bind(self, **fields: Any) -> "Logger":
        """Return a logger that adds ``fields`` to every entry.

        Example:
            >>> relay_log = logger.bind(identifier=identifier, backend="sentry")
            >>> relay_log.warning("timed out")  # carries identifier and backend
        """
        return BoundLogger(self, fields)


class BoundLogger(Logger):
    """Logger wrapper that merges fixed fields into each entry."""

    def __init__(self, parent: Logger, fields: Dict[str, Any]):
        self.parent = parent
        self.fields = dict(fields)

    def log(self, level: str, message: str, **fields: Any) -> None:
        self.parent.log(level, message, **{**self.fields, **fields})

    def bind(self, **fields: Any) -> Logger:
        return BoundLogger(self.parent, {**self.fields, **fields})
