# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Reporting of unexpected exceptions raised inside airbrake-proxy.

Example:
    >>> from proxy_error_reporting import create_error_reporter
    >>> reporter = create_error_reporter("sentry", dsn=dsn, environment="production")
    >>> reporter.report(error, context={"identifier": identifier, "backend": "airbrake"})
"""

from typing import Optional

from proxy_logging import Logger, create_logger

from .console_error_reporter import ConsoleErrorReporter
from .error_reporter import ErrorReporter, FaultReport
from .sentry_error_reporter import SentryErrorReporter
from .silent_error_reporter import SilentErrorReporter

__version__ = "0.1.0"

REPORTER_TYPES = ("console", "silent", "sentry")


def create_error_reporter(
    reporter_type: str = "console",
    logger: Optional[Logger] = None,
    dsn: Optional[str] = None,
    environment: str = "production",
) -> ErrorReporter:
    """Create an error reporter.

    Args:
        reporter_type: One of console, silent, sentry
        logger: Destination of the console reporter; a stdout logger by default
        dsn: DSN of the Sentry project receiving the proxy's own faults
        environment: Sentry environment name

    Raises:
        ValueError: If reporter_type is unknown
    """
    if reporter_type == "console":
        return ConsoleErrorReporter(logger or create_logger(logger_type="stdout"))
    if reporter_type == "silent":
        return SilentErrorReporter()
    if reporter_type == "sentry":
        return SentryErrorReporter(dsn=dsn, environment=environment)
    raise ValueError(f"Unknown reporter type: {reporter_type}. Must be one of: {', '.join(REPORTER_TYPES)}")


__all__ = [
    "__version__",
    "ConsoleErrorReporter",
    "ErrorReporter",
    "FaultReport",
    "SentryErrorReporter",
    "SilentErrorReporter",
    "create_error_reporter",
]
