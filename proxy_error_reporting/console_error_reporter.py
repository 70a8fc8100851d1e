# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Error reporter that writes faults to the proxy's own log."""

from proxy_logging import LEVELS, Logger

from .error_reporter import Context, ErrorReporter, FaultReport


class ConsoleErrorReporter(ErrorReporter):
    """Logs each fault as an ERROR entry; the stack trace follows at DEBUG."""

    def __init__(self, logger: Logger):
        self.logger = logger

    def report(self, error: Exception, context: Context = None) -> None:
        fault = FaultReport.from_exception(error, context)
        log = self.logger.bind(**{**fault.context, "error_type": fault.error_type})
        log.error(f"Unhandled {fault.summary()}")
        log.debug(f"Stack trace:\n{fault.stack_trace}")

    def capture_message(self, message: str, level: str = "error", context: Context = None) -> None:
        level = level.upper()
        if level not in LEVELS:
            level = "ERROR"
        self.logger.log(level, message, **(context or {}))
