# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Reports the proxy's own faults to a Sentry project through sentry-sdk.

This is separate from the notices the proxy relays to Sentry for its
clients: those are built and sent by ``airbrake_proxy.sentry``.
"""

from contextlib import contextmanager
from typing import Optional

import sentry_sdk

from .error_reporter import Context, ErrorReporter

# sentry-sdk has no "critical"
SDK_LEVELS = {"debug": "debug", "info": "info", "warning": "warning", "error": "error", "critical": "fatal"}


class SentryErrorReporter(ErrorReporter):
    """Example:
        reporter = SentryErrorReporter(dsn="https://...@sentry.io/...")
        reporter.report(exception, context={"identifier": "..."})
    """

    def __init__(self, dsn: Optional[str] = None, environment: Optional[str] = None):
        self.dsn = dsn
        self.environment = environment
        self.enabled = bool(dsn)
        if self.enabled:
            sentry_sdk.init(dsn=dsn, environment=environment)

    def _require_enabled(self) -> None:
        if not self.enabled:
            raise RuntimeError("Sentry reporter not initialized with a valid DSN")

    @contextmanager
    def _scope(self, context: Context):
        if not context:
            yield
            return
        with sentry_sdk.new_scope() as scope:
            for key, value in context.items():
                scope.set_tag(key, str(value))
            scope.set_context("proxy", context)
            yield

    def report(self, error: Exception, context: Context = None) -> None:
        self._require_enabled()
        with self._scope(context):
            sentry_sdk.capture_exception(error)

    def capture_message(self, message: str, level: str = "error", context: Context = None) -> None:
        self._require_enabled()
        with self._scope(context):
            sentry_sdk.capture_message(message, level=SDK_LEVELS.get(level.lower(), "error"))
