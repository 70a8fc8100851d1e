# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Relay service: issues identifiers, answers lookups and fans notices out to the backends."""

import asyncio
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from proxy_error_reporting import ErrorReporter
from proxy_logging import Logger
from proxy_metrics import MetricsCollector
from proxy_store import PENDING, CorrelationStore, CorrelationStoreError

from .airbrake import AirbrakeForwarder
from .models import Classification, Submission
from .sentry import SentryForwarder
from .translator import NoticeParseError, SentryTranslator, parse_notice

IDENTIFIER_LENGTH = 36
UUID_PLACEHOLDER = "{UUID}"


def build_response_template(hostname: str, port: int) -> str:
    """Acknowledgement returned to Airbrake clients; ``{UUID}`` is filled per request."""
    return (
        '<?xml version="1.0"?>'
        f"<notice><id>{UUID_PLACEHOLDER}</id>"
        f"<url>http://{hostname}:{port}/locate/{UUID_PLACEHOLDER}</url></notice>"
    )


def sanitize_lookup_key(target: str) -> str:
    """Reduce a lookup request target to the identifier it names."""
    return target.replace("/locate/", "").replace("/", "")[:IDENTIFIER_LENGTH]


def _new_uuid() -> str:
    return str(uuid.uuid4())


class ProxyService:
    """Owns the relay collaborators of one worker process."""

    def __init__(
        self,
        store: CorrelationStore,
        airbrake: AirbrakeForwarder,
        metrics_collector: MetricsCollector,
        logger: Logger,
        error_reporter: ErrorReporter,
        response_template: str,
        locate_url: str = "https://airbrake.io",
        sentry: Optional[SentryForwarder] = None,
        translator: Optional[SentryTranslator] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        id_factory: Callable[[], str] = _new_uuid,
    ):
        """Initialize proxy service.

        Args:
            store: Correlation store for identifier to notice id records
            airbrake: Airbrake forwarder
            metrics_collector: Metrics collector
            logger: Logger
            error_reporter: Receives unexpected exceptions from relays
            response_template: Acknowledgement body, see build_response_template
            locate_url: Base URL that lookups redirect to
            sentry: Sentry forwarder; None disables the Sentry relay
            translator: Notice translator, required when sentry is set
            http_client: Client shared by the forwarders, closed with the service
            id_factory: Returns a fresh identifier per submission
        """
        if sentry is not None and translator is None:
            raise ValueError("A translator is required when the Sentry relay is enabled")

        self.store = store
        self.airbrake = airbrake
        self.sentry = sentry
        self.translator = translator
        self.metrics_collector = metrics_collector
        self.logger = logger
        self.error_reporter = error_reporter
        self.response_template = response_template
        self.locate_url = locate_url.rstrip("/")
        self.http_client = http_client
        self._id_factory = id_factory

        # Stats
        self.submissions_accepted = 0
        self.relays_completed = 0
        self.relays_crashed = 0

    async def start(self) -> None:
        await self.store.connect()
        self.logger.info(
            "Proxy service started",
            sentry_enabled=self.sentry is not None,
        )

    async def close(self) -> None:
        try:
            await self.store.disconnect()
        finally:
            if self.http_client is not None:
                await self.http_client.aclose()

    def new_identifier(self) -> str:
        self.submissions_accepted += 1
        return self._id_factory()

    def render_response(self, identifier: str) -> str:
        return self.response_template.replace(UUID_PLACEHOLDER, identifier)

    def locate_location(self, notice_id: str) -> str:
        return f"{self.locate_url}/locate/{notice_id}"

    async def lookup(self, target: str) -> Optional[str]:
        """Resolve a lookup request target to an Airbrake notice id.

        Args:
            target: Raw request target (path and query) of the lookup

        Returns:
            The notice id, or None when the identifier is unknown, still
            pending, or the store could not be read
        """
        key = sanitize_lookup_key(target)
        try:
            value = await self.store.get(key)
        except CorrelationStoreError as e:
            self.logger.error(f"Lookup of {key} failed: {e}", identifier=key)
            return None

        if value is None or value == PENDING:
            return None
        return value

    async def dispatch(self, submission: Submission) -> None:
        """Relay one accepted notice to every configured backend.

        The Airbrake and Sentry relays run concurrently and independently;
        a failure in one never cancels or delays the other.
        """
        self.metrics_collector.timing(
            "http.request", (time.monotonic() - submission.received_at) * 1000
        )

        relays = [self._guard("airbrake", submission, self.relay_airbrake(submission))]
        if self.sentry is not None:
            relays.append(self._guard("sentry", submission, self.relay_sentry(submission)))

        await asyncio.gather(*relays)

    async def relay_airbrake(self, submission: Submission) -> Classification:
        try:
            await self.store.set(submission.identifier, PENDING)
        except CorrelationStoreError as e:
            self.logger.warning(
                f"Could not record pending notice {submission.identifier}: {e}",
                identifier=submission.identifier,
            )

        return await self.airbrake.forward(submission.path, submission.identifier, submission.body)

    async def relay_sentry(self, submission: Submission) -> Classification:
        try:
            notice = parse_notice(submission.body)
        except NoticeParseError as e:
            self.metrics_collector.increment("sentry.request.fail.xml")
            self.logger.error(
                f"Could not translate notice {submission.identifier} for Sentry: {e}",
                identifier=submission.identifier,
            )
            return Classification.MALFORMED

        event = self.translator.translate_notice(notice)
        if event is None:
            self.metrics_collector.increment("sentry.request.skipped")
            self.logger.info(
                f"Airbrake API key '{notice.api_key}' not defined in Sentry projects configuration, "
                "will not send to Sentry",
                identifier=submission.identifier,
            )
            return Classification.SKIPPED

        return await self.sentry.forward(event, submission.identifier)

    async def _guard(
        self,
        backend: str,
        submission: Submission,
        relay: Awaitable[Classification],
    ) -> Optional[Classification]:
        try:
            outcome = await relay
        except Exception as e:
            self.relays_crashed += 1
            context = {"identifier": submission.identifier, "backend": backend}
            log = self.logger.bind(**context)
            log.exception(f"Unexpected error relaying {submission.identifier} to {backend}: {e}")
            try:
                self.error_reporter.report(e, context=context)
            except Exception as report_error:
                log.error(f"Error reporter failed for {submission.identifier}: {report_error}")
            return None

        self.relays_completed += 1
        return outcome

    def get_stats(self) -> Dict[str, Any]:
        return {
            "submissions_accepted": self.submissions_accepted,
            "relays_completed": self.relays_completed,
            "relays_crashed": self.relays_crashed,
        }
