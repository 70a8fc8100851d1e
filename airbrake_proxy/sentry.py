# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Relay of translated notices to Sentry's store API."""

import asyncio
import base64
import time
import zlib
from typing import Callable, Mapping

import httpx

from proxy_logging import Logger
from proxy_metrics import MetricsCollector

from . import __version__
from .backend import BackendForwarder
from .models import Classification, SentryEvent, SentryProject
from .translator import canonical_json

STORE_PATH = "/api/store/"
SENTRY_PROTOCOL_VERSION = 5
SENTRY_CLIENT = f"airbrake-proxy/{__version__}"


def encode_payload(event: SentryEvent) -> bytes:
    """Serialize, deflate and base64-encode an event for the store API."""
    compressed = zlib.compress(canonical_json(event.to_dict()).encode("utf-8"))
    return base64.b64encode(compressed)


def build_auth_header(project: SentryProject, now: float) -> str:
    """Build the X-Sentry-Auth header value.

    Args:
        project: Credentials of the target project
        now: Current time in seconds since the epoch

    Returns:
        Header value
    """
    return (
        f"Sentry sentry_version={SENTRY_PROTOCOL_VERSION}, "
        f"sentry_timestamp={int(now * 1000)}000, "
        f"sentry_client={SENTRY_CLIENT}, "
        f"sentry_key={project.key}, "
        f"sentry_secret={project.secret}"
    )


class SentryForwarder(BackendForwarder):
    """Posts translated events to Sentry; outcomes are only metered and logged."""

    backend_name = "sentry"

    def __init__(
        self,
        client: httpx.AsyncClient,
        host: str,
        port: int,
        protocol: str,
        timeout_ms: int,
        projects: Mapping[str, SentryProject],
        metrics: MetricsCollector,
        logger: Logger,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(client, host, port, protocol, timeout_ms, metrics, logger)
        self.projects = projects
        self._clock = clock

    async def forward(self, event: SentryEvent, identifier: str) -> Classification:
        """Relay one translated event.

        Args:
            event: Event built by the translator
            identifier: Identifier issued to the client (logging only)

        Returns:
            Classification of the attempt
        """
        log = self.logger.bind(backend=self.backend_name, identifier=identifier, event_id=event.event_id)
        project = self.projects.get(event.api_key)
        if project is None:
            log.warning(f"No Sentry credentials for Airbrake API key '{event.api_key}', will not send to Sentry")
            return Classification.SKIPPED

        # Compression is CPU-bound, keep it off the event loop
        payload = await asyncio.to_thread(encode_payload, event)
        headers = {
            "Connection": "close",
            "Content-Type": "application/octet-stream",
            "X-Sentry-Auth": build_auth_header(project, self._clock()),
        }

        response, outcome = await self._post(STORE_PATH, payload, headers, identifier)
        if response is None:
            return outcome

        if response.is_success:
            self.metrics.increment("sentry.request.success")
        else:
            self.metrics.increment("sentry.request.fail.status")
            log.warning(
                f"Sentry answered {response.status_code} for {identifier}: {response.text}",
                status_code=response.status_code,
            )
        return Classification.SUCCESS
