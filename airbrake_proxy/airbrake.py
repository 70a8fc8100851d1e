# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Relay of raw notices to Airbrake."""

import xml.etree.ElementTree as ET
from typing import Optional, Tuple, Union

import httpx

from proxy_logging import Logger
from proxy_metrics import MetricsCollector
from proxy_store import CorrelationStore, CorrelationStoreError

from .backend import BackendForwarder
from .models import Classification

RATE_LIMITED_MESSAGE = "Project is rate limited."


def classify_airbrake_response(body: Union[bytes, str]) -> Tuple[Classification, Optional[str]]:
    """Classify an Airbrake response body.

    Args:
        body: Response body

    Returns:
        (SUCCESS, notice_id), (RATE_LIMITED, None) or (MALFORMED, None)
    """
    try:
        root = ET.fromstring(body)
    except (ET.ParseError, ValueError):
        return Classification.MALFORMED, None

    if root.tag == "notice":
        notice_id = (root.findtext("id") or "").strip()
        if notice_id:
            return Classification.SUCCESS, notice_id
    elif root.tag == "error" and (root.text or "").strip() == RATE_LIMITED_MESSAGE:
        return Classification.RATE_LIMITED, None

    return Classification.MALFORMED, None


class AirbrakeForwarder(BackendForwarder):
    """Posts the client's notice to Airbrake unchanged and records the notice id."""

    backend_name = "airbrake"

    def __init__(
        self,
        client: httpx.AsyncClient,
        host: str,
        port: int,
        protocol: str,
        timeout_ms: int,
        store: CorrelationStore,
        metrics: MetricsCollector,
        logger: Logger,
    ):
        super().__init__(client, host, port, protocol, timeout_ms, metrics, logger)
        self.store = store

    async def forward(self, path: str, identifier: str, body: bytes) -> Classification:
        """Relay one notice.

        Args:
            path: Request target the client posted to (path and query)
            identifier: Identifier issued to the client; never sent to Airbrake
            body: Raw notice as received

        Returns:
            Classification of the attempt
        """
        response, outcome = await self._post(
            path,
            body,
            {"Content-Type": "text/xml", "Connection": "close"},
            identifier,
        )
        if response is None:
            return outcome

        outcome, notice_id = classify_airbrake_response(response.content)
        log = self.logger.bind(backend=self.backend_name, identifier=identifier)

        if outcome is Classification.SUCCESS:
            try:
                await self.store.set(identifier, notice_id)
            except CorrelationStoreError as e:
                log.error(f"Could not record Airbrake notice {notice_id} for {identifier}: {e}")
            self.metrics.increment("airbrake.request.success")
            log.debug(f"Airbrake accepted {identifier} as {notice_id}")
        elif outcome is Classification.RATE_LIMITED:
            self.metrics.increment("airbrake.request.fail.ratelimited")
            log.warning(f"Airbrake rate limited {identifier}, exception lost")
        else:
            self.metrics.increment("airbrake.request.fail.xml")
            log.error(
                f"XML object returned from {self.host}:{self.port} is invalid; response: {response.text}",
                status_code=response.status_code,
            )

        return outcome
