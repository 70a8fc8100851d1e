# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Shared HTTP transport for the backend forwarders."""

import asyncio
import time
from typing import Mapping, Optional, Tuple

import httpx

from proxy_logging import Logger
from proxy_metrics import MetricsCollector

from .models import Classification


class BackendForwarder:
    """Posts one payload to a backend under a hard deadline.

    Subclasses set ``backend_name``, which namespaces their metrics
    (``<backend_name>.request``, ``<backend_name>.request.fail.timeout``, ...).
    Every call ends in exactly one of: a complete response, a timeout, or a
    transport error. A call is never retried.
    """

    backend_name = "backend"

    def __init__(
        self,
        client: httpx.AsyncClient,
        host: str,
        port: int,
        protocol: str,
        timeout_ms: int,
        metrics: MetricsCollector,
        logger: Logger,
    ):
        """Initialize forwarder.

        Args:
            client: Shared async HTTP client owned by the worker
            host: Backend host
            port: Backend port
            protocol: "http" or "https"
            timeout_ms: Deadline for the whole call, in milliseconds
            metrics: Metrics collector
            logger: Logger
        """
        self.client = client
        self.host = host
        self.port = port
        self.protocol = protocol
        self.timeout_ms = timeout_ms
        self.metrics = metrics
        self.logger = logger

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"

    async def _post(
        self,
        path: str,
        content: bytes,
        headers: Mapping[str, str],
        identifier: str,
    ) -> Tuple[Optional[httpx.Response], Classification]:
        """POST content and wait for the full response body.

        Returns:
            (response, SUCCESS) once the response is complete, otherwise
            (None, TIMEOUT) or (None, CONNECTION_ERROR)
        """
        log = self.logger.bind(backend=self.backend_name, identifier=identifier)
        timeout = self.timeout_ms / 1000
        start = time.perf_counter()
        try:
            # wait_for cancels the in-flight request on expiry, so nothing
            # more is read from the connection.
            response = await asyncio.wait_for(
                self.client.post(
                    f"{self.base_url}{path}",
                    content=content,
                    headers=dict(headers),
                    timeout=httpx.Timeout(timeout),
                ),
                timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            self.metrics.increment(f"{self.backend_name}.request.fail.timeout")
            log.warning(f"Connection to {self.host}:{self.port} for {identifier} timed out after {self.timeout_ms}ms")
            return None, Classification.TIMEOUT
        except httpx.TransportError as e:
            self.metrics.increment(f"{self.backend_name}.request.fail.error")
            log.error(f"Failed sending request to {self.host}:{self.port} for {identifier}, exception lost; error: {e}")
            return None, Classification.CONNECTION_ERROR

        self.metrics.timing(f"{self.backend_name}.request", (time.perf_counter() - start) * 1000)
        return response, Classification.SUCCESS
