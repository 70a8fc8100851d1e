# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""StatsD metrics collector."""

from typing import Optional

from statsd import StatsClient

from .base import MetricsCollector, Tags


class StatsDMetricsCollector(MetricsCollector):
    """Fire-and-forget UDP StatsD collector.

    The prefix is applied by the client: ``increment("airbrake.request.success")``
    with prefix ``airbrake-proxy`` is sent as
    ``airbrake-proxy.airbrake.request.success:1|c``. A missing daemon never
    slows or fails the caller. StatsD has no labels, so tags are dropped.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8125,
        prefix: Optional[str] = None,
        client: Optional[StatsClient] = None,
    ):
        self.host = host
        self.port = port
        self.prefix = prefix or None
        self._client = client if client is not None else StatsClient(host=host, port=port, prefix=self.prefix)

    def increment(self, name: str, value: float = 1.0, tags: Tags = None) -> None:
        self._client.incr(name, int(value))

    def timing(self, name: str, milliseconds: float, tags: Tags = None) -> None:
        self._client.timing(name, milliseconds)

    def gauge(self, name: str, value: float, tags: Tags = None) -> None:
        self._client.gauge(name, value)
