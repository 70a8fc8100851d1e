# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Metrics collector construction."""

import os
from typing import Optional

from .base import MetricsCollector
from .noop_metrics import NoOpMetricsCollector
from .statsd_metrics import StatsDMetricsCollector


def create_metrics_collector(
    backend: Optional[str] = None,
    host: str = "localhost",
    port: int = 8125,
    prefix: Optional[str] = None,
) -> MetricsCollector:
    """Create a metrics collector.

    Args:
        backend: "statsd" or "noop"; defaults to METRICS_BACKEND, then "noop"
        host: StatsD daemon host
        port: StatsD daemon UDP port
        prefix: Namespace applied to every metric name

    Raises:
        ValueError: If backend is unknown
    """
    backend = (backend or os.getenv("METRICS_BACKEND") or "noop").lower()

    if backend == "statsd":
        return StatsDMetricsCollector(host=host, port=port, prefix=prefix)
    if backend == "noop":
        return NoOpMetricsCollector()
    raise ValueError(f"Unknown metrics backend: {backend}. Must be one of: statsd, noop")
