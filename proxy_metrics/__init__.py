# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Metrics for relay outcomes and latencies.

Example:
    >>> from proxy_metrics import create_metrics_collector
    >>> metrics = create_metrics_collector("statsd", prefix="airbrake-proxy")
    >>> metrics.increment("airbrake.request.fail.timeout")
    >>> metrics.timing("sentry.request", 182.4)
"""

__version__ = "0.1.0"

from .base import MetricsCollector
from .factory import create_metrics_collector
from .noop_metrics import MetricRecord, NoOpMetricsCollector
from .statsd_metrics import StatsDMetricsCollector

__all__ = [
    "__version__",
    "MetricRecord",
    "MetricsCollector",
    "NoOpMetricsCollector",
    "StatsDMetricsCollector",
    "create_metrics_collector",
]
