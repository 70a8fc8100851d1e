# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Metrics collector interface."""

from abc import ABC, abstractmethod
from typing import Dict, Optional

Tags = Optional[Dict[str, str]]


class MetricsCollector(ABC):
    """Counters, timers and gauges, named as dotted paths.

    Names are relative to the collector's namespace, e.g.
    ``airbrake.request.fail.timeout``; the driver applies the configured
    prefix. Tags are advisory and dropped by drivers without label support.
    """

    @abstractmethod
    def increment(self, name: str, value: float = 1.0, tags: Tags = None) -> None:
        """Add ``value`` to a counter."""

    @abstractmethod
    def timing(self, name: str, milliseconds: float, tags: Tags = None) -> None:
        """Record a duration in milliseconds."""

    @abstractmethod
    def gauge(self, name: str, value: float, tags: Tags = None) -> None:
        """Set a gauge to ``value``."""

    def observe(self, name: str, value: float, tags: Tags = None) -> None:
        """Record a sampled value; without a histogram type it is sent as a timer."""
        self.timing(name, value, tags=tags)
