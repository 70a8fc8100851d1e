# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""In-memory metrics collector for tests and runs without a StatsD daemon."""

from dataclasses import dataclass
from typing import List, Optional

from .base import MetricsCollector, Tags


@dataclass(frozen=True)
class MetricRecord:
    kind: str  # "counter", "timing", "gauge" or "observation"
    name: str
    value: float
    tags: Tags = None


class NoOpMetricsCollector(MetricsCollector):
    """Sends nothing; keeps every emitted metric in ``records`` in call order."""

    def __init__(self, **kwargs):
        self.records: List[MetricRecord] = []

    def increment(self, name: str, value: float = 1.0, tags: Tags = None) -> None:
        self.records.append(MetricRecord("counter", name, value, tags))

    def timing(self, name: str, milliseconds: float, tags: Tags = None) -> None:
        self.records.append(MetricRecord("timing", name, milliseconds, tags))

    def gauge(self, name: str, value: float, tags: Tags = None) -> None:
        self.records.append(MetricRecord("gauge", name, value, tags))

    def observe(self, name: str, value: float, tags: Tags = None) -> None:
        self.records.append(MetricRecord("observation", name, value, tags))

    def _select(self, kind: str, name: Optional[str] = None, tags: Tags = None) -> List[MetricRecord]:
        return [
            record for record in self.records
            if record.kind == kind
            and (name is None or record.name == name)
            and (tags is None or record.tags == tags)
        ]

    @property
    def counters(self) -> List[MetricRecord]:
        return self._select("counter")

    @property
    def timings(self) -> List[MetricRecord]:
        return self._select("timing")

    def clear_metrics(self) -> None:
        self.records.clear()

    def get_counter_total(self, name: str, tags: Tags = None) -> float:
        """Sum of all increments of ``name``, optionally only those with ``tags``."""
        return sum(record.value for record in self._select("counter", name, tags))

    def get_counter_names(self) -> List[str]:
        """Names of all incremented counters, in call order."""
        return [record.name for record in self.counters]

    def get_timings(self, name: str) -> List[float]:
        return [record.value for record in self._select("timing", name)]

    def get_observations(self, name: str, tags: Tags = None) -> List[float]:
        return [record.value for record in self._select("observation", name, tags)]

    def get_gauge_value(self, name: str, tags: Tags = None) -> Optional[float]:
        gauges = self._select("gauge", name, tags)
        return gauges[-1].value if gauges else None
