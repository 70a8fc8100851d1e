# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""In-memory correlation store for testing and single-worker runs."""

from typing import Dict, Optional

from .correlation_store import CorrelationStore


class InMemoryCorrelationStore(CorrelationStore):
    """Dictionary-backed correlation store.

    Not shared between worker processes: a lookup only resolves when it
    lands on the worker that accepted the notice.
    """

    def __init__(self):
        self.values: Dict[str, str] = {}
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value
