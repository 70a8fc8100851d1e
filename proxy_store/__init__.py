# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Correlation store adapter for airbrake-proxy.

Maps the identifiers handed to Airbrake clients onto the notice ids that
Airbrake assigns once a relay completes.
"""

__version__ = "0.1.0"

from .correlation_store import (
    PENDING,
    CorrelationStore,
    CorrelationStoreConnectionError,
    CorrelationStoreError,
)
from .factory import create_correlation_store
from .inmemory_correlation_store import InMemoryCorrelationStore
from .redis_correlation_store import RedisCorrelationStore

__all__ = [
    "__version__",
    "PENDING",
    "CorrelationStore",
    "CorrelationStoreError",
    "CorrelationStoreConnectionError",
    "InMemoryCorrelationStore",
    "RedisCorrelationStore",
    "create_correlation_store",
]
