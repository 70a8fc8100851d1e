# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Factory for creating correlation store instances."""

from .correlation_store import CorrelationStore
from .inmemory_correlation_store import InMemoryCorrelationStore
from .redis_correlation_store import RedisCorrelationStore


def create_correlation_store(
    store_type: str,
    host: str = "localhost",
    port: int = 6379,
    db: int = 0,
    key: str = "airbrake-proxy",
) -> CorrelationStore:
    """Create a correlation store based on store type.

    Args:
        store_type: "redis" or "inmemory"
        host: Redis host (redis only)
        port: Redis port (redis only)
        db: Redis database number (redis only)
        key: Name of the Redis hash holding the records (redis only)

    Returns:
        CorrelationStore instance (not yet connected)

    Raises:
        ValueError: If store_type is unknown
    """
    store_type = store_type.lower()
    if store_type == "redis":
        return RedisCorrelationStore(host=host, port=port, db=db, key=key)
    elif store_type == "inmemory":
        return InMemoryCorrelationStore()
    else:
        raise ValueError(f"Unknown correlation store type: {store_type}. Must be one of: redis, inmemory")
