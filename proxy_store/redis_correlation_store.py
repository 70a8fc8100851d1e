# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Redis-backed correlation store."""

import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .correlation_store import (
    CorrelationStore,
    CorrelationStoreConnectionError,
    CorrelationStoreError,
)

logger = logging.getLogger(__name__)


class RedisCorrelationStore(CorrelationStore):
    """Correlation store kept in a single Redis hash.

    Every identifier is a field of the hash named by ``key``, so all
    workers (and all proxy hosts pointed at the same Redis) resolve the
    same lookups.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        key: str = "airbrake-proxy",
        client: Optional[Any] = None,
    ):
        """Initialize Redis correlation store.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            key: Name of the hash holding all correlation records
            client: Optional pre-built redis.asyncio client (used by tests)
        """
        self.host = host
        self.port = port
        self.db = db
        self.key = key
        self._client = client

    async def connect(self) -> None:
        if self._client is None:
            self._client = redis.Redis(host=self.host, port=self.port, db=self.db, decode_responses=True)
        try:
            await self._client.ping()
        except RedisError as e:
            raise CorrelationStoreConnectionError(
                f"Could not connect to Redis at {self.host}:{self.port}: {e}"
            ) from e
        logger.info(f"Connected to Redis at {self.host}:{self.port} (hash: {self.key})")

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> Any:
        if self._client is None:
            raise CorrelationStoreConnectionError("Redis correlation store is not connected")
        return self._client

    async def get(self, key: str) -> Optional[str]:
        client = self._require_client()
        try:
            value = await client.hget(self.key, key)
        except RedisError as e:
            raise CorrelationStoreError(f"Failed to read {key} from {self.key}: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        client = self._require_client()
        try:
            await client.hset(self.key, key, value)
        except RedisError as e:
            raise CorrelationStoreError(f"Failed to write {key} to {self.key}: {e}") from e
