# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Abstract correlation store interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Value held for an identifier until Airbrake answers with a notice id.
PENDING = "null"


class CorrelationStoreError(Exception):
    """Base exception for correlation store errors."""
    pass


class CorrelationStoreConnectionError(CorrelationStoreError):
    """Exception raised when connection to the correlation store fails."""
    pass


class CorrelationStore(ABC):
    """Abstract base class for identifier-to-notice-id stores.

    Each key is written at most twice (pending, then the final notice id) by
    the single submission that created it, so implementations only need
    single-key reads and writes.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the store.

        Raises:
            CorrelationStoreConnectionError: If connection fails
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the store connection."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get the value stored for an identifier.

        Args:
            key: Identifier issued to the client

        Returns:
            The stored value (a notice id or PENDING), or None if absent

        Raises:
            CorrelationStoreError: If the read fails
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value for an identifier.

        Args:
            key: Identifier issued to the client
            value: Notice id or PENDING

        Raises:
            CorrelationStoreError: If the write fails
        """
        pass
