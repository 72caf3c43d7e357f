"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The app only needs an opaque string-keyed store of text
blobs, the same contract a mobile async key-value store offers.
This allows us to:
1. Use in-memory storage for testing
2. Keep a local JSON file as the durable engine
3. Keep session and ledger logic decoupled from the engine

Keys in use:
- SESSION_KEY holds the persisted Identity
- ledger keys (see myfinances.ledger.ledger_key) hold one user's records
"""

from abc import ABC, abstractmethod
from typing import Optional


SESSION_KEY = "session-identity"
LEDGER_KEY_PREFIX = "ledger-records:"


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    Any engine must implement these methods. Engine failures are raised
    as StorageUnavailableError so callers can tell them apart from
    missing data.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageUnavailableError: If the engine cannot be read
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            StorageUnavailableError: If the write fails
        """
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """
        Delete a key. Removing an absent key is a no-op.

        Raises:
            StorageUnavailableError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The storage engine could not be read or written."""

    def __init__(self, operation: str, key: str, message: str):
        self.operation = operation
        self.key = key
        super().__init__(f"Storage {operation} failed for '{key}': {message}")
