"""
Storage Services Package

Provides the abstract key-value interface and its local engines.
The engine is swappable; session and ledger code only see the interface.
"""

from myfinances.services.storage.interface import (
    LEDGER_KEY_PREFIX,
    SESSION_KEY,
    KeyValueStorageInterface,
    StorageError,
    StorageUnavailableError,
)
from myfinances.services.storage.json_file import JSONFileKeyValueStorage
from myfinances.services.storage.memory import InMemoryKeyValueStorage

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    "LEDGER_KEY_PREFIX",
    "SESSION_KEY",
    # Exceptions
    "StorageError",
    "StorageUnavailableError",
    # Engines
    "InMemoryKeyValueStorage",
    "JSONFileKeyValueStorage",
]
