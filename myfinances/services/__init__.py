"""Services package."""

from myfinances.services.auth import (
    AppleNativeProvider,
    AuthCancelledError,
    AuthError,
    AuthExchangeFailedError,
    GoogleOAuthProvider,
    IdentityProvider,
)
from myfinances.services.storage import (
    InMemoryKeyValueStorage,
    JSONFileKeyValueStorage,
    KeyValueStorageInterface,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    # Identity providers
    "AppleNativeProvider",
    "AuthCancelledError",
    "AuthError",
    "AuthExchangeFailedError",
    "GoogleOAuthProvider",
    "IdentityProvider",
    # Storage services
    "InMemoryKeyValueStorage",
    "JSONFileKeyValueStorage",
    "KeyValueStorageInterface",
    "StorageError",
    "StorageUnavailableError",
]
