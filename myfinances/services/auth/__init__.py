"""Identity provider services package."""

from myfinances.services.auth.providers import (
    AppleNativeProvider,
    AuthCancelledError,
    AuthError,
    AuthExchangeFailedError,
    AuthorizationResponse,
    GoogleOAuthProvider,
    IdentityProvider,
    identity_from_apple,
    identity_from_google,
    normalize_identity,
)

__all__ = [
    "AppleNativeProvider",
    "AuthCancelledError",
    "AuthError",
    "AuthExchangeFailedError",
    "AuthorizationResponse",
    "GoogleOAuthProvider",
    "IdentityProvider",
    "identity_from_apple",
    "identity_from_google",
    "normalize_identity",
]
