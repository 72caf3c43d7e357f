"""
Identity Providers

Two ways to sign in:
1. Google - browser redirect returns an access token, which is redeemed
   against the userinfo endpoint for the profile
2. Apple - the platform prompt returns a native credential that already
   carries id, email and given name

The browser redirect and the native prompt are injected callables. This
module only builds the request, interprets the answer and normalizes the
profile into an Identity.

IMPORTANT BOUNDARIES:
1. authorize() never raises for expected failures; it returns AuthFailure
2. normalize_identity() turns AuthFailure into AuthCancelledError or
   AuthExchangeFailedError for the session manager to propagate
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from myfinances.config import GoogleOAuthSettings, get_settings
from myfinances.models.identity import (
    AppleCredential,
    AuthFailure,
    GoogleUserInfo,
    Identity,
    ProviderOutcome,
)


class AuthError(Exception):
    """Base exception for sign-in errors."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(message)


class AuthCancelledError(AuthError):
    """User aborted the sign-in. A normal outcome, not a failure."""
    pass


class AuthExchangeFailedError(AuthError):
    """Provider returned an error or the profile exchange failed."""
    pass


# =============================================================================
# NORMALIZATION - one function per provider variant
# =============================================================================

def identity_from_google(info: GoogleUserInfo) -> Identity:
    return Identity(
        id=info.id,
        name=info.given_name or info.name or "",
        email=info.email or "",
        photo=info.picture,
    )


def identity_from_apple(credential: AppleCredential) -> Identity:
    given_name = credential.full_name.given_name if credential.full_name else None
    return Identity(
        id=credential.user,
        name=given_name or "",
        email=credential.email or "",
        photo=None,
    )


def normalize_identity(outcome: ProviderOutcome, provider: str = "provider") -> Identity:
    """
    Turn any provider outcome into an Identity.

    Raises:
        AuthCancelledError: The user closed the prompt
        AuthExchangeFailedError: The provider reported a failure
    """
    if isinstance(outcome, GoogleUserInfo):
        return identity_from_google(outcome)
    if isinstance(outcome, AppleCredential):
        return identity_from_apple(outcome)
    if isinstance(outcome, AuthFailure):
        if outcome.cancelled:
            raise AuthCancelledError(provider, outcome.reason)
        raise AuthExchangeFailedError(provider, outcome.reason)
    raise AuthExchangeFailedError(provider, f"Unknown provider outcome: {type(outcome).__name__}")


# =============================================================================
# PROVIDERS
# =============================================================================

class IdentityProvider(ABC):
    """An external party that can vouch for who the user is."""

    name: str = "provider"

    @abstractmethod
    async def authorize(self) -> ProviderOutcome:
        """Run the exchange and return its outcome."""
        pass


class AuthorizationResponse(BaseModel):
    """What the browser auth session hands back after the redirect."""

    type: str
    params: dict[str, str] = Field(default_factory=dict)


StartAuthSession = Callable[[str], Awaitable[AuthorizationResponse]]

_CANCELLED_SESSION_TYPES = {"cancel", "dismiss"}


class GoogleOAuthProvider(IdentityProvider):
    """
    Google sign-in through the implicit (token) flow.

    Steps:
    1. Build the authorization URL
    2. Hand it to the injected auth session and wait for the redirect
    3. Redeem the access token for the profile
    """

    name = "google"

    def __init__(
        self,
        start_auth_session: StartAuthSession,
        settings: Optional[GoogleOAuthSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._start_auth_session = start_auth_session
        self._settings = settings or get_settings().google_oauth
        self._http_client = http_client

    def build_auth_url(self) -> str:
        s = self._settings
        return (
            f"{s.auth_base_url}auth"
            f"?client_id={quote(s.client_id, safe='')}"
            f"&redirect_uri={quote(s.redirect_uri, safe='')}"
            f"&response_type=token"
            f"&scope={quote(s.scope)}"
        )

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        reraise=True,
    )
    async def _request_userinfo(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> httpx.Response:
        return await client.get(
            self._settings.userinfo_url,
            params={"alt": "json", "access_token": access_token},
        )

    async def fetch_userinfo(self, access_token: str) -> GoogleUserInfo:
        """
        Redeem an access token for the user's profile.

        Raises:
            httpx.HTTPError: Transport failure or non-2xx status
            ValidationError: Profile is missing required fields
        """
        if self._http_client is not None:
            response = await self._request_userinfo(self._http_client, access_token)
        else:
            async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
                response = await self._request_userinfo(client, access_token)
        response.raise_for_status()
        return GoogleUserInfo.model_validate(response.json())

    async def authorize(self) -> ProviderOutcome:
        try:
            result = await self._start_auth_session(self.build_auth_url())
        except Exception as e:
            return AuthFailure(reason=f"Auth session failed: {e}")

        if result.type in _CANCELLED_SESSION_TYPES:
            return AuthFailure(reason="User cancelled Google sign-in", cancelled=True)
        if result.type != "success":
            detail = result.params.get("error", result.type)
            return AuthFailure(reason=f"Google sign-in returned '{detail}'")

        access_token = result.params.get("access_token")
        if not access_token:
            return AuthFailure(reason="Google sign-in returned no access token")

        try:
            return await self.fetch_userinfo(access_token)
        except httpx.HTTPStatusError as e:
            return AuthFailure(
                reason=f"Profile request failed with status {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            return AuthFailure(reason=f"Profile request failed: {e}")
        except (ValidationError, ValueError) as e:
            return AuthFailure(reason=f"Profile response was not usable: {e}")


RequestCredential = Callable[[list[str]], Awaitable[Optional[Any]]]

_APPLE_CANCEL_CODES = {"ERR_CANCELED", "ERR_REQUEST_CANCELED"}


class AppleNativeProvider(IdentityProvider):
    """
    Apple sign-in through the platform credential prompt.

    No network call: the credential already carries the profile.
    """

    name = "apple"

    def __init__(
        self,
        request_credential: RequestCredential,
        scopes: Optional[list[str]] = None,
    ):
        self._request_credential = request_credential
        self._scopes = scopes or ["FULL_NAME", "EMAIL"]

    async def authorize(self) -> ProviderOutcome:
        try:
            raw = await self._request_credential(self._scopes)
        except Exception as e:
            if getattr(e, "code", None) in _APPLE_CANCEL_CODES:
                return AuthFailure(reason="User cancelled Apple sign-in", cancelled=True)
            return AuthFailure(reason=f"Apple credential request failed: {e}")

        if raw is None:
            return AuthFailure(reason="User cancelled Apple sign-in", cancelled=True)

        try:
            if isinstance(raw, AppleCredential):
                return raw
            if isinstance(raw, Mapping):
                return AppleCredential.model_validate(raw)
            return AppleCredential.model_validate(raw, from_attributes=True)
        except ValidationError as e:
            return AuthFailure(reason=f"Apple credential was not usable: {e}")
