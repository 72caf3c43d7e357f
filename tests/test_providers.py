"""Tests for identity providers and normalization. No real network calls."""

from types import SimpleNamespace
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from conftest import run
from myfinances.models.identity import (
    AppleCredential,
    AuthFailure,
    GoogleUserInfo,
    Identity,
)
from myfinances.services.auth import (
    AppleNativeProvider,
    AuthCancelledError,
    AuthExchangeFailedError,
    AuthorizationResponse,
    GoogleOAuthProvider,
    identity_from_apple,
    identity_from_google,
    normalize_identity,
)


PROFILE = {
    "id": "1098765",
    "email": "roger@example.com",
    "verified_email": True,
    "name": "Roger Silva",
    "given_name": "Roger",
    "picture": "https://example.com/roger.png",
}


def auth_session(response: AuthorizationResponse, seen: list):
    async def start(url: str) -> AuthorizationResponse:
        seen.append(url)
        return response
    return start


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestNormalization:
    """Tests for per-provider normalization."""

    def test_google_and_apple_share_shape(self, google_profile, apple_credential):
        """Test that both providers produce an Identity."""
        google = identity_from_google(google_profile)
        apple = identity_from_apple(apple_credential)
        assert isinstance(google, Identity) and isinstance(apple, Identity)
        assert google.name == apple.name == "Roger"

    def test_google_falls_back_to_full_name(self):
        """Test display name when given_name is missing."""
        identity = identity_from_google(GoogleUserInfo(id="1", name="Roger Silva"))
        assert identity.name == "Roger Silva"
        assert identity.email == ""

    def test_apple_returning_user_without_email(self):
        """Test Apple credentials without email or name."""
        identity = identity_from_apple(AppleCredential(user="u1"))
        assert identity == Identity(id="u1", name="", email="", photo=None)

    def test_normalize_failure_cancelled(self, cancelled):
        """Test that a cancelled outcome raises AuthCancelledError."""
        with pytest.raises(AuthCancelledError):
            normalize_identity(cancelled, "google")

    def test_normalize_failure(self):
        """Test that a failed outcome raises AuthExchangeFailedError."""
        with pytest.raises(AuthExchangeFailedError) as exc:
            normalize_identity(AuthFailure(reason="boom"), "google")
        assert exc.value.provider == "google"


class TestGoogleOAuthProvider:
    """Tests for the Google token flow."""

    def test_auth_url(self, google_settings):
        """Test the authorization URL parameters."""
        provider = GoogleOAuthProvider(auth_session(None, []), settings=google_settings)
        url = urlparse(provider.build_auth_url())
        query = parse_qs(url.query)
        assert url.netloc == "accounts.google.com"
        assert url.path == "/o/oauth2/v2/auth"
        assert query["client_id"] == ["client-123.apps.googleusercontent.com"]
        assert query["redirect_uri"] == ["https://auth.expo.io/@roger/myfinances"]
        assert query["response_type"] == ["token"]
        assert query["scope"] == ["profile email"]

    def test_success_redeems_token(self, google_settings):
        """Test that the access token is exchanged for the profile."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=PROFILE)

        seen = []
        provider = GoogleOAuthProvider(
            auth_session(
                AuthorizationResponse(type="success", params={"access_token": "tok"}), seen
            ),
            settings=google_settings,
            http_client=mock_client(handler),
        )
        outcome = run(provider.authorize())

        assert isinstance(outcome, GoogleUserInfo)
        assert outcome.id == "1098765"
        assert len(seen) == 1
        assert requests[0].url.params["access_token"] == "tok"
        assert requests[0].url.params["alt"] == "json"

    @pytest.mark.parametrize("session_type", ["cancel", "dismiss"])
    def test_cancelled(self, google_settings, session_type):
        """Test that closing the browser is a cancellation."""
        provider = GoogleOAuthProvider(
            auth_session(AuthorizationResponse(type=session_type), []),
            settings=google_settings,
        )
        outcome = run(provider.authorize())
        assert isinstance(outcome, AuthFailure)
        assert outcome.cancelled is True

    def test_error_response(self, google_settings):
        """Test that an error redirect is a failure, not a cancellation."""
        provider = GoogleOAuthProvider(
            auth_session(
                AuthorizationResponse(type="error", params={"error": "access_denied"}), []
            ),
            settings=google_settings,
        )
        outcome = run(provider.authorize())
        assert outcome.cancelled is False
        assert "access_denied" in outcome.reason

    def test_locked_session_is_failure(self, google_settings):
        """Test that a busy auth session is a failure, not a cancellation."""
        provider = GoogleOAuthProvider(
            auth_session(AuthorizationResponse(type="locked"), []),
            settings=google_settings,
        )
        outcome = run(provider.authorize())
        assert isinstance(outcome, AuthFailure)
        assert outcome.cancelled is False

    def test_missing_token(self, google_settings):
        """Test a success redirect without an access token."""
        provider = GoogleOAuthProvider(
            auth_session(AuthorizationResponse(type="success"), []),
            settings=google_settings,
        )
        outcome = run(provider.authorize())
        assert isinstance(outcome, AuthFailure)

    def test_profile_http_error(self, google_settings):
        """Test that a non-2xx profile response is a failure."""
        provider = GoogleOAuthProvider(
            auth_session(
                AuthorizationResponse(type="success", params={"access_token": "bad"}), []
            ),
            settings=google_settings,
            http_client=mock_client(lambda request: httpx.Response(401, json={})),
        )
        outcome = run(provider.authorize())
        assert isinstance(outcome, AuthFailure)
        assert "401" in outcome.reason

    def test_profile_without_id(self, google_settings):
        """Test that a profile lacking an id is a failure."""
        provider = GoogleOAuthProvider(
            auth_session(
                AuthorizationResponse(type="success", params={"access_token": "tok"}), []
            ),
            settings=google_settings,
            http_client=mock_client(lambda request: httpx.Response(200, json={"email": "x"})),
        )
        assert isinstance(run(provider.authorize()), AuthFailure)

    def test_transport_error_is_retried(self, google_settings):
        """Test that a flaky network is retried before giving up."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) < 2:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, json=PROFILE)

        provider = GoogleOAuthProvider(
            auth_session(
                AuthorizationResponse(type="success", params={"access_token": "tok"}), []
            ),
            settings=google_settings,
            http_client=mock_client(handler),
        )
        outcome = run(provider.authorize())
        assert isinstance(outcome, GoogleUserInfo)
        assert len(attempts) == 2

    def test_auth_session_exception(self, google_settings):
        """Test that a crashing auth session becomes a failure outcome."""
        async def start(url):
            raise RuntimeError("no browser")

        provider = GoogleOAuthProvider(start, settings=google_settings)
        outcome = run(provider.authorize())
        assert isinstance(outcome, AuthFailure)
        assert outcome.cancelled is False


class CanceledError(Exception):
    code = "ERR_REQUEST_CANCELED"


class TestAppleNativeProvider:
    """Tests for the Apple native credential flow."""

    def test_credential_mapping(self):
        """Test a dict credential from the native prompt."""
        async def prompt(scopes):
            assert scopes == ["FULL_NAME", "EMAIL"]
            return {
                "user": "001234.abcd",
                "email": "r@privaterelay.appleid.com",
                "fullName": {"givenName": "Roger"},
                "identityToken": "ignored",
            }

        outcome = run(AppleNativeProvider(prompt).authorize())
        assert isinstance(outcome, AppleCredential)
        assert normalize_identity(outcome).name == "Roger"

    def test_credential_object(self):
        """Test an attribute-style credential object."""
        async def prompt(scopes):
            return SimpleNamespace(
                user="u9",
                email=None,
                full_name=SimpleNamespace(given_name="Ana", family_name=None),
            )

        outcome = run(AppleNativeProvider(prompt).authorize())
        assert isinstance(outcome, AppleCredential)
        assert outcome.user == "u9"

    def test_cancel_code(self):
        """Test that the platform cancel error is a cancellation."""
        async def prompt(scopes):
            raise CanceledError("The user canceled the authorization attempt")

        outcome = run(AppleNativeProvider(prompt).authorize())
        assert outcome.cancelled is True

    def test_none_is_cancel(self):
        """Test that no credential means cancelled."""
        async def prompt(scopes):
            return None

        assert run(AppleNativeProvider(prompt).authorize()).cancelled is True

    def test_other_error(self):
        """Test that other prompt errors are failures."""
        async def prompt(scopes):
            raise RuntimeError("not available on this device")

        outcome = run(AppleNativeProvider(prompt).authorize())
        assert outcome.cancelled is False

    def test_invalid_credential(self):
        """Test that a credential without a user id is a failure."""
        async def prompt(scopes):
            return {"email": "x@example.com"}

        outcome = run(AppleNativeProvider(prompt).authorize())
        assert isinstance(outcome, AuthFailure)
