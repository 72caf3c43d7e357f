"""Shared fixtures: in-memory storage, fixed settings, fake providers."""

import asyncio

import pytest

from myfinances.audit import AuditLogger
from myfinances.config import AppSettings, GoogleOAuthSettings
from myfinances.models.audit import AuditEvent
from myfinances.models.identity import (
    AppleCredential,
    AuthFailure,
    GoogleUserInfo,
)
from myfinances.services.auth import IdentityProvider
from myfinances.services.storage import InMemoryKeyValueStorage


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


def plain(text: str) -> str:
    """Babel separates symbol and number with a non-breaking space."""
    return text.replace("\xa0", " ").replace("\u202f", " ")


class RecordingAuditLogger(AuditLogger):
    """AuditLogger that also keeps every event for assertions."""

    def __init__(self):
        super().__init__()
        self.events: list[AuditEvent] = []

    def log(self, event: AuditEvent) -> None:
        self.events.append(event)
        super().log(event)

    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]


class StaticProvider(IdentityProvider):
    """Provider that answers with a fixed outcome."""

    def __init__(self, outcome, name: str = "static"):
        self._outcome = outcome
        self.name = name
        self.calls = 0

    async def authorize(self):
        self.calls += 1
        return self._outcome


class RaisingProvider(IdentityProvider):
    name = "broken"

    async def authorize(self):
        raise RuntimeError("provider exploded")


def record(
    id: str,
    amount,
    direction: str,
    on: str,
    category: str = "food",
    name: str = "Item",
) -> dict:
    """A stored record as it appears in the ledger JSON."""
    return {
        "id": id,
        "name": name,
        "amount": amount,
        "direction": direction,
        "category": category,
        "date": on,
    }


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def audit_logger() -> RecordingAuditLogger:
    return RecordingAuditLogger()


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        locale="pt_BR",
        currency="BRL",
        net_marker_start_day=1,
        net_marker_anchor="debit",
    )


@pytest.fixture
def google_settings() -> GoogleOAuthSettings:
    return GoogleOAuthSettings(
        client_id="client-123.apps.googleusercontent.com",
        redirect_uri="https://auth.expo.io/@roger/myfinances",
    )


@pytest.fixture
def google_profile() -> GoogleUserInfo:
    return GoogleUserInfo(
        id="1098765",
        email="roger@example.com",
        given_name="Roger",
        name="Roger Silva",
        picture="https://example.com/roger.png",
    )


@pytest.fixture
def apple_credential() -> AppleCredential:
    return AppleCredential.model_validate(
        {
            "user": "001234.abcd",
            "email": "roger@privaterelay.appleid.com",
            "fullName": {"givenName": "Roger", "familyName": "Silva"},
        }
    )


@pytest.fixture
def cancelled() -> AuthFailure:
    return AuthFailure(reason="User cancelled", cancelled=True)
