"""
Session Manager

Owns the signed-in identity:
1. sign_in  - provider exchange -> Identity -> persisted -> in memory
2. restore_session - read the persisted Identity at startup
3. sign_out - remove the persisted Identity -> clear memory

CRITICAL: Storage is always updated before memory. If the process dies
between the two, the persisted identity is never newer than the one the
app was showing.
"""

from typing import Optional

from myfinances.audit import AuditLogger
from myfinances.models.identity import Identity
from myfinances.services.auth.providers import (
    AuthCancelledError,
    AuthExchangeFailedError,
    IdentityProvider,
    normalize_identity,
)
from myfinances.services.storage import (
    SESSION_KEY,
    KeyValueStorageInterface,
    StorageUnavailableError,
)


class SessionManager:
    """
    Authenticated identity lifecycle.

    The current identity is exposed by value (`user`); nothing else in
    the package reads it implicitly.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._user: Optional[Identity] = None
        self._is_loading = True

    @property
    def user(self) -> Optional[Identity]:
        return self._user

    @property
    def is_signed_in(self) -> bool:
        return self._user is not None

    @property
    def is_loading(self) -> bool:
        """True until restore_session() has run once."""
        return self._is_loading

    async def sign_in(self, provider: IdentityProvider) -> Identity:
        """
        Sign in through an external provider.

        Returns:
            The new Identity, already persisted

        Raises:
            AuthCancelledError: User closed the prompt
            AuthExchangeFailedError: Provider or profile exchange failed
            StorageUnavailableError: Identity could not be persisted
        """
        if self._audit_logger:
            self._audit_logger.log_sign_in_started(provider.name)

        try:
            outcome = await provider.authorize()
            identity = normalize_identity(outcome, provider.name)
        except AuthCancelledError:
            if self._audit_logger:
                self._audit_logger.log_sign_in_cancelled(provider.name)
            raise
        except AuthExchangeFailedError as e:
            if self._audit_logger:
                self._audit_logger.log_sign_in_failed(provider.name, str(e))
            raise
        except Exception as e:
            # Custom providers may still raise; surface as an exchange failure
            if self._audit_logger:
                self._audit_logger.log_sign_in_failed(provider.name, str(e))
            raise AuthExchangeFailedError(
                provider.name, f"Sign-in with {provider.name} failed: {e}"
            ) from e

        try:
            await self._storage.set_item(SESSION_KEY, identity.model_dump_json())
        except StorageUnavailableError as e:
            if self._audit_logger:
                self._audit_logger.log_storage_error("write", SESSION_KEY, str(e))
            raise

        self._user = identity
        if self._audit_logger:
            self._audit_logger.log_sign_in_succeeded(provider.name, identity.id)
        return identity

    async def restore_session(self) -> Optional[Identity]:
        """
        Load the persisted identity, if any.

        Never raises: an absent entry means "signed out". An unreadable or
        corrupt entry, or any error from the engine, is logged as a warning
        and also means "signed out".
        """
        try:
            raw = await self._storage.get_item(SESSION_KEY)
            identity = Identity.model_validate_json(raw) if raw else None
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_session_restore_failed(str(e))
            identity = None
        else:
            if self._audit_logger:
                self._audit_logger.log_session_restored(identity.id if identity else None)

        self._user = identity
        self._is_loading = False
        return identity

    async def sign_out(self) -> None:
        """
        Forget the current identity. Safe to call when already signed out.

        Raises:
            StorageUnavailableError: The persisted entry could not be
                removed; memory is left as it was
        """
        previous_id = self._user.id if self._user else None
        try:
            await self._storage.remove_item(SESSION_KEY)
        except StorageUnavailableError as e:
            if self._audit_logger:
                self._audit_logger.log_storage_error("remove", SESSION_KEY, str(e))
            raise

        self._user = None
        if self._audit_logger:
            self._audit_logger.log_signed_out(previous_id)
