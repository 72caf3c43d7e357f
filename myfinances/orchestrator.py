"""
Main Orchestrator for MyFinances

Ties the components together and defines the dashboard flow:
1. Open (restore session -> load that identity's ledger)
2. Register (build a record -> append to the signed-in ledger)
3. Logout (sign out)

DESIGN DECISION: The orchestrator enforces ordering by sequencing, not
locks. A load always runs after the restore it depends on has finished,
so it sees the latest sign-in or sign-out.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Union
from uuid import uuid4

from myfinances.audit import AuditLogger, configure_logging
from myfinances.config import Settings, get_settings
from myfinances.ledger import InvalidIdentityError, LedgerAggregator
from myfinances.models.transaction import (
    LedgerSnapshot,
    TransactionCategory,
    TransactionDirection,
    TransactionRecord,
)
from myfinances.services.storage import (
    JSONFileKeyValueStorage,
    KeyValueStorageInterface,
)
from myfinances.session import SessionManager


class DashboardFlow:
    """
    Orchestrates what the dashboard screen needs.

    The identity id handed to the aggregator is always read from the
    session manager at call time and passed by value.
    """

    def __init__(
        self,
        session: SessionManager,
        aggregator: LedgerAggregator,
    ):
        self._session = session
        self._aggregator = aggregator

    def _current_identity_id(self) -> str:
        if self._session.user is None:
            raise InvalidIdentityError("No signed-in identity")
        return self._session.user.id

    async def open(self) -> Optional[LedgerSnapshot]:
        """
        Restore the session, then load its ledger.

        Returns None when nobody is signed in.
        """
        identity = await self._session.restore_session()
        if identity is None:
            return None
        return await self._aggregator.load_summary(identity.id)

    async def refresh(self) -> LedgerSnapshot:
        """Reload the signed-in identity's ledger (e.g. when the screen regains focus)."""
        return await self._aggregator.load_summary(self._current_identity_id())

    async def register(
        self,
        name: str,
        amount: Union[Decimal, str, int],
        direction: Union[TransactionDirection, str],
        category: Union[TransactionCategory, str],
        on: Optional[date] = None,
    ) -> TransactionRecord:
        """
        Record a new transaction for the signed-in identity.

        Raises:
            InvalidIdentityError: Nobody is signed in
            ValidationError: The form values do not make a valid record
        """
        identity_id = self._current_identity_id()
        record = TransactionRecord(
            id=str(uuid4()),
            name=name,
            amount=amount,
            direction=direction,
            category=category,
            date=on or date.today(),
        )
        return await self._aggregator.append_transaction(identity_id, record)

    async def logout(self) -> None:
        await self._session.sign_out()


@dataclass
class AppComponents:
    storage: KeyValueStorageInterface
    audit_logger: AuditLogger
    session: SessionManager
    aggregator: LedgerAggregator
    dashboard: DashboardFlow


def create_app_components(
    storage: Optional[KeyValueStorageInterface] = None,
    settings: Optional[Settings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        storage: Storage engine to use. Defaults to the JSON file at
                 the configured storage_path.
        settings: Settings to use. Defaults to the cached settings.
    """
    settings = settings or get_settings()
    app_settings = settings.app

    configure_logging(app_settings.log_level)
    audit_logger = AuditLogger()

    if storage is None:
        storage = JSONFileKeyValueStorage(app_settings.storage_path)

    session = SessionManager(storage, audit_logger=audit_logger)
    aggregator = LedgerAggregator(
        storage,
        settings=app_settings,
        audit_logger=audit_logger,
    )

    return AppComponents(
        storage=storage,
        audit_logger=audit_logger,
        session=session,
        aggregator=aggregator,
        dashboard=DashboardFlow(session, aggregator),
    )
