"""
Ledger Aggregator

Loads one identity's records from durable storage and derives the
dashboard summary from scratch on every call:

    Idle -> Loading -> Ready | Failed

DESIGN DECISION: The identity id is an explicit argument of every call.
Isolation between users comes from the storage key alone; there is no
per-record owner check.
"""

import json
from enum import Enum
from typing import Any, Optional

from myfinances.audit import AuditLogger
from myfinances.config import AppSettings, get_settings
from myfinances.ledger.formatting import LedgerFormatter
from myfinances.ledger.records import (
    DuplicateTransactionError,
    InvalidIdentityError,
    build_summary,
    compute_totals,
    format_transactions,
    ledger_key,
    parse_records,
)
from myfinances.models.transaction import LedgerSnapshot, TransactionRecord
from myfinances.services.storage import (
    KeyValueStorageInterface,
    StorageUnavailableError,
)


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class LedgerAggregator:
    """
    Per-user ledger reads, appends and summaries.

    `state` reflects the most recently started load_summary() call.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings().app
        self._audit_logger = audit_logger
        self._formatter = LedgerFormatter(
            locale=self._settings.locale,
            currency=self._settings.currency,
        )
        self.state = LoadState.IDLE

    @property
    def formatter(self) -> LedgerFormatter:
        return self._formatter

    async def _read_raw(self, key: str) -> list[Any]:
        """
        Read the stored list under `key`. Absent means empty.

        Raises:
            StorageUnavailableError: Engine failure, or the blob is not a JSON list
        """
        try:
            blob = await self._storage.get_item(key)
        except StorageUnavailableError as e:
            if self._audit_logger:
                self._audit_logger.log_storage_error("read", key, str(e))
            raise

        if not blob:
            return []
        try:
            items = json.loads(blob)
        except json.JSONDecodeError as e:
            raise StorageUnavailableError("read", key, f"ledger is not valid JSON: {e}") from e
        if not isinstance(items, list):
            raise StorageUnavailableError(
                "read", key, f"ledger must be a JSON list, got {type(items).__name__}"
            )
        return items

    async def load_summary(self, identity_id: Optional[str]) -> LedgerSnapshot:
        """
        Load and summarize one identity's ledger.

        Malformed records are skipped and reported in `snapshot.skipped`.

        Raises:
            InvalidIdentityError: identity_id is empty or None
            StorageUnavailableError: The ledger could not be read; any
                summary shown before is stale
        """
        self.state = LoadState.LOADING
        try:
            key = ledger_key(identity_id)
            raw_items = await self._read_raw(key)
        except (InvalidIdentityError, StorageUnavailableError) as e:
            self.state = LoadState.FAILED
            if self._audit_logger:
                self._audit_logger.log_ledger_load_failed(identity_id, str(e))
            raise

        records, skipped = parse_records(raw_items)
        if self._audit_logger:
            for item in skipped:
                self._audit_logger.log_record_skipped(
                    identity_id, item.index, item.record_id, item.reason
                )

        totals = compute_totals(records)
        summary = build_summary(
            totals,
            self._formatter,
            start_day=self._settings.net_marker_start_day,
            net_anchor=self._settings.net_marker_anchor,
        )
        snapshot = LedgerSnapshot(
            identity_id=identity_id,
            records=records,
            transactions=format_transactions(records, self._formatter),
            totals=totals,
            summary=summary,
            skipped=skipped,
        )

        self.state = LoadState.READY
        if self._audit_logger:
            self._audit_logger.log_ledger_loaded(identity_id, len(records), len(skipped))
        return snapshot

    async def append_transaction(
        self,
        identity_id: Optional[str],
        record: TransactionRecord,
    ) -> TransactionRecord:
        """
        Append a record to the identity's ledger.

        Existing stored entries, malformed ones included, are kept as they are.

        Raises:
            InvalidIdentityError: identity_id is empty or None
            DuplicateTransactionError: The record id is already in the ledger
            StorageUnavailableError: The ledger could not be read or written
        """
        key = ledger_key(identity_id)
        raw_items = await self._read_raw(key)

        existing_ids = {
            item["id"] for item in raw_items
            if isinstance(item, dict) and isinstance(item.get("id"), str)
        }
        if record.id in existing_ids:
            raise DuplicateTransactionError(record.id)

        raw_items.append(record.model_dump(mode="json"))
        try:
            await self._storage.set_item(key, json.dumps(raw_items, ensure_ascii=False))
        except StorageUnavailableError as e:
            if self._audit_logger:
                self._audit_logger.log_storage_error("write", key, str(e))
            raise

        if self._audit_logger:
            self._audit_logger.log_transaction_appended(
                identity_id, record.id, record.direction.value, str(record.amount)
            )
        return record
