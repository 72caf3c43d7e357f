"""
Record parsing and ledger reduction.

Stage 1 - PARSE: every stored element is validated on its own. A bad
element becomes a MalformedRecordError for that element only.

Stage 2 - REDUCE: valid records are partitioned by direction, summed
exactly and their latest dates picked. The result does not depend on
record order.

Stage 3 - FORMAT: totals and markers become display strings.
"""

from decimal import Decimal
from typing import Any, Iterable, Literal, Optional

from pydantic import ValidationError

from myfinances.ledger.formatting import NO_TRANSACTIONS_LABEL, LedgerFormatter
from myfinances.models.transaction import (
    DisplayTransaction,
    HighlightEntry,
    LedgerTotals,
    SkippedRecord,
    Summary,
    TransactionDirection,
    TransactionRecord,
)
from myfinances.services.storage import LEDGER_KEY_PREFIX


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class InvalidIdentityError(LedgerError):
    """Ledger accessed without a usable identity id."""
    pass


class MalformedRecordError(LedgerError):
    """A single stored record failed structural validation."""

    def __init__(self, index: int, record_id: Optional[str], reason: str):
        self.index = index
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Record {index} is malformed: {reason}")


class DuplicateTransactionError(LedgerError):
    """A record with the same id already exists in the ledger."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Transaction '{record_id}' already exists")


def require_identity(identity_id: Optional[str]) -> str:
    if identity_id is None or not isinstance(identity_id, str) or not identity_id.strip():
        raise InvalidIdentityError("An identity id is required to access a ledger")
    return identity_id


def ledger_key(identity_id: Optional[str]) -> str:
    """Storage key of one identity's ledger. Different ids never share a key."""
    return f"{LEDGER_KEY_PREFIX}{require_identity(identity_id)}"


def _describe_errors(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "record"
        parts.append(f"{location}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_record(raw: Any, index: int) -> TransactionRecord:
    """
    Validate one stored element.

    Raises:
        MalformedRecordError: Not an object, or a field failed validation
            (missing id, negative amount, unparseable date, ...)
    """
    if not isinstance(raw, dict):
        raise MalformedRecordError(index, None, f"expected an object, got {type(raw).__name__}")

    record_id = raw.get("id") if isinstance(raw.get("id"), str) else None
    try:
        return TransactionRecord.model_validate(raw)
    except ValidationError as e:
        raise MalformedRecordError(index, record_id, _describe_errors(e)) from e


def parse_records(raw_items: Iterable[Any]) -> tuple[list[TransactionRecord], list[SkippedRecord]]:
    """Parse every element, collecting the ones that fail instead of stopping."""
    records: list[TransactionRecord] = []
    skipped: list[SkippedRecord] = []
    for index, raw in enumerate(raw_items):
        try:
            records.append(parse_record(raw, index))
        except MalformedRecordError as e:
            skipped.append(
                SkippedRecord(index=e.index, record_id=e.record_id, reason=e.reason)
            )
    return records, skipped


def compute_totals(records: Iterable[TransactionRecord]) -> LedgerTotals:
    """Exact, order-independent reduction of a ledger."""
    credits = []
    debits = []
    for record in records:
        if record.direction == TransactionDirection.CREDIT:
            credits.append(record)
        else:
            debits.append(record)

    credit_total = sum((r.amount for r in credits), start=Decimal("0"))
    debit_total = sum((r.amount for r in debits), start=Decimal("0"))

    return LedgerTotals(
        credit_total=credit_total,
        debit_total=debit_total,
        net_total=credit_total - debit_total,
        last_credit=max((r.date for r in credits), default=None),
        last_debit=max((r.date for r in debits), default=None),
    )


def build_summary(
    totals: LedgerTotals,
    formatter: LedgerFormatter,
    start_day: int = 1,
    net_anchor: Literal["debit", "latest"] = "debit",
) -> Summary:
    """
    Format totals into the three dashboard cards.

    The net card shows a day range closing on the last debit by default,
    even when a credit is more recent. net_anchor="latest" closes it on
    the most recent activity of either direction instead.
    """
    def marker(value) -> str:
        return formatter.day_month(value) if value is not None else NO_TRANSACTIONS_LABEL

    anchor = totals.last_debit if net_anchor == "debit" else totals.last_activity
    net_marker = (
        formatter.interval(start_day, anchor) if anchor is not None else NO_TRANSACTIONS_LABEL
    )

    return Summary(
        entries=HighlightEntry(
            amount=formatter.currency_text(totals.credit_total),
            last_transaction=marker(totals.last_credit),
        ),
        expenses=HighlightEntry(
            amount=formatter.currency_text(totals.debit_total),
            last_transaction=marker(totals.last_debit),
        ),
        total=HighlightEntry(
            amount=formatter.currency_text(totals.net_total),
            last_transaction=net_marker,
        ),
    )


def format_transactions(
    records: Iterable[TransactionRecord],
    formatter: LedgerFormatter,
) -> list[DisplayTransaction]:
    return [
        DisplayTransaction(
            id=record.id,
            name=record.name,
            amount=formatter.currency_text(record.amount),
            direction=record.direction,
            category=record.category,
            date=formatter.short_date(record.date),
        )
        for record in records
    ]
