"""Ledger package: record parsing, reduction and the aggregator."""

from myfinances.ledger.aggregator import LedgerAggregator, LoadState
from myfinances.ledger.formatting import NO_TRANSACTIONS_LABEL, LedgerFormatter
from myfinances.ledger.records import (
    DuplicateTransactionError,
    InvalidIdentityError,
    LedgerError,
    MalformedRecordError,
    build_summary,
    compute_totals,
    ledger_key,
    parse_record,
    parse_records,
)

__all__ = [
    "DuplicateTransactionError",
    "InvalidIdentityError",
    "LedgerAggregator",
    "LedgerError",
    "LedgerFormatter",
    "LoadState",
    "MalformedRecordError",
    "NO_TRANSACTIONS_LABEL",
    "build_summary",
    "compute_totals",
    "ledger_key",
    "parse_record",
    "parse_records",
]
