"""
Data Models Package

This package contains all Pydantic models used by MyFinances.
All data flowing through the session and the ledger conforms to these schemas.
"""

from myfinances.models.identity import (
    AppleCredential,
    AppleFullName,
    AuthFailure,
    GoogleUserInfo,
    Identity,
    ProviderOutcome,
)
from myfinances.models.transaction import (
    DisplayTransaction,
    HighlightEntry,
    LedgerSnapshot,
    LedgerTotals,
    SkippedRecord,
    Summary,
    TransactionCategory,
    TransactionDirection,
    TransactionRecord,
)
from myfinances.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Identity models
    "AppleCredential",
    "AppleFullName",
    "AuthFailure",
    "GoogleUserInfo",
    "Identity",
    "ProviderOutcome",
    # Ledger models
    "DisplayTransaction",
    "HighlightEntry",
    "LedgerSnapshot",
    "LedgerTotals",
    "SkippedRecord",
    "Summary",
    "TransactionCategory",
    "TransactionDirection",
    "TransactionRecord",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
