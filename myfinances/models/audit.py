"""
Audit Models for MyFinances

Every significant action on the session or the ledger is logged.
This provides:
1. Traceability of sign-in and sign-out
2. Diagnostics for records skipped during a load
3. A record of storage failures the caller had to retry

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    SIGN_IN_STARTED = "sign_in_started"
    SIGN_IN_SUCCEEDED = "sign_in_succeeded"
    SIGN_IN_CANCELLED = "sign_in_cancelled"
    SIGN_IN_FAILED = "sign_in_failed"
    SESSION_RESTORED = "session_restored"
    SESSION_RESTORE_FAILED = "session_restore_failed"
    SIGNED_OUT = "signed_out"

    # Ledger
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_LOAD_FAILED = "ledger_load_failed"
    RECORD_SKIPPED = "record_skipped"
    TRANSACTION_APPENDED = "transaction_appended"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'identity', 'ledger', 'transaction')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Provider or record id the event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.sign_in_succeeded("google", identity_id)
        event = AuditEventBuilder.record_skipped(identity_id, 3, None, reason)
    """

    @staticmethod
    def sign_in_started(provider: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_STARTED,
            entity_type="identity",
            description=f"Sign-in started with {provider}",
            details={"provider": provider},
            is_user_action=True,
        )

    @staticmethod
    def sign_in_succeeded(provider: str, identity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_SUCCEEDED,
            entity_type="identity",
            entity_id=identity_id,
            description=f"Signed in with {provider}",
            details={"provider": provider},
            is_user_action=True,
        )

    @staticmethod
    def sign_in_cancelled(provider: str) -> AuditEvent:
        # Not an error: the user closed the prompt
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_CANCELLED,
            entity_type="identity",
            description=f"Sign-in with {provider} cancelled by user",
            details={"provider": provider},
            is_user_action=True,
        )

    @staticmethod
    def sign_in_failed(provider: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="identity",
            description=f"Sign-in with {provider} failed",
            details={"provider": provider},
            error_code="AUTH_EXCHANGE_FAILED",
            error_message=error_message,
        )

    @staticmethod
    def session_restored(identity_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORED,
            entity_type="identity",
            entity_id=identity_id,
            description=(
                "Session restored from storage" if identity_id
                else "No stored session, starting signed out"
            ),
        )

    @staticmethod
    def session_restore_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="identity",
            description="Stored session could not be read, starting signed out",
            error_message=error_message,
        )

    @staticmethod
    def signed_out(identity_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_OUT,
            entity_type="identity",
            entity_id=identity_id,
            description="Signed out",
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(
        identity_id: str,
        record_count: int,
        skipped_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="ledger",
            entity_id=identity_id,
            description=f"Ledger loaded with {record_count} records",
            details={
                "record_count": record_count,
                "skipped_count": skipped_count,
            },
        )

    @staticmethod
    def ledger_load_failed(identity_id: Optional[str], error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            entity_id=identity_id,
            description="Ledger could not be loaded",
            error_message=error_message,
        )

    @staticmethod
    def record_skipped(
        identity_id: str,
        index: int,
        record_id: Optional[str],
        reason: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=record_id,
            description=f"Malformed record at position {index} skipped",
            details={"ledger": identity_id, "index": index},
            error_code="MALFORMED_RECORD",
            error_message=reason,
        )

    @staticmethod
    def transaction_appended(
        identity_id: str,
        record_id: str,
        direction: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_APPENDED,
            entity_type="transaction",
            entity_id=record_id,
            description=f"Transaction appended ({direction})",
            details={
                "ledger": identity_id,
                "direction": direction,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def storage_error(operation: str, key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            description=f"Storage {operation} failed",
            details={"operation": operation},
            error_code="STORAGE_UNAVAILABLE",
            error_message=error_message,
        )
