"""
Audit Logger

DESIGN DECISION: Every significant action on the session and the ledger
is logged as a structured event. This provides:
1. Traceability of sign-in and sign-out
2. A count of malformed records skipped during loads
3. Evidence of storage failures the caller was asked to retry

The audit logger is local-only: events go to structlog, nothing is sent
to a server.
"""

import logging
from typing import Optional

import structlog

from myfinances.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
    )


class AuditLogger:
    """
    Central audit logging service.

    Severity of the event decides the log level.
    """

    def __init__(self, logger_name: str = "myfinances.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_sign_in_started(self, provider: str) -> None:
        self.log(AuditEventBuilder.sign_in_started(provider))

    def log_sign_in_succeeded(self, provider: str, identity_id: str) -> None:
        self.log(AuditEventBuilder.sign_in_succeeded(provider, identity_id))

    def log_sign_in_cancelled(self, provider: str) -> None:
        self.log(AuditEventBuilder.sign_in_cancelled(provider))

    def log_sign_in_failed(self, provider: str, error_message: str) -> None:
        self.log(AuditEventBuilder.sign_in_failed(provider, error_message))

    def log_session_restored(self, identity_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.session_restored(identity_id))

    def log_session_restore_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.session_restore_failed(error_message))

    def log_signed_out(self, identity_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.signed_out(identity_id))

    def log_ledger_loaded(
        self,
        identity_id: str,
        record_count: int,
        skipped_count: int,
    ) -> None:
        """Log a completed ledger load."""
        self.log(
            AuditEventBuilder.ledger_loaded(identity_id, record_count, skipped_count)
        )

    def log_ledger_load_failed(
        self,
        identity_id: Optional[str],
        error_message: str,
    ) -> None:
        self.log(AuditEventBuilder.ledger_load_failed(identity_id, error_message))

    def log_record_skipped(
        self,
        identity_id: str,
        index: int,
        record_id: Optional[str],
        reason: str,
    ) -> None:
        """Log a malformed record that was left out of the totals."""
        self.log(
            AuditEventBuilder.record_skipped(identity_id, index, record_id, reason)
        )

    def log_transaction_appended(
        self,
        identity_id: str,
        record_id: str,
        direction: str,
        amount: str,
    ) -> None:
        self.log(
            AuditEventBuilder.transaction_appended(
                identity_id, record_id, direction, amount
            )
        )

    def log_storage_error(self, operation: str, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_error(operation, key, error_message))
