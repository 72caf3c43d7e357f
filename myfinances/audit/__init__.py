"""Audit logging package."""

from myfinances.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
