"""Session package."""

from myfinances.session.manager import SessionManager

__all__ = ["SessionManager"]
