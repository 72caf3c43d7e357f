"""Configuration package."""

from myfinances.config.settings import (
    AppSettings,
    GoogleOAuthSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleOAuthSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
