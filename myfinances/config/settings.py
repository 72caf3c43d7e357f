"""
Configuration Management for MyFinances

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each concern gets its own settings class and env prefix, so a missing
Google client id does not stop the ledger from loading.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleOAuthSettings(BaseSettings):
    """Google OAuth (implicit token flow) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_OAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    client_id: str = Field(
        ...,
        description="OAuth client id registered for the app"
    )
    redirect_uri: str = Field(
        ...,
        description="Redirect URI the auth session returns to"
    )
    auth_base_url: str = Field(
        default="https://accounts.google.com/o/oauth2/v2/",
        description="Base URL of the authorization endpoint"
    )
    userinfo_url: str = Field(
        default="https://www.googleapis.com/oauth2/v1/userinfo",
        description="Profile endpoint the access token is redeemed against"
    )
    scope: str = Field(
        default="profile email",
        description="Space separated OAuth scopes"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="Timeout for the profile request"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MYFINANCES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Display
    locale: str = Field(
        default="pt_BR",
        description="Locale used for currency and date formatting"
    )
    currency: str = Field(
        default="BRL",
        min_length=3,
        max_length=3,
        description="ISO 4217 currency code for all amounts"
    )
    net_marker_start_day: int = Field(
        default=1,
        ge=1,
        le=28,
        description="First day of the interval shown on the net total card"
    )
    net_marker_anchor: Literal["debit", "latest"] = Field(
        default="debit",
        description="Which activity closes the net interval"
    )

    # Storage
    storage_path: str = Field(
        default=".myfinances/storage.json",
        description="Path of the local key-value file"
    )

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: sub-settings are loaded lazily so the ledger works without OAuth config

    @property
    def google_oauth(self) -> GoogleOAuthSettings:
        return GoogleOAuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.google_oauth
        results["google_oauth"] = True
    except Exception as e:
        results["google_oauth"] = False
        results["google_oauth_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
