"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only external dependency is the expense API, so the API section
is the one that matters most at startup.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Remote expense API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the server hosting /api/expense"
    )
    expense_path: str = Field(
        default="/api/expense",
        description="Path of the expense collection endpoint"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout"
    )

    # Ambient credentials (session cookie issued by the server)
    session_cookie_name: str = Field(
        default="session",
        description="Name of the session cookie sent with every request"
    )
    session_cookie: Optional[str] = Field(
        default=None,
        description="Session cookie value, if the server requires one"
    )

    @field_validator('base_url')
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        """Normalize base URL so paths can be joined safely."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator('expense_path')
    @classmethod
    def ensure_leading_slash(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"

    @property
    def cookies(self) -> dict[str, str]:
        """Cookies to include with every request."""
        if not self.session_cookie:
            return {}
        return {self.session_cookie_name: self.session_cookie}


class SyncSettings(BaseSettings):
    """Background refresh configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    refresh_interval_seconds: float = Field(
        default=30.0,
        ge=1.0,
        description="How often the full expense list is re-fetched"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
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

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Symbol prefixed to every displayed amount"
    )


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def sync(self) -> SyncSettings:
        return SyncSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the sections that failed.
    """
    results = {}

    settings = get_settings()

    sections = {
        "api": lambda: settings.api,
        "sync": lambda: settings.sync,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
