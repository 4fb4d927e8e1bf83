"""Configuration package."""

from src.config.settings import (
    ApiSettings,
    AppSettings,
    Settings,
    SyncSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "Settings",
    "SyncSettings",
    "get_settings",
    "validate_all_settings",
]
