"""Configuration package."""

from src.config.settings import (
    AppSettings,
    ConfigurationError,
    GeminiSettings,
    GoogleSheetsSettings,
    LocalStorageSettings,
    Settings,
    StorageBackend,
    get_settings,
    require_storage_configured,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ConfigurationError",
    "GeminiSettings",
    "GoogleSheetsSettings",
    "LocalStorageSettings",
    "Settings",
    "StorageBackend",
    "get_settings",
    "require_storage_configured",
    "validate_all_settings",
]
