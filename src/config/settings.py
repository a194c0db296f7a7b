"""
Configuration Management for Family Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Missing or placeholder values for the remote store are NOT a runtime
failure: they are reported as a distinct "needs configuration" state so
the app can tell the user what to set up.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Values shipped in example .env files. Treated the same as "not set".
PLACEHOLDER_MARKERS = (
    "your-",
    "your_",
    "changeme",
    "placeholder",
    "<",
)


def is_placeholder(value: Optional[str]) -> bool:
    """True when a configuration value is empty or an obvious placeholder."""
    if value is None:
        return True
    stripped = value.strip().lower()
    if not stripped:
        return True
    return any(marker in stripped for marker in PLACEHOLDER_MARKERS)


class ConfigurationError(Exception):
    """A required endpoint or key is missing or still a placeholder."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        self.missing = missing or []
        super().__init__(message)


class StorageBackend(str, Enum):
    """Which persistence port to build at process start."""
    GOOGLE_SHEETS = "google_sheets"
    LOCAL = "local"


class GoogleSheetsSettings(BaseSettings):
    """
    Remote store configuration.

    The spreadsheet id is the endpoint, the service account
    credentials file is the access key.
    """

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        default="",
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        default="",
        description="ID of the Google Sheets spreadsheet holding the ledger"
    )

    # Worksheets acting as tables
    categories_sheet_name: str = Field(
        default="Categories",
        description="Name of the sheet for categories"
    )
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not is_placeholder(v) and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v

    @property
    def missing_fields(self) -> list[str]:
        missing = []
        if is_placeholder(self.spreadsheet_id):
            missing.append("GOOGLE_SHEETS_SPREADSHEET_ID")
        if is_placeholder(self.credentials_path):
            missing.append("GOOGLE_SHEETS_CREDENTIALS_PATH")
        return missing

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields


class LocalStorageSettings(BaseSettings):
    """Local JSON-file store configuration (offline fallback)."""

    model_config = SettingsConfigDict(
        env_prefix="LOCAL_STORAGE_",
        extra="ignore"
    )

    data_dir: str = Field(
        default="./data",
        description="Directory holding categories.json and transactions.json"
    )


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the financial advisor."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )

    @property
    def is_configured(self) -> bool:
        return not is_placeholder(self.api_key)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    environment: str = Field(
        default="development",
        description="Application environment"
    )
    storage_backend: StorageBackend = Field(
        default=StorageBackend.GOOGLE_SHEETS,
        description="Persistence port selected at startup"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|console)$",
        description="structlog renderer"
    )

    # Ledger limits
    max_installments: int = Field(
        default=120,
        ge=2,
        le=600,
        description="Largest installment series a single draft may expand to"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
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

    # Loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def local_storage(self) -> LocalStorageSettings:
        return LocalStorageSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

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


def require_storage_configured(
    app: Optional[AppSettings] = None,
    google_sheets: Optional[GoogleSheetsSettings] = None,
) -> StorageBackend:
    """
    Check the selected storage backend can be built.

    Returns the backend on success.

    Raises:
        ConfigurationError: If the remote store is selected but its
            endpoint or key is missing or a placeholder.
    """
    app = app or get_settings().app
    if app.storage_backend == StorageBackend.LOCAL:
        return app.storage_backend

    google_sheets = google_sheets or get_settings().google_sheets
    missing = google_sheets.missing_fields
    if missing:
        raise ConfigurationError(
            "Remote storage is not configured. Set: " + ", ".join(missing),
            missing=missing,
        )
    return app.storage_backend


def validate_all_settings(settings: Optional[Settings] = None) -> dict[str, bool]:
    """
    Report which parts of the configuration are usable.

    Returns a dict of {section: is_usable}; sections that fail to load
    get an extra "<section>_error" entry. Useful for startup checks.
    """
    settings = settings or get_settings()
    results: dict = {}

    checks = {
        "app": lambda: settings.app is not None,
        "storage": lambda: require_storage_configured(
            settings.app, settings.google_sheets
        ) is not None,
        "local_storage": lambda: bool(settings.local_storage.data_dir),
        "gemini": lambda: settings.gemini.is_configured,
    }
    for section, check in checks.items():
        try:
            results[section] = check()
        except (ConfigurationError, ValueError) as e:
            results[section] = False
            results[f"{section}_error"] = str(e)

    return results
