"""Tests for configuration."""

import pytest

from src.config import (
    AppSettings,
    ConfigurationError,
    GeminiSettings,
    GoogleSheetsSettings,
    StorageBackend,
    Settings,
    require_storage_configured,
    validate_all_settings,
)
from src.config.settings import is_placeholder


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "service-account.json"
    path.write_text("{}")
    return str(path)


class TestPlaceholders:

    @pytest.mark.parametrize("value", [None, "", "   ", "your-spreadsheet-id", "CHANGEME", "<api key>"])
    def test_placeholders(self, value):
        assert is_placeholder(value)

    def test_real_value(self):
        assert not is_placeholder("1AbCdEf-spreadsheet")


class TestGoogleSheetsSettings:

    def test_missing_fields_named(self):
        settings = GoogleSheetsSettings(credentials_path="", spreadsheet_id="your-sheet-id")
        assert settings.missing_fields == [
            "GOOGLE_SHEETS_SPREADSHEET_ID",
            "GOOGLE_SHEETS_CREDENTIALS_PATH",
        ]
        assert not settings.is_configured

    def test_configured(self, credentials_file):
        settings = GoogleSheetsSettings(credentials_path=credentials_file, spreadsheet_id="1AbC")
        assert settings.is_configured
        assert settings.categories_sheet_name == "Categories"

    def test_missing_credentials_file_warns(self, tmp_path):
        with pytest.warns(UserWarning):
            GoogleSheetsSettings(credentials_path=str(tmp_path / "nope.json"), spreadsheet_id="1AbC")


class TestRequireStorageConfigured:

    def test_local_backend_needs_nothing(self):
        app = AppSettings(storage_backend=StorageBackend.LOCAL)
        sheets = GoogleSheetsSettings(credentials_path="", spreadsheet_id="")
        assert require_storage_configured(app, sheets) == StorageBackend.LOCAL

    def test_unconfigured_remote_raises(self):
        app = AppSettings(storage_backend=StorageBackend.GOOGLE_SHEETS)
        sheets = GoogleSheetsSettings(credentials_path="", spreadsheet_id="")
        with pytest.raises(ConfigurationError) as exc:
            require_storage_configured(app, sheets)
        assert "GOOGLE_SHEETS_SPREADSHEET_ID" in exc.value.missing

    def test_configured_remote(self, credentials_file):
        app = AppSettings(storage_backend="google_sheets")
        sheets = GoogleSheetsSettings(credentials_path=credentials_file, spreadsheet_id="1AbC")
        assert require_storage_configured(app, sheets) == StorageBackend.GOOGLE_SHEETS


class TestAppSettings:

    def test_log_level_normalized(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("APP_STORAGE_BACKEND", "local")
        monkeypatch.setenv("APP_MAX_INSTALLMENTS", "24")
        settings = AppSettings()
        assert settings.storage_backend == StorageBackend.LOCAL
        assert settings.max_installments == 24

    def test_gemini_placeholder_key_is_not_configured(self):
        assert not GeminiSettings(api_key="your-gemini-key").is_configured
        assert GeminiSettings(api_key="AIza-real").is_configured


class TestValidateAllSettings:

    def test_reports_unconfigured_remote_storage(self, monkeypatch):
        monkeypatch.setenv("APP_STORAGE_BACKEND", "google_sheets")
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", "")
        monkeypatch.setenv("GEMINI_API_KEY", "your-gemini-key")

        results = validate_all_settings(Settings())

        assert results["app"] is True
        assert results["storage"] is False
        assert "GOOGLE_SHEETS_SPREADSHEET_ID" in results["storage_error"]
        assert results["gemini"] is False

    def test_local_backend_is_usable(self, monkeypatch, tmp_path):
        monkeypatch.setenv("APP_STORAGE_BACKEND", "local")
        monkeypatch.setenv("LOCAL_STORAGE_DATA_DIR", str(tmp_path))

        results = validate_all_settings(Settings())

        assert results["storage"] is True
        assert results["local_storage"] is True
