"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from expense_tracker.config import AppSettings, get_settings, validate_all_settings


class TestAppSettings:
    def test_defaults(self, monkeypatch):
        for name in ("APP_ENVIRONMENT", "DEBUG_MODE", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = AppSettings()
        assert settings.effective_log_level == "INFO"
        assert settings.is_production is False

    def test_debug_mode_forces_debug_logging(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("DEBUG_MODE", "true")
        settings = AppSettings()
        assert settings.log_level == "WARNING"
        assert settings.effective_log_level == "DEBUG"

    def test_log_level_without_debug(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        monkeypatch.setenv("DEBUG_MODE", "false")
        assert AppSettings().effective_log_level == "ERROR"

    def test_production_environment(self, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", " Production ")
        assert AppSettings().is_production is True

    def test_unknown_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            AppSettings()


class TestValidateAllSettings:
    def test_reports_ok(self):
        assert validate_all_settings() == {"storage": True, "app": True}

    def test_reports_bad_value(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_STORAGE_BACKEND", "cloud")
        get_settings.cache_clear()
        status = validate_all_settings()
        assert status["storage"] is False
        assert "storage_error" in status
        assert status["app"] is True
