"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from src.config import AppSettings, GoogleSheetsSettings


def test_app_defaults(monkeypatch):
    for name in ("SESSION_TIMEOUT_MINUTES", "REPLY_TO_UNKNOWN_COMMANDS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = AppSettings()
    assert settings.session_timeout_minutes == 10
    assert settings.reply_to_unknown_commands is False
    assert settings.report_preview_limit == 5
    assert settings.log_level == "INFO"


def test_app_reads_environment(monkeypatch):
    monkeypatch.setenv("SESSION_TIMEOUT_MINUTES", "30")
    monkeypatch.setenv("REPLY_TO_UNKNOWN_COMMANDS", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = AppSettings()
    assert settings.session_timeout_minutes == 30
    assert settings.reply_to_unknown_commands is True
    assert settings.log_level == "DEBUG"


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        AppSettings()


def test_timeout_must_be_positive(monkeypatch):
    monkeypatch.setenv("SESSION_TIMEOUT_MINUTES", "0")
    with pytest.raises(ValidationError):
        AppSettings()


def test_sheets_settings_from_environment(monkeypatch, tmp_path):
    credentials = tmp_path / "sa.json"
    credentials.write_text("{}")
    monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
    monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "abc123")
    settings = GoogleSheetsSettings()
    assert settings.spreadsheet_id == "abc123"
    assert settings.transactions_sheet_name == "Transactions"
    assert settings.persist_audit_events is False


def test_sheets_settings_require_spreadsheet(monkeypatch):
    monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
    monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
    with pytest.raises(ValidationError):
        GoogleSheetsSettings()
