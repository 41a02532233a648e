from __future__ import annotations

import os
from pathlib import Path

import pytest

from app.config import Settings, load_dotenv

_ENV_KEYS = ("RECORD_DB_PATH", "CURRENCY", "LOCALE", "LOG_LEVEL", "API_HOST", "API_PORT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so teardown also removes anything load_dotenv writes.
    for key in _ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_settings_defaults() -> None:
    settings = Settings.from_env()
    assert settings.record_db_path == "data/records.db"
    assert settings.currency == "USD"
    assert settings.locale == "en_US"
    assert settings.log_level == "INFO"
    assert settings.api_port == 8000


def test_settings_load_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECORD_DB_PATH", "/var/lib/docs/records.db")
    monkeypatch.setenv("CURRENCY", "cad")
    monkeypatch.setenv("LOCALE", "de-DE")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("API_PORT", "9090")

    settings = Settings.from_env()
    assert settings.record_db_path == "/var/lib/docs/records.db"
    assert settings.currency == "CAD"
    assert settings.locale == "de_DE"
    assert settings.log_level == "DEBUG"
    assert settings.api_port == 9090


@pytest.mark.parametrize(
    ("key", "value", "match"),
    [
        ("CURRENCY", "US", "CURRENCY"),
        ("CURRENCY", "U$D", "CURRENCY"),
        ("LOG_LEVEL", "chatty", "LOG_LEVEL"),
        ("LOCALE", "xx", "locale"),
        ("API_PORT", "http", "API_PORT"),
        ("API_PORT", "70000", "API_PORT"),
        ("RECORD_DB_PATH", "  ", "RECORD_DB_PATH"),
    ],
)
def test_settings_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, key: str, value: str, match: str
) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError, match=match):
        Settings.from_env()


def test_load_dotenv_does_not_override_existing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text('# comment\nCURRENCY="EUR"\nLOG_LEVEL=WARNING\n', encoding="utf-8")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")

    load_dotenv(env_file)

    assert os.environ["CURRENCY"] == "EUR"
    assert os.environ["LOG_LEVEL"] == "ERROR"
