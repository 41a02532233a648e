from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from app.money import parse_locale


def _parse_port(value: str) -> int:
    try:
        port = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"API_PORT must be an integer, got: {value}") from exc
    if not 1 <= port <= 65535:
        raise ValueError(f"API_PORT must be between 1 and 65535, got: {port}")
    return port


@dataclass(frozen=True)
class Settings:
    record_db_path: str = "data/records.db"
    currency: str = "USD"
    locale: str = "en_US"
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        currency = os.getenv("CURRENCY", "USD").strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValueError("CURRENCY must be a 3-letter currency code")

        locale = parse_locale(os.getenv("LOCALE", "en_US"))

        log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"LOG_LEVEL is not a valid logging level: {log_level}")

        record_db_path = os.getenv("RECORD_DB_PATH", "data/records.db").strip()
        if not record_db_path:
            raise ValueError("RECORD_DB_PATH must not be empty")

        return cls(
            record_db_path=record_db_path,
            currency=currency,
            locale=locale,
            log_level=log_level,
            api_host=os.getenv("API_HOST", "0.0.0.0").strip() or "0.0.0.0",
            api_port=_parse_port(os.getenv("API_PORT", "8000")),
        )


def load_dotenv(path: str | Path = ".env") -> None:
    env_path = Path(path)
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        entry = line.strip()
        if not entry or entry.startswith("#") or "=" not in entry:
            continue
        key, value = entry.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)
