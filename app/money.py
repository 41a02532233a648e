from __future__ import annotations

from typing import Any

from babel import Locale, UnknownLocaleError
from babel.numbers import format_currency

from app.line_engine import coerce_number

DEFAULT_LOCALE = "en_US"


def format_money(amount: Any, currency: str = "USD", locale: str = DEFAULT_LOCALE) -> str:
    value = float(coerce_number(amount, 0))
    # Amounts that round to zero cents render unsigned.
    if abs(value) < 0.005:
        value = 0.0
    return format_currency(value, currency.strip().upper(), locale=locale)


def parse_locale(name: str) -> str:
    try:
        return str(Locale.parse(name.strip().replace("-", "_")))
    except (UnknownLocaleError, ValueError, TypeError) as exc:
        raise ValueError(f"Unknown locale: {name}") from exc
