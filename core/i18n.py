"""Locale-keyed message templates.

Templates live in ``core/locales/<locale>.json`` and use ``{name}``
placeholders. :func:`render` checks that every placeholder gets a value and
that no unexpected value is passed, so a wording change can never silently
drop a number.
"""

import json
from datetime import date
from functools import lru_cache
from pathlib import Path
from string import Formatter
from typing import Dict, Union

from core import config
from core.domain import Category, UnknownLocale

LOCALES_DIR = Path(__file__).parent / "locales"
SUPPORTED_LOCALES = ("en", "es")
DEFAULT_LOCALE = config.DEFAULT_LOCALE if config.DEFAULT_LOCALE in SUPPORTED_LOCALES else "en"

Param = Union[int, str]


@lru_cache(maxsize=None)
def _load(locale: str) -> dict:
    if locale not in SUPPORTED_LOCALES:
        raise UnknownLocale(f"Unsupported locale: {locale!r}")
    with open(LOCALES_DIR / f"{locale}.json", "r", encoding="utf-8") as f:
        return json.load(f)


def _fields(template: str) -> set:
    return {name for _, name, _, _ in Formatter().parse(template) if name}


def template(locale: str, key: str) -> str:
    messages = _load(locale)["messages"]
    if key not in messages:
        raise KeyError(f"No message {key!r} for locale {locale!r}")
    return messages[key]


def render(locale: str, key: str, **params: Param) -> str:
    text = template(locale, key)
    expected = _fields(text)
    if expected != set(params):
        raise ValueError(
            f"Message {key!r} expects {sorted(expected)}, got {sorted(params)}"
        )
    return text.format(**{k: str(v) for k, v in params.items()})


def category_label(locale: str, category: Union[Category, str]) -> str:
    token = Category.parse(category).value
    return _load(locale)["categories"][token]


def month_label(locale: str, year: int, month: int) -> str:
    return f"{_load(locale)['months_short'][month - 1]} {year % 100:02d}"


def format_date(locale: str, day: date) -> str:
    return _load(locale)["date_format"].format(day=day.day, month=day.month, year=day.year)


def translations(locale: str) -> Dict[str, str]:
    return dict(_load(locale)["messages"])
