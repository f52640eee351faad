from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

__all__ = [
    "parse_optional_int",
    "parse_optional_date",
    "clean_text",
    "NOT_APPLICABLE_TOKENS",
]

NOT_APPLICABLE_TOKENS = frozenset({"", "n/a", "na", "none"})


def clean_text(value) -> Optional[str]:
    """Strip a text input; blank becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_optional_int(value: Union[int, float, str, None]) -> Optional[int]:
    """Lenient integer parsing for filter inputs: anything unparseable is treated as unset."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else None


def parse_optional_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    """Lenient ISO date parsing (YYYY-MM-DD or a full ISO timestamp); invalid input is None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None
