"""Lenient coercion helpers for raw form/JSON submissions"""
import re
from datetime import date, datetime
from typing import Any, List, Optional

from dateutil import parser as date_parser

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_YEAR_FIRST = re.compile(r"\d{4}\D")

TRUE_VALUES = ("true", "1", 1)


def is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def as_list(value: Any) -> List[Any]:
    """Sequence as a list, a lone scalar wrapped, None as empty."""
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [] if value is None else [value]


def to_int(value: Any) -> int:
    """Leading integer of value, 0 when there is none ("30 years" -> 30, "abc" -> 0)."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if value is None:
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return value in TRUE_VALUES


def coerce_id(value: Any) -> Optional[int]:
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_blank(value):
        return None
    text = str(value).strip()
    # dd/mm/yyyy unless the year leads, as in ISO dates
    try:
        return date_parser.parse(text, dayfirst=not _YEAR_FIRST.match(text)).date()
    except (ValueError, OverflowError):
        return None
