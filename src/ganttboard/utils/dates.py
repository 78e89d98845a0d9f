# ganttboard – date helpers (Rev 0.2.0)
from __future__ import annotations
from datetime import date, datetime, time, timedelta


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Inclusive day count: same day → 1."""
    return (end - start).days + 1


def format_date(d: date) -> str:
    """Bare calendar date (YYYY-MM-DD), no time, no timezone."""
    return d.isoformat()


def format_datetime(d: date) -> str:
    """ISO-8601 date-time at midnight, used for the local JSON record."""
    return datetime.combine(d, time()).isoformat()


def parse_date(value: str) -> date:
    """
    Accepts 'YYYY-MM-DD' or any ISO-8601 date-time (trailing 'Z' allowed).
    Raises ValueError/TypeError on anything else.
    """
    if not isinstance(value, str):
        raise TypeError(f"expected date string, got {type(value).__name__}")
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()
