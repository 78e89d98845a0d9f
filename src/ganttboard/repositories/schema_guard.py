# Rev 0.2.0
"""
Schema-drift guard.

The only place that looks at backend error codes. Two questions get answered:
  * did this fail because a specific (optional) column is absent?
  * did this fail because a whole table is absent?
Anything else is not our business and must reach the caller untouched.

  undefined column : 42703 (Postgres), PGRST204 (PostgREST schema cache)
  undefined table  : 42P01 (Postgres), PGRST205 (PostgREST schema cache)
"""
from __future__ import annotations
import logging
import re
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..errors import TablesNotProvisionedError

UNDEFINED_COLUMN_CODES = frozenset({"42703", "PGRST204"})
UNDEFINED_TABLE_CODES = frozenset({"42P01", "PGRST205"})

_ABSENT_PHRASES = ("does not exist", "could not find")

T = TypeVar("T")


def error_code(err: BaseException) -> Optional[str]:
    code = getattr(err, "code", None)
    if code is None:
        return None
    code = str(code).strip()
    return code or None


def error_message(err: BaseException) -> str:
    message = getattr(err, "message", None)
    return str(message) if message else str(err)


def is_missing_column(err: BaseException, column: str) -> bool:
    """
    True when err says `column` is undefined.
    With a structured code we still require the message (when present) to name
    the column, so a different missing column is not mistaken for this one.
    """
    code = error_code(err)
    message = error_message(err).lower()
    mentions = re.search(rf"\b{re.escape(column.lower())}\b", message) is not None
    if code in UNDEFINED_COLUMN_CODES:
        return mentions or not message
    if code is None:
        return mentions and any(p in message for p in _ABSENT_PHRASES) and "relation" not in message
    return False


def is_missing_table(err: BaseException) -> bool:
    code = error_code(err)
    if code in UNDEFINED_TABLE_CODES:
        return True
    if code is None:
        message = error_message(err).lower()
        return "relation" in message and "does not exist" in message
    return False


def raise_if_missing_table(err: BaseException, table: str) -> None:
    if is_missing_table(err):
        raise TablesNotProvisionedError(table) from err


async def with_column_fallback(
    primary: Callable[[], Awaitable[T]],
    fallback: Callable[[], Awaitable[T]],
    column: str,
    log: logging.Logger,
    errors: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Run primary(); if it fails only because `column` is absent, run fallback()."""
    try:
        return await primary()
    except errors as e:
        if not is_missing_column(e, column):
            raise
        log.warning("Column '%s' missing, retrying with reduced query: %s", column, error_message(e))
    return await fallback()


async def absorb_missing_column(
    action: Callable[[], Awaitable[Any]],
    column: str,
    log: logging.Logger,
    errors: tuple[type[BaseException], ...] = (Exception,),
) -> bool:
    """
    Run a write that only matters if `column` exists.
    Returns False (after logging) when the column is absent; other errors propagate.
    """
    try:
        await action()
    except errors as e:
        if not is_missing_column(e, column):
            raise
        log.warning("Column '%s' missing, write skipped: %s", column, error_message(e))
        return False
    return True
