# ganttboard – error taxonomy (Rev 0.2.0)
"""
Errors raised by the data layer.

Remote transport/permission failures are not wrapped: callers see the
postgrest ``APIError`` exactly as the backend produced it.
"""
from __future__ import annotations
from typing import Any, Mapping


class GanttBoardError(Exception):
    """Base class for data-layer errors."""


class NotFoundError(GanttBoardError):
    """Update/delete target is absent."""

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ValidationError(GanttBoardError, ValueError):
    """Rejected input (dates out of order, progress out of range, ...)."""


class TablesNotProvisionedError(GanttBoardError):
    """The remote backend lacks a required table."""

    def __init__(self, table: str | None = None) -> None:
        self.table = table
        super().__init__("TABLES_MISSING")


class MalformedRowError(GanttBoardError):
    """A remote row does not have the expected shape."""

    def __init__(self, table: str, row: Any, reason: str) -> None:
        self.table = table
        self.row = dict(row) if isinstance(row, Mapping) else row
        self.reason = reason
        super().__init__(f"malformed {table} row: {reason}")
