# Rev 0.2.0
from __future__ import annotations
from typing import Any, Optional

from postgrest.exceptions import APIError

from ..repositories.schema_guard import is_missing_table
from ..utils.logging_setup import get_logger
from .connection import ConnectionContext

SETTINGS_TABLE = "system_settings"


class SettingsService:
    """
    Shared key/value settings in system_settings(key, value jsonb), used to
    mirror display preferences across clients. Local mode: reads give None,
    writes do nothing. A missing table is treated the same way.
    """

    def __init__(self, connection: ConnectionContext):
        self._connection = connection
        self._log = get_logger("SettingsService")

    async def get(self, key: str) -> Optional[Any]:
        session = self._connection.session
        if session is None:
            return None
        try:
            resp = await (
                session.client.table(SETTINGS_TABLE).select("value").eq("key", key).limit(1).execute()
            )
        except APIError as e:
            if is_missing_table(e):
                self._log.warning("%s table missing; remote settings unavailable", SETTINGS_TABLE)
                return None
            raise
        rows = resp.data or []
        return rows[0].get("value") if rows else None

    async def save(self, key: str, value: Any) -> bool:
        session = self._connection.session
        if session is None:
            return False
        try:
            await session.client.table(SETTINGS_TABLE).upsert({"key": key, "value": value}).execute()
        except APIError as e:
            if is_missing_table(e):
                self._log.warning("%s table missing; setting %s not mirrored", SETTINGS_TABLE, key)
                return False
            raise
        return True
