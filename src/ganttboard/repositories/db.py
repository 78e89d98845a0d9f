# Rev 0.2.0

"""SQLite key/value store (Rev 0.2.0)
- WAL mode
- One table kv(key TEXT PRIMARY KEY, value TEXT NOT NULL, updated_at UTC)
- Plays the role of per-installation local storage: string keys, string values
"""
from __future__ import annotations
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..utils.logging_setup import get_logger
from ..utils.paths import default_store_path


class LocalDatabase:
    def __init__(self, path: Path | str | None = None) -> None:
        self._log = get_logger("LocalDatabase")
        if path is None:
            path = default_store_path()
        self.path = path if path == ":memory:" else Path(path)
        if isinstance(self.path, Path):
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.path), isolation_level=None, check_same_thread=False)
        if self.path != ":memory:":
            self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL, updated_at TEXT)"
        )
        self._log.info("Local store open %s", self.path)

    def close(self) -> None:
        self.conn.close()

    def get_item(self, key: str) -> Optional[str]:
        row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, value, datetime.now(timezone.utc).isoformat(timespec="seconds")),
        )

    def remove_item(self, key: str) -> None:
        self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def keys(self) -> List[str]:
        return [r[0] for r in self.conn.execute("SELECT key FROM kv ORDER BY key")]
