# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- Uses XDG Base Directory spec
- Local board store lives under $XDG_DATA_HOME/ganttboard unless GANTTBOARD_STORE is set
- Logs under $XDG_STATE_HOME/ganttboard/logs
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "ganttboard"


XDG_DATA_HOME = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
XDG_STATE_HOME = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))


DATA_DIR = XDG_DATA_HOME / APP_NAME
STATE_DIR = XDG_STATE_HOME / APP_NAME
LOGS_DIR = STATE_DIR / "logs"


def default_store_path() -> Path:
    override = os.environ.get("GANTTBOARD_STORE")
    if override:
        return Path(override).expanduser()
    return DATA_DIR / "ganttboard.db"
