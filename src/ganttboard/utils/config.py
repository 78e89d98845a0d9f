# src/ganttboard/utils/config.py (Rev 0.2.0)
import json
from typing import Any, Dict

SETTINGS_KEY = "gantt-ui-settings-v2"
COLUMN_WIDTHS_KEY = "ganttColumnWidths"

DEFAULT_UI_SETTINGS: Dict[str, Any] = {
    "dayWidth": 45,
    "rowHeight": 54,
    "projectBarHeight": 40,
    "taskBarHeight": 32,
    "fontSize": 13,
    "headerFontSize": 10,
}

DEFAULT_COLUMN_WIDTHS: Dict[str, int] = {
    "project": 220,
    "department": 100,
    "author": 100,
    "progress": 100,
}

MIN_COLUMN_WIDTH = 50


def _load(db, key: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
    raw = db.get_item(key)
    if raw:
        try:
            stored = json.loads(raw)
        except ValueError:
            return defaults.copy()
        if isinstance(stored, dict):
            return {**defaults, **stored}
    return defaults.copy()


def load_ui_settings(db) -> Dict[str, Any]:
    return _load(db, SETTINGS_KEY, DEFAULT_UI_SETTINGS)


def save_ui_settings(db, data: Dict[str, Any]) -> None:
    db.set_item(SETTINGS_KEY, json.dumps(data))


def load_column_widths(db) -> Dict[str, int]:
    return _load(db, COLUMN_WIDTHS_KEY, DEFAULT_COLUMN_WIDTHS)


def save_column_widths(db, data: Dict[str, int]) -> None:
    clamped = {k: max(MIN_COLUMN_WIDTH, int(v)) for k, v in data.items()}
    db.set_item(COLUMN_WIDTHS_KEY, json.dumps(clamped))
