# ganttboard – logging setup (Rev 0.2.0)
from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from .paths import APP_NAME, LOGS_DIR

FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"

# supabase transport layers log every request/frame at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "websockets", "realtime")

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

_installed: list[logging.Handler] = []


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{APP_NAME}.{name}")


def _qt_handler(msg_type, context, message):
    get_logger("qt").log(_QT_LEVELS.get(msg_type, logging.INFO), message)


def setup_logging(log_dir: Path | None = None) -> Path:
    """
    Rotating file under the XDG state dir plus stdout. Safe to call twice:
    handlers from an earlier call are replaced, not stacked.
    """
    level_name = os.environ.get("GANTTBOARD_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    log_dir = log_dir or LOGS_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / "ganttboard.log"

    root = logging.getLogger()
    root.setLevel(level)
    for h in _installed:
        root.removeHandler(h)
        h.close()
    _installed.clear()

    formatter = logging.Formatter(FMT, DATEFMT)
    for h in (
        RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8"),
        logging.StreamHandler(sys.stdout),
    ):
        h.setFormatter(formatter)
        h.setLevel(level)
        root.addHandler(h)
        _installed.append(h)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    def _excepthook(exctype, value, tb):
        get_logger("unhandled").error("Uncaught exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)
    sys.excepthook = _excepthook

    qInstallMessageHandler(_qt_handler)

    get_logger("logging").info("Logging initialized at %s; file: %s", level_name, logfile)
    return logfile
