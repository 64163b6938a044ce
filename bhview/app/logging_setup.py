from __future__ import annotations

import logging
import logging.config
import os
import queue
import sys
import traceback
from dataclasses import dataclass
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

import faulthandler

from bhview.app.app_settings_manager import AppSettingsManager, RunMode
from bhview.utils.log_util import level_from_name

FORMAT = "%(asctime)s.%(msecs)03dZ %(levelname)s %(process)d %(threadName)s %(name)s %(message)s"
DATEFMT = "%Y-%m-%dT%H:%M:%S"


@dataclass(frozen=True)
class LogPaths:
    log_file: Path
    crash_file: Path
    log_dir: Path


def _project_root_from_package() -> Path:
    # bhview/app/logging_setup.py -> parents[2] is the project root.
    return Path(__file__).resolve().parents[2]


def _app_base_dir() -> Path:
    """
    In frozen mode, the directory of the executable.
    In development, the project root.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return _project_root_from_package()


def _find_writable_log_dir(app_name: str) -> Path:
    """
    First, app_base_dir/logs
    Second, user's home directory
    Finally, the current directory.
    """
    candidates = [
        _app_base_dir() / "logs",
        Path.home() / f".{app_name.lower()}" / "logs",
    ]
    for d in candidates:
        try:
            d.mkdir(parents=True, exist_ok=True)
            test = d / ".write_test"
            test.write_text("ok", encoding="utf-8")
            test.unlink(missing_ok=True)
            return d
        except OSError:
            continue
    d = Path.cwd() / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d


def setup_startup_logging(
        app_name: str,
        *,
        level_file: int = logging.DEBUG,
        level_console: int = logging.INFO,
        max_bytes: int = 2_000_000,
        backup_count: int = 5,
    ) -> LogPaths:
    """
    Startup logging, run before QApplication exists.
    - Rotating file handler
    - uncaught exception logging
    - faulthandler (crash logging)
    """
    log_dir = _find_writable_log_dir(app_name)
    log_file = log_dir / f"{app_name}.log"
    crash_file = log_dir / f"{app_name}.crash.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Prevent duplicate registration of handlers.
    if root.handlers:
        root.handlers.clear()

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    fh = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count,
                             encoding="utf-8")
    fh.setLevel(level_file)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level_console)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    try:
        f = open(crash_file, "w", encoding="utf-8")
        faulthandler.enable(file=f)
        # Keep the file object alive for faulthandler.
        root._bhview_crash_fh = f
    except OSError:
        logging.getLogger(__name__).warning("Crash log unavailable: %s", crash_file)

    def _excepthook(exc_type, exc, tb):
        logging.critical(
            "Uncaught exception: \n%s",
            "".join(traceback.format_exception(exc_type, exc, tb)),
        )

    sys.excepthook = _excepthook

    logging.info("=================================================")
    logging.info("%s starting...", app_name)
    logging.info("frozen=%s", getattr(sys, "frozen", False))
    logging.info("sys.executable=%s", sys.executable)
    logging.info("cwd=%s", os.getcwd())
    logging.info("log_file=%s", log_file)
    logging.info("crash_file=%s", crash_file)
    logging.info("=================================================")

    return LogPaths(log_file=log_file, crash_file=crash_file, log_dir=log_dir)


def default_log_dir(app_name: str) -> Path:
    base = Path.home() / f".{app_name.lower()}" / "logs"
    base.mkdir(parents=True, exist_ok=True)
    return base


def build_config(app_name: str, root_level: int | str | None = None,
                 console_level: int | str = logging.INFO,
                 log_dir: Path | None = None) -> dict:
    """Build the logging config dict; `_file_settings` configures the queued file handler."""
    if root_level is None:
        root_level = os.getenv("BHVIEW_LOG_LEVEL", "INFO")
    log_dir = log_dir or default_log_dir(app_name)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": FORMAT, "datefmt": DATEFMT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": logging.getLevelName(level_from_name(console_level)),
            },
        },
        "root": {
            "level": logging.getLevelName(level_from_name(root_level)),
            "handlers": ["console"],
        },
        "_file_settings": {
            "filename": str(log_dir / f"{app_name}.log"),
            "maxBytes": 1024 * 1024 * 5,
            "backupCount": int(os.getenv("BHVIEW_LOG_BACKUP_COUNT", 5)),
            "encoding": "utf-8",
        },
    }


class LogSystem:
    """
    Console logging plus a rotating log file written by a QueueListener.

    The GUI thread only enqueues records; file I/O happens on the
    listener thread.
    """
    def __init__(self, app_name: str, root_level: int | str | None = None,
                 console_level: int | str = logging.INFO):
        cfg = build_config(app_name, root_level, console_level)
        file_settings = cfg.pop("_file_settings")
        logging.config.dictConfig(cfg)

        root_logger = logging.getLogger()
        self._console_handler: logging.Handler | None = next(
            (h for h in root_logger.handlers if isinstance(h, logging.StreamHandler)), None)

        self._file_handler = RotatingFileHandler(
            file_settings["filename"],
            maxBytes=file_settings["maxBytes"],
            backupCount=file_settings["backupCount"],
            encoding=file_settings["encoding"],
        )
        self._file_handler.setFormatter(logging.Formatter(FORMAT, DATEFMT))

        self._queue: queue.Queue = queue.Queue(-1)
        self._queue_handler = QueueHandler(self._queue)
        root_logger.addHandler(self._queue_handler)

        self.listener = QueueListener(self._queue, self._file_handler, respect_handler_level=True)
        self.listener.start()

    @classmethod
    def from_levels(cls, app_name: str, root_level: int, console_level: int) -> LogSystem:
        return cls(app_name, root_level=root_level, console_level=console_level)

    def apply_levels(self, root_level: int, console_level: int | None = None,
                     file_level: int | None = None) -> None:
        """Change log levels after startup."""
        logging.getLogger().setLevel(root_level)
        if self._console_handler is not None and console_level is not None:
            self._console_handler.setLevel(console_level)
        if file_level is not None:
            self._file_handler.setLevel(file_level)

    def stop(self):
        """Flush queued records and close the log file. Safe to call twice."""
        if self.listener is None:
            return
        self.listener.stop()
        self.listener = None
        logging.getLogger().removeHandler(self._queue_handler)
        self._file_handler.close()


def apply_logging_policy(logs: LogSystem, settings: AppSettingsManager) -> None:
    """Pick log levels from the run mode and the configured logging level."""
    mode = getattr(settings, "run_mode", RunMode.PRODUCTION)

    if mode in (RunMode.DEVELOPMENT, RunMode.VERBOSE):
        console = logging.DEBUG
    else:
        console = level_from_name(getattr(settings, "logging_level", "INFO"))

    logs.apply_levels(root_level=logging.DEBUG, console_level=console, file_level=logging.DEBUG)


def install_qt_message_handler():
    try:
        from PySide6.QtCore import qInstallMessageHandler

        def handler(msg_type, context, message):
            logging.getLogger("Qt").error(message)

        qInstallMessageHandler(handler)
        logging.getLogger("Qt").info("Qt message handler installed.")
    except Exception:
        logging.getLogger(__name__).exception("Failed to install Qt message handler.")
