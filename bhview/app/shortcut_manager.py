import sys
import logging

from pathlib import Path
from typing import Callable, Optional
from PySide6.QtWidgets import QMainWindow
from PySide6.QtGui import QKeySequence, QAction
from PySide6.QtCore import QSettings

from bhview.ui.error_notifier import ErrorNotifier
from bhview.app.app_settings_manager import AppSettingsManager, ORG_DOMAIN, APP_NAME
from bhview.utils import json_loader


logger = logging.getLogger(__name__)


class ShortcutManager:
    """
    Manage keyboard shortcuts.
    -------------------------
    Defaults come from `shortcuts.json` in the settings directory; user
    overrides live in QSettings under `shortcuts/*`.
    add_callback: Add a callback function for a shortcut.
    update_shortcut: Update the shortcut for a command.
    reset_to_default: Reset all shortcuts to default.
    actions: Return a list of all actions.
    --------------------------
    - Call add_callback to register a callback function for a command.
    - Only commands listed in shortcuts.json can be registered.
    """
    def __init__(self, parent: QMainWindow, config_path: Path,
                 settings_manager: Optional[AppSettingsManager] = None):
        self.parent = parent
        self.config_path = config_path
        self._shortcut_settings = QSettings(ORG_DOMAIN, APP_NAME)
        self._settings_manager: AppSettingsManager = settings_manager or AppSettingsManager()
        self.warnings: list[str] = []

        self._actions: dict[str, QAction] = {}
        self._callbacks: dict[str, Callable] = {}
        self._file_shortcuts = self._load_default_shortcut()
        self._default_shortcuts = dict(self._file_shortcuts)
        self._load_user_overrides()
        self._register_actions()

        logger.debug(
            "ShortcutManager initialized run mode: %s",
            self._settings_manager.run_mode.value,
        )

    def _load_default_shortcut(self) -> dict[str, str]:
        """
        Load the default config from `shortcuts.json`.
        File format example:
        {
            "toggle_orbit": "O",
            "reset_camera": "R"
        }
        :return: dict[str, str]
        """
        path = self.config_path / "shortcuts.json"
        logger.debug("Loading default shortcuts: %s", path)
        data = json_loader.read_json_dict(
            path,
            strict=self._settings_manager.dev_mode,
            quarantine_broken=False,
            warnings=self.warnings,
            logger=logger,
        )
        if not data:
            return {}
        return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}

    def _load_user_overrides(self):
        """
        Override default shortcuts with user-defined shortcuts.
        """
        for cmd, default_seq in self._file_shortcuts.items():
            user_seq = self._shortcut_settings.value(f"shortcuts/{cmd}", default_seq)
            self._default_shortcuts[cmd] = user_seq or default_seq

    def _register_actions(self):
        """Register one QAction per command on the parent window."""
        for cmd, seq in self._default_shortcuts.items():
            action = QAction(cmd.replace("_", " ").title(), self.parent)
            action.setShortcut(QKeySequence(seq))
            action.triggered.connect(lambda checked=False, c=cmd: self._on_action_triggered(c))
            self.parent.addAction(action)
            self._actions[cmd] = action

    def _on_action_triggered(self, cmd: str):
        """
        Trigger the callback function for the given command.
        :param cmd: Command name (e.g., "toggle_orbit")
        """
        logger.debug("Action triggered: %s", cmd)
        cb = self._callbacks.get(cmd)
        if cb:
            func_name = getattr(cb, "__qualname__", repr(cb))
            func_module = getattr(cb, "__module__", "")
            logger.info("Shortcut triggered: %s -> %s.%s",
                        cmd, func_module, func_name)
            try:
                cb()
            except Exception:
                ErrorNotifier.instance().notify(
                    title="Shortcut Error",
                    msg=f"Error in shortcut callback for '{cmd}'",
                    exc_info=sys.exc_info(),
                    severity="error",
                    dedup_seconds=1.0,
                )
                if self._settings_manager.dev_mode:
                    raise
                return
        else:
            ErrorNotifier.instance().notify(
                title="Unregistered Shortcut",
                msg=f"Command '{cmd}' is not registered.",
                severity="error",
                dedup_seconds=1.0,
            )

    def add_callback(self, command_name: str, callback: Callable):
        """
        Add a callback function for a shortcut.
        :param command_name: Command name (e.g., "toggle_orbit").
        :param callback: Callback function.
        """
        if command_name not in self._actions:
            raise KeyError(f"Command '{command_name}' not found in registered actions.")
        self._callbacks[command_name] = callback

    def shortcut(self, cmd: str) -> str:
        action = self._actions.get(cmd)
        return action.shortcut().toString() if action else ""

    def update_shortcut(self, cmd: str, new_seq: str) -> bool:
        if new_seq in [a.shortcut().toString() for a in self._actions.values()]:
            return False
        action = self._actions.get(cmd)
        if not action:
            return False
        action.setShortcut(QKeySequence(new_seq))
        self._shortcut_settings.setValue(f"shortcuts/{cmd}", new_seq)
        return True

    def reset_to_default(self):
        self._shortcut_settings.remove("shortcuts")
        self._load_user_overrides()
        for cmd, action in self._actions.items():
            action.setShortcut(QKeySequence(self._default_shortcuts[cmd]))

    def actions(self):
        return self._actions.values()
