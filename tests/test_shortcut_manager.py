import json
import logging

import pytest
from pathlib import Path

from PySide6 import QtWidgets
from PySide6.QtCore import QSettings

from bhview.app import shortcut_manager as sm
from bhview.app.app_settings_manager import ORG_DOMAIN, APP_NAME
from bhview.utils.json_loader import SettingsError


class StubNotifier:
    calls = []

    @classmethod
    def instance(cls):
        return cls

    @classmethod
    def notify(cls, **kwargs):
        cls.calls.append(kwargs)


@pytest.fixture(autouse=True)
def stub_error_notifier(monkeypatch):
    """Record notifications instead of opening dialogs."""
    monkeypatch.setattr(sm, "ErrorNotifier", StubNotifier)
    StubNotifier.calls.clear()
    yield
    StubNotifier.calls.clear()


@pytest.fixture
def config_dir(tmp_path: Path):
    """Write a shortcuts.json into a temporary settings folder."""
    cfg = tmp_path / "settings"
    cfg.mkdir(parents=True, exist_ok=True)
    defaults = {
        "toggle_orbit": "o",
        "reset_camera": "r",
    }
    (cfg / "shortcuts.json").write_text(json.dumps(defaults), encoding="utf-8")
    return cfg


@pytest.fixture
def main_window(qapp):
    win = QtWidgets.QMainWindow()
    win.setWindowTitle("Test")
    win.show()
    yield win
    win.close()


@pytest.fixture
def settings_manager(tmp_settings):
    return sm.AppSettingsManager()


def test_registers_actions_and_callbacks(qapp, tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    assert "toggle_orbit" in mgr._actions
    assert mgr.shortcut("toggle_orbit") == "O"
    assert mgr._actions["toggle_orbit"].text() == "Toggle Orbit"

    called = {"orbit": 0}

    def cb():
        called["orbit"] += 1

    mgr.add_callback("toggle_orbit", cb)
    mgr._on_action_triggered("toggle_orbit")
    assert called["orbit"] == 1


def test_triggering_the_action_runs_the_callback(qapp, tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    called = []
    mgr.add_callback("reset_camera", lambda: called.append(True))

    mgr._actions["reset_camera"].trigger()

    assert called == [True]


def test_add_callback_for_unknown_command(qapp, tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    with pytest.raises(KeyError):
        mgr.add_callback("launch_rocket", lambda: None)


def test_unregistered_shortcut_notifier(qapp, tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    mgr._on_action_triggered("nonexistent")
    assert len(StubNotifier.calls) == 1
    note = StubNotifier.calls[0]
    assert note["title"].startswith("Unregistered")
    assert "not registered" in note["msg"]


def test_development_mode_raises_after_notify(qapp, settings_manager, config_dir, main_window):
    settings_manager.set_run_mode("development")
    mgr = sm.ShortcutManager(main_window, config_dir, settings_manager=settings_manager)

    def bad():
        raise RuntimeError("boom")

    mgr.add_callback("toggle_orbit", bad)
    with pytest.raises(RuntimeError):
        mgr._on_action_triggered("toggle_orbit")
    assert StubNotifier.calls, "Notifier should be called before re-raise"
    assert "Error" in StubNotifier.calls[0]["title"]


def test_production_mode_swallows_and_continues(qapp, settings_manager, config_dir, main_window):
    settings_manager.set_run_mode("production")
    mgr = sm.ShortcutManager(main_window, config_dir, settings_manager=settings_manager)

    def bad():
        raise ValueError("bad")

    mgr.add_callback("toggle_orbit", bad)
    mgr._on_action_triggered("toggle_orbit")
    assert StubNotifier.calls, "Notifier should be called in production mode"
    assert StubNotifier.calls[0]["exc_info"][0] is ValueError


def test_update_shortcut_conflict(qapp, tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    existing = mgr.shortcut("toggle_orbit")
    assert mgr.update_shortcut("reset_camera", existing) is False
    assert mgr.shortcut("reset_camera") == "R"


def test_update_shortcut_is_persisted(qapp, tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    assert mgr.update_shortcut("reset_camera", "Ctrl+R") is True
    assert mgr.shortcut("reset_camera") == "Ctrl+R"
    assert QSettings(ORG_DOMAIN, APP_NAME).value("shortcuts/reset_camera") == "Ctrl+R"


def test_user_overrides_are_loaded(qapp, tmp_settings, config_dir, main_window):
    s = QSettings(ORG_DOMAIN, APP_NAME)
    s.setValue("shortcuts/toggle_orbit", "p")
    mgr = sm.ShortcutManager(main_window, config_dir)
    # Key sequences are normalized to upper case.
    assert mgr.shortcut("toggle_orbit") == "P"


def test_reset_to_default(qapp, tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    mgr.update_shortcut("toggle_orbit", "Ctrl+O")

    mgr.reset_to_default()

    assert mgr.shortcut("toggle_orbit") == "O"
    assert QSettings(ORG_DOMAIN, APP_NAME).value("shortcuts/toggle_orbit") is None


def test_missing_shortcuts_file_in_production(qapp, tmp_settings, tmp_path, main_window):
    mgr = sm.ShortcutManager(main_window, tmp_path / "nowhere")
    assert list(mgr.actions()) == []
    assert mgr.warnings


def test_missing_shortcuts_file_in_development(qapp, settings_manager, tmp_path, main_window):
    settings_manager.set_run_mode("development")
    with pytest.raises(SettingsError):
        sm.ShortcutManager(main_window, tmp_path / "nowhere", settings_manager=settings_manager)


def test_info_logging_contains_command_and_callback(
        qapp, tmp_settings, config_dir, main_window, caplog):
    caplog.set_level(logging.INFO, logger=sm.__name__)
    mgr = sm.ShortcutManager(main_window, config_dir)

    def cb():
        pass

    mgr.add_callback("toggle_orbit", cb)
    mgr._on_action_triggered("toggle_orbit")
    text = caplog.text
    assert "Shortcut triggered: toggle_orbit" in text
    assert "cb" in text


def test_bundled_shortcuts_cover_main_window_commands():
    from bhview.utils.resource_paths import shortcuts_json_path
    data = json.loads(shortcuts_json_path().read_text(encoding="utf-8"))
    assert set(data) == {"toggle_overlay", "toggle_orbit", "reset_camera", "toggle_overview"}
    assert data["toggle_overlay"] == "Tab"
