import json
import math
from pathlib import Path

import pytest

from bhview.app.app_settings_manager import AppSettingsManager, RunMode


@pytest.fixture
def bundled(tmp_path: Path):
    """Write a bundled settings.json and return its path."""
    def write(data) -> Path:
        path = tmp_path / "settings.json"
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return path
    return write


def test_defaults(tmp_settings, tmp_path):
    mgr = AppSettingsManager(defaults_path=tmp_path / "missing.json")

    assert mgr.run_mode is RunMode.PRODUCTION
    assert not mgr.dev_mode
    assert mgr.logging_level == "INFO"
    assert mgr.interaction_config().drag_sensitivity == pytest.approx(math.pi)
    assert mgr.interaction_config().zoom_sensitivity == pytest.approx(0.1)
    assert mgr.camera_config().auto_orbit_rate == pytest.approx(0.1)
    assert mgr.performance_config().quality == "medium"
    # A missing bundled file is reported but not fatal.
    assert mgr.warnings


def test_bundled_json_overrides_defaults(tmp_settings, bundled):
    path = bundled({"orbit": {"auto_orbit_rate": 0.3}, "performance": {"quality": "high"}})
    mgr = AppSettingsManager(defaults_path=path)

    assert mgr.camera_config().auto_orbit_rate == pytest.approx(0.3)
    assert mgr.performance_config().quality == "high"
    assert mgr.performance_config().resolution_scale == 1.0
    assert mgr.warnings == []


def test_broken_bundled_json_falls_back(tmp_settings, bundled):
    path = bundled("{not json")
    mgr = AppSettingsManager(defaults_path=path)

    assert mgr.camera_config().auto_orbit_rate == pytest.approx(0.1)
    assert any("Failed to parse" in w for w in mgr.warnings)
    # Bundled files are never renamed.
    assert path.exists()


def test_setters_persist(tmp_settings, bundled):
    path = bundled({})
    mgr = AppSettingsManager(defaults_path=path)
    mgr.set_run_mode("development")
    mgr.set_zoom_sensitivity(0.25)
    mgr.set_resume_orbit_after_release(True)
    mgr.set_auto_orbit_rate(-0.2)
    mgr.set_quality("low")

    reloaded = AppSettingsManager(defaults_path=path)
    assert reloaded.dev_mode
    assert reloaded.interaction_config().zoom_sensitivity == pytest.approx(0.25)
    assert reloaded.interaction_config().resume_orbit_after_release is True
    assert reloaded.camera_config().auto_orbit_rate == pytest.approx(-0.2)
    assert reloaded.performance_config().quality == "low"


@pytest.mark.parametrize("setter, value, getter, expected", [
    ("set_zoom_sensitivity", 0.9, lambda m: m.interaction_config().zoom_sensitivity, 0.1),
    ("set_zoom_sensitivity", "abc", lambda m: m.interaction_config().zoom_sensitivity, 0.1),
    ("set_drag_sensitivity", -1.0, lambda m: m.interaction_config().drag_sensitivity, math.pi),
    ("set_auto_orbit_rate", math.nan, lambda m: m.camera_config().auto_orbit_rate, 0.1),
    ("set_resolution_scale", 5.0, lambda m: m.performance_config().resolution_scale, 1.0),
    ("set_quality", "ultra", lambda m: m.performance_config().quality, "medium"),
    ("set_logging_level", "LOUD", lambda m: m.logging_level, "INFO"),
    ("set_run_mode", "turbo", lambda m: m.run_mode, RunMode.PRODUCTION),
])
def test_invalid_values_fall_back_to_default(tmp_settings, bundled, setter, value, getter, expected):
    mgr = AppSettingsManager(defaults_path=bundled({}))
    getattr(mgr, setter)(value)
    assert getter(mgr) == (pytest.approx(expected) if isinstance(expected, float) else expected)


def test_invalid_stored_value_is_ignored(tmp_settings, bundled):
    tmp_settings.setValue("interaction/zoom_sensitivity", "not-a-number")
    mgr = AppSettingsManager(defaults_path=bundled({}))
    assert mgr.interaction_config().zoom_sensitivity == pytest.approx(0.1)


def test_reset_section(tmp_settings, bundled):
    mgr = AppSettingsManager(defaults_path=bundled({}))
    mgr.set_zoom_sensitivity(0.3)
    mgr.set_quality("high")

    mgr.reset_section("interaction")

    assert mgr.interaction_config().zoom_sensitivity == pytest.approx(0.1)
    assert mgr.performance_config().quality == "high"

    with pytest.raises(ValueError):
        mgr.reset_section("nope")


def test_reset_all_to_default(tmp_settings, bundled):
    mgr = AppSettingsManager(defaults_path=bundled({}))
    mgr.set_run_mode(RunMode.VERBOSE)
    mgr.set_quality("high")

    mgr.reset_all_to_default()

    assert mgr.run_mode is RunMode.PRODUCTION
    assert mgr.performance_config().quality == "medium"


def test_to_dict(tmp_settings, bundled):
    mgr = AppSettingsManager(defaults_path=bundled({}))
    data = mgr.to_dict()
    assert data["general"]["run_mode"] == "production"
    assert set(data) == {"general", "interaction", "orbit", "performance"}
