from __future__ import annotations

import logging
import math
from dataclasses import dataclass, asdict, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict

from PySide6.QtCore import QSettings

from bhview.core.observer_config import CameraConfig, InteractionConfig, PerformanceConfig
from bhview.core.render_quality import QUALITY_PRESETS
from bhview.utils import json_loader
from bhview.utils.resource_paths import settings_json_path

logger = logging.getLogger(__name__)

ORG_DOMAIN = "bhview.org"
APP_NAME = "BHView"


class RunMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    VERBOSE = "verbose"

    def __str__(self):
        return self.value

    def __repr__(self):
        return self.value


# ----------------------
# Defaults
# ----------------------
DEFAULTS: Dict[str, Any] = {
    "general": {
        "run_mode": RunMode.PRODUCTION.value,
        "logging_level": "INFO",  # "DEBUG", "INFO", "WARNING", "ERROR"
    },
    "interaction": {
        "drag_sensitivity": math.pi,
        "zoom_sensitivity": 0.1,
        "resume_orbit_after_release": False,
    },
    "orbit": {
        "auto_orbit_rate": 0.1,
    },
    "performance": {
        "resolution_scale": 1.0,
        "quality": "medium",
    },
}

SECTIONS = tuple(DEFAULTS.keys())


# ---------------------
# Data model
# ---------------------
@dataclass
class GeneralConfig:
    run_mode: RunMode = RunMode.PRODUCTION
    logging_level: str = "INFO"


@dataclass
class InteractionSettings:
    drag_sensitivity: float = math.pi
    zoom_sensitivity: float = 0.1
    resume_orbit_after_release: bool = False


@dataclass
class OrbitSettings:
    auto_orbit_rate: float = 0.1


@dataclass
class PerformanceSettings:
    resolution_scale: float = 1.0
    quality: str = "medium"


@dataclass
class AppSettingsData:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    interaction: InteractionSettings = field(default_factory=InteractionSettings)
    orbit: OrbitSettings = field(default_factory=OrbitSettings)
    performance: PerformanceSettings = field(default_factory=PerformanceSettings)


# ----------------------
# Validators
# ----------------------
def _truthy(s: Any) -> bool:
    if isinstance(s, bool):
        return s
    return str(s).strip().lower() in ("1", "true", "yes", "on")


def _validate_run_mode(v: Any) -> RunMode:
    if isinstance(v, RunMode):
        return v
    mode = str(v).strip().lower()
    try:
        return RunMode(mode)
    except ValueError:
        return RunMode(DEFAULTS["general"]["run_mode"])


def _validate_logging_level(v: str) -> str:
    v = str(v).upper()
    return v if v in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"


def _validate_float(v: Any, lower: float, upper: float, default: float) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return default
    return f if (math.isfinite(f) and lower < f <= upper) else default


def _validate_drag_sensitivity(v: Any) -> float:
    return _validate_float(v, 0.0, 8 * math.pi, DEFAULTS["interaction"]["drag_sensitivity"])


def _validate_zoom_sensitivity(v: Any) -> float:
    return _validate_float(v, 0.0, 0.5, DEFAULTS["interaction"]["zoom_sensitivity"])


def _validate_auto_orbit_rate(v: Any) -> float:
    # Negative rates orbit the other way; zero is allowed.
    try:
        f = float(v)
    except (TypeError, ValueError):
        return DEFAULTS["orbit"]["auto_orbit_rate"]
    return f if (math.isfinite(f) and abs(f) <= 10.0) else DEFAULTS["orbit"]["auto_orbit_rate"]


def _validate_resolution_scale(v: Any) -> float:
    return _validate_float(v, 0.0, 2.0, DEFAULTS["performance"]["resolution_scale"])


def _validate_quality(v: Any) -> str:
    q = str(v).strip().lower()
    return q if q in QUALITY_PRESETS else DEFAULTS["performance"]["quality"]


# ---------------------
# AppSettingsManager
# ---------------------
class AppSettingsManager:
    """
    Application preferences.

    DEFAULTS in code are merged with the bundled settings.json, then with
    the user's QSettings overrides. Every value is validated on load and
    out-of-range values fall back to the default.
    set_* writes to QSettings immediately.

    Only preferences live here. The observer pose and effect toggles are
    never stored and start from their defaults on every launch.
    """
    def __init__(self, org_domain: str = ORG_DOMAIN, app_name: str = APP_NAME,
                 defaults_path: Path | None = None):
        self._settings = QSettings(org_domain, app_name)
        self._defaults_path = defaults_path or settings_json_path()
        self.warnings: list[str] = []
        self._data = self._load_effective()

    # Read
    @property
    def data(self) -> AppSettingsData:
        return self._data

    @property
    def run_mode(self) -> RunMode:
        return self._data.general.run_mode

    @property
    def dev_mode(self) -> bool:
        return self.run_mode is RunMode.DEVELOPMENT

    @property
    def logging_level(self) -> str:
        return self._data.general.logging_level

    def camera_config(self) -> CameraConfig:
        """Default camera config with the preferred orbit rate."""
        return CameraConfig(auto_orbit_rate=self._data.orbit.auto_orbit_rate)

    def interaction_config(self) -> InteractionConfig:
        i = self._data.interaction
        return InteractionConfig(
            drag_sensitivity=i.drag_sensitivity,
            zoom_sensitivity=i.zoom_sensitivity,
            resume_orbit_after_release=i.resume_orbit_after_release,
        )

    def performance_config(self) -> PerformanceConfig:
        p = self._data.performance
        return PerformanceConfig(resolution_scale=p.resolution_scale, quality=p.quality)

    # Write
    def set_run_mode(self, v: str | RunMode) -> None:
        mode = _validate_run_mode(v)
        self._settings.setValue("general/run_mode", mode.value)
        self._data.general.run_mode = mode

    def set_logging_level(self, v: str) -> None:
        level = _validate_logging_level(v)
        self._settings.setValue("general/logging_level", level)
        self._data.general.logging_level = level

    def set_drag_sensitivity(self, v: float) -> None:
        value = _validate_drag_sensitivity(v)
        self._settings.setValue("interaction/drag_sensitivity", value)
        self._data.interaction.drag_sensitivity = value

    def set_zoom_sensitivity(self, v: float) -> None:
        value = _validate_zoom_sensitivity(v)
        self._settings.setValue("interaction/zoom_sensitivity", value)
        self._data.interaction.zoom_sensitivity = value

    def set_resume_orbit_after_release(self, v: bool) -> None:
        value = _truthy(v)
        self._settings.setValue("interaction/resume_orbit_after_release", value)
        self._data.interaction.resume_orbit_after_release = value

    def set_auto_orbit_rate(self, v: float) -> None:
        value = _validate_auto_orbit_rate(v)
        self._settings.setValue("orbit/auto_orbit_rate", value)
        self._data.orbit.auto_orbit_rate = value

    def set_resolution_scale(self, v: float) -> None:
        value = _validate_resolution_scale(v)
        self._settings.setValue("performance/resolution_scale", value)
        self._data.performance.resolution_scale = value

    def set_quality(self, v: str) -> None:
        value = _validate_quality(v)
        self._settings.setValue("performance/quality", value)
        self._data.performance.quality = value

    # Reset
    def reset_all_to_default(self) -> None:
        """Remove every user override (shortcuts are managed separately)."""
        for section in SECTIONS:
            self._settings.remove(section)
        self._data = self._load_effective()

    def reset_section(self, section: str) -> None:
        """Reset one section to its defaults."""
        if section not in SECTIONS:
            raise ValueError(f"Invalid section: {section}")
        self._settings.remove(section)
        self._data = self._load_effective()

    def to_dict(self) -> dict[str, Any]:
        data = {section: asdict(getattr(self._data, section)) for section in SECTIONS}
        data["general"]["run_mode"] = self._data.general.run_mode.value
        return data

    # ---------- Internal ---------------
    def _load_effective(self) -> AppSettingsData:
        """DEFAULTS + bundled JSON + QSettings overrides, validated into the model."""
        base = DEFAULTS
        bundled = json_loader.read_json_dict(
            self._defaults_path,
            strict=False,
            quarantine_broken=False,
            warnings=self.warnings,
            logger=logger,
        )
        if bundled:
            base = json_loader.deep_merge(DEFAULTS, bundled)
        merged = self._apply_qsettings_overrides(base)
        return self._make_model_from(merged)

    def _apply_qsettings_overrides(self, base: dict[str, Any]) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for section in SECTIONS:
            values = dict(base.get(section, {}))
            for key in DEFAULTS[section]:
                v = self._settings.value(f"{section}/{key}", None)
                if v is not None:
                    values[key] = v
            merged[section] = values
        return merged

    def _make_model_from(self, merged: dict[str, Any]) -> AppSettingsData:
        g = merged.get("general", {})
        i = merged.get("interaction", {})
        o = merged.get("orbit", {})
        p = merged.get("performance", {})
        return AppSettingsData(
            general=GeneralConfig(
                run_mode=_validate_run_mode(g.get("run_mode", DEFAULTS["general"]["run_mode"])),
                logging_level=_validate_logging_level(
                    g.get("logging_level", DEFAULTS["general"]["logging_level"])),
            ),
            interaction=InteractionSettings(
                drag_sensitivity=_validate_drag_sensitivity(
                    i.get("drag_sensitivity", DEFAULTS["interaction"]["drag_sensitivity"])),
                zoom_sensitivity=_validate_zoom_sensitivity(
                    i.get("zoom_sensitivity", DEFAULTS["interaction"]["zoom_sensitivity"])),
                resume_orbit_after_release=_truthy(
                    i.get("resume_orbit_after_release",
                          DEFAULTS["interaction"]["resume_orbit_after_release"])),
            ),
            orbit=OrbitSettings(
                auto_orbit_rate=_validate_auto_orbit_rate(
                    o.get("auto_orbit_rate", DEFAULTS["orbit"]["auto_orbit_rate"])),
            ),
            performance=PerformanceSettings(
                resolution_scale=_validate_resolution_scale(
                    p.get("resolution_scale", DEFAULTS["performance"]["resolution_scale"])),
                quality=_validate_quality(p.get("quality", DEFAULTS["performance"]["quality"])),
            ),
        )
