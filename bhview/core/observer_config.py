"""
Immutable per-frame configuration structs.

These replace the mutable global config objects of a browser front-end:
the UI builds a new instance whenever a control changes and hands it to
the session, which reads it once per frame.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal

QualityName = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class OrbitLimits:
    """Legal ranges for the orbit parameters and the velocity scale."""
    min_distance: float = 2.0
    max_distance: float = 60.0
    max_height: float = 20.0
    min_fov: float = 20.0
    max_fov: float = 160.0
    # Scene units per second that correspond to rapidity 1.
    speed_of_light: float = 20.0
    max_speed: float = 0.99

    def __post_init__(self) -> None:
        if not 0 < self.min_distance <= self.max_distance:
            raise ValueError(
                f"Distance range must satisfy 0 < min <= max, got "
                f"({self.min_distance}, {self.max_distance})")
        if not 0 < self.min_fov <= self.max_fov < 180:
            raise ValueError(f"Invalid fov range ({self.min_fov}, {self.max_fov})")
        if not 0 < self.max_speed < 1:
            raise ValueError(f"max_speed must be in (0, 1), got {self.max_speed}")
        if not (self.speed_of_light > 0 and math.isfinite(self.speed_of_light)):
            raise ValueError(f"speed_of_light must be positive, got {self.speed_of_light}")


@dataclass(frozen=True)
class CameraConfig:
    """Externally owned camera settings (sliders and the orbit check box)."""
    distance: float = 10.0
    height: float = 0.0
    orbit: bool = True
    fov: float = 90.0
    # Radians per second while orbiting.
    auto_orbit_rate: float = 0.1

    def with_changes(self, **changes) -> CameraConfig:
        return replace(self, **changes)


@dataclass(frozen=True)
class EffectConfig:
    """User toggles for the shading effects."""
    accretion_disk: bool = True
    use_disk_texture: bool = True
    show_stars: bool = True
    show_milkyway: bool = True
    lorentz_transform: bool = False
    doppler_shift: bool = False
    beaming: bool = True

    def with_changes(self, **changes) -> EffectConfig:
        return replace(self, **changes)


@dataclass(frozen=True)
class PerformanceConfig:
    """Render resolution multiplier and ray-march quality preset."""
    resolution_scale: float = 1.0
    quality: QualityName = "medium"

    def __post_init__(self) -> None:
        if not (self.resolution_scale > 0 and math.isfinite(self.resolution_scale)):
            raise ValueError(f"resolution_scale must be positive, got {self.resolution_scale}")


@dataclass(frozen=True)
class InteractionConfig:
    """
    Drag and zoom tuning.

    drag_sensitivity is the orbit angle (radians) swept by a drag across the
    full viewport width; height_sensitivity is the height change (scene
    units) for a drag across the full viewport height.
    """
    drag_sensitivity: float = math.pi
    height_sensitivity: float = 10.0
    zoom_sensitivity: float = 0.1
    resume_orbit_after_release: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.zoom_sensitivity < 1:
            raise ValueError(f"zoom_sensitivity must be in (0, 1), got {self.zoom_sensitivity}")
