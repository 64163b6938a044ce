"""
Frame state export - the per-frame record handed to the shading collaborator.

The record is a frozen dataclass with typed fields instead of a uniform map
keyed by name. It is validated once at construction.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from bhview.core.kinematics_state import KinematicsState
from bhview.core.observer_config import EffectConfig, PerformanceConfig
from bhview.core.render_quality import RenderQuality

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class ViewportSize:
    """Viewport size in device pixels."""
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport size must be positive, got {self.width}x{self.height}")

    @property
    def aspect(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class ProjectionParams:
    """Perspective projection parameters (field of view lives on the state)."""
    aspect: float = 16.0 / 9.0
    near: float = 1.0
    far: float = 80000.0

    def __post_init__(self) -> None:
        if not (self.aspect > 0 and math.isfinite(self.aspect)):
            raise ValueError(f"Aspect ratio must be positive, got {self.aspect}")
        if not 0 < self.near < self.far:
            raise ValueError(f"Clip range must satisfy 0 < near < far, got ({self.near}, {self.far})")


@dataclass(frozen=True)
class EffectFlags:
    """Boolean shading switches. Lensing is always on."""
    lensing: bool
    accretion_disk: bool
    use_disk_texture: bool
    show_stars: bool
    show_milkyway: bool
    lorentz_transform: bool
    doppler_shift: bool
    beaming: bool

    @classmethod
    def from_config(cls, effects: EffectConfig) -> EffectFlags:
        return cls(
            lensing=True,
            accretion_disk=effects.accretion_disk,
            use_disk_texture=effects.use_disk_texture,
            show_stars=effects.show_stars,
            show_milkyway=effects.show_milkyway,
            lorentz_transform=effects.lorentz_transform,
            doppler_shift=effects.doppler_shift,
            beaming=effects.beaming,
        )


@dataclass(frozen=True)
class SamplerBindings:
    """
    Opaque texture handles keyed "background", "star-field" and "disk".

    The core never inspects them; None means the texture is not loaded yet.
    """
    background: Any = None
    star_field: Any = None
    disk: Any = None

    def as_dict(self) -> dict[str, Any]:
        return {"background": self.background, "star-field": self.star_field, "disk": self.disk}


def _vec3(name: str, values: Sequence[float]) -> Vec3:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    vector = tuple(float(v) for v in values)
    if not all(math.isfinite(v) for v in vector):
        raise ValueError(f"{name} must be finite, got {vector}")
    return vector


@dataclass(frozen=True)
class FrameState:
    """Immutable parameter record for one rendered frame."""
    time: float
    resolution: tuple[float, float]
    flags: EffectFlags
    cam_pos: Vec3
    cam_vel: Vec3
    cam_dir: Vec3
    cam_up: Vec3
    fov: float
    aspect: float
    samplers: SamplerBindings = SamplerBindings()

    def __post_init__(self) -> None:
        for name in ("cam_pos", "cam_vel", "cam_dir", "cam_up"):
            object.__setattr__(self, name, _vec3(name, getattr(self, name)))
        width, height = self.resolution
        if not (width > 0 and height > 0):
            raise ValueError(f"Resolution must be positive, got {self.resolution}")
        object.__setattr__(self, "resolution", (float(width), float(height)))
        speed = math.sqrt(sum(v * v for v in self.cam_vel))
        if speed >= 1.0:
            raise ValueError(f"Camera speed must be below light speed, got {speed}")
        if not (math.isfinite(self.fov) and 0 < self.fov < 180):
            raise ValueError(f"Field of view out of range: {self.fov}")
        if not math.isfinite(self.time):
            raise ValueError(f"Time must be finite, got {self.time}")

    @property
    def speed(self) -> float:
        return math.sqrt(sum(v * v for v in self.cam_vel))


def export_frame_state(
        state: KinematicsState,
        effects: EffectConfig,
        viewport_size: ViewportSize,
        *,
        elapsed_time: float = 0.0,
        projection: ProjectionParams | None = None,
        performance: PerformanceConfig | None = None,
        samplers: SamplerBindings | None = None,
) -> FrameState:
    """
    Project the kinematics state and effect toggles into a FrameState.

    Pure function of its inputs: calling it twice with the same arguments
    returns equal records.

    :param state: Observer kinematics (read only)
    :param effects: Effect toggles; lensing is forced on
    :param viewport_size: Viewport size in pixels
    :param elapsed_time: Seconds since the session started
    :param projection: Projection parameters; defaults to the viewport aspect
    :param performance: Resolution scale applied to the viewport size
    :param samplers: Texture handles passed through untouched
    :return: Frame record
    """
    scale = performance.resolution_scale if performance is not None else 1.0
    aspect = projection.aspect if projection is not None else viewport_size.aspect
    return FrameState(
        time=float(elapsed_time),
        resolution=(viewport_size.width * scale, viewport_size.height * scale),
        flags=EffectFlags.from_config(effects),
        cam_pos=state.position,
        cam_vel=state.velocity,
        cam_dir=state.direction,
        cam_up=state.up,
        fov=float(state.field_of_view),
        aspect=float(aspect),
        samplers=samplers or SamplerBindings(),
    )


class ShadingCollaborator(Protocol):
    """The external renderer that turns frame records into images."""

    def submit(self, frame: FrameState) -> None: ...

    def set_quality(self, quality: RenderQuality) -> None: ...
