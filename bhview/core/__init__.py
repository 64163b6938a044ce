"""Core components layer - observer kinematics, independent of Qt and VTK."""

from bhview.core.errors import AlreadyDragging, DegenerateBasis, InvalidParameter, KinematicsError
from bhview.core.frame_state import (
    EffectFlags,
    FrameState,
    ProjectionParams,
    SamplerBindings,
    ViewportSize,
    export_frame_state,
)
from bhview.core.kinematics_state import KinematicsState
from bhview.core.observer_config import (
    CameraConfig,
    EffectConfig,
    InteractionConfig,
    OrbitLimits,
    PerformanceConfig,
)
from bhview.core.orbit_integrator import OrbitIntegrator

__all__ = [
    "AlreadyDragging",
    "CameraConfig",
    "DegenerateBasis",
    "EffectConfig",
    "EffectFlags",
    "FrameState",
    "InteractionConfig",
    "InvalidParameter",
    "KinematicsError",
    "KinematicsState",
    "OrbitIntegrator",
    "OrbitLimits",
    "PerformanceConfig",
    "ProjectionParams",
    "SamplerBindings",
    "ViewportSize",
    "export_frame_state",
]
