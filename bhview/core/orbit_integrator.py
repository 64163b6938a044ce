"""Orbit integration: advances the observer's kinematics state frame by frame."""
from __future__ import annotations

import logging
import math
from numbers import Real
from typing import Callable, Sequence

import numpy as np

from bhview.core import geometry_utils
from bhview.core.errors import DegenerateBasis, InvalidParameter, KinematicsError
from bhview.core.kinematics_state import KinematicsState, orbit_position, wrap_angle
from bhview.core.observer_config import CameraConfig, OrbitLimits

logger = logging.getLogger(__name__)

DiagnosticCallback = Callable[[KinematicsError], None]

_DERIVED_FIELDS = ("position", "direction", "up", "right", "velocity", "previous_position")
_POLAR_FIELDS = ("orbit_angle", "distance", "height_offset", "field_of_view")


def _finite(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParameter(name, value, "not a real number")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameter(name, value, "not finite")
    return value


def _non_negative(name: str, value) -> float:
    value = _finite(name, value)
    if value < 0.0:
        raise InvalidParameter(name, value, "negative")
    return value


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


class OrbitIntegrator:
    """
    Owns the KinematicsState and keeps its derived fields consistent.

    Responsible for:
    - Advancing the orbit angle while autonomous orbiting is enabled.
    - Rebuilding position, viewing basis and velocity on every step.
    - Validating and clamping parameter changes.
    - Holding the last valid pose and velocity when a step would produce NaN/Inf.

    Usage:
        integrator = OrbitIntegrator(camera_config=CameraConfig(distance=10))
        integrator.advance(dt=1 / 60, auto_orbit_rate=0.5)
        integrator.state.velocity
    """

    def __init__(self,
                 limits: OrbitLimits | None = None,
                 camera_config: CameraConfig | None = None) -> None:
        self.limits = limits or OrbitLimits()
        self._state = KinematicsState()
        self._last_valid = self._state.copy()
        self._diagnostic_callbacks: list[DiagnosticCallback] = []
        self.last_diagnostic: KinematicsError | None = None
        self.reset(camera_config or CameraConfig())

    @property
    def state(self) -> KinematicsState:
        """Live kinematics state. Callers must treat it as read-only."""
        return self._state

    # =====================================================
    # Integration
    # =====================================================

    def advance(self, dt: float, auto_orbit_rate: float) -> KinematicsState:
        """
        Advance the state by one elapsed-time step.

        :param dt: Elapsed time in seconds (>= 0). dt == 0 is a no-op.
        :param auto_orbit_rate: Orbit angular speed in radians per second
        :return: The updated state
        :raise InvalidParameter: If dt is negative or either input is not finite
        """
        dt = _non_negative("dt", dt)
        auto_orbit_rate = _finite("auto_orbit_rate", auto_orbit_rate)
        if dt == 0.0:
            return self._state

        if self._state.is_orbiting:
            increment = auto_orbit_rate * dt
            if not math.isfinite(increment):
                raise InvalidParameter("auto_orbit_rate * dt", increment, "overflow")
            self._state.orbit_angle = wrap_angle(self._state.orbit_angle + wrap_angle(increment))

        self._update_pose(dt)
        return self._state

    def _update_pose(self, dt: float | None) -> None:
        """
        Recompute position, basis and velocity from the polar parameters.

        The basis is rebuilt from scratch on each call. When dt is None only
        the pose is refreshed and the velocity is left untouched.
        """
        s = self._state
        position = orbit_position(s.orbit_angle, s.distance, s.height_offset)

        try:
            direction, up, right = geometry_utils.orthonormal_basis(position, s.target)
        except DegenerateBasis as e:
            direction, up, right = s.direction, s.up, s.right
            s.distance = max(s.distance, self.limits.min_distance)
            logger.warning("Degenerate viewing basis at %s, keeping last basis: %s",
                           position.tolist(), e)
            self._notify_diagnostic(e)

        velocity = s.velocity
        if dt is not None:
            if s.previous_position is None:
                velocity = np.zeros(3)
            else:
                # A vanishing dt overflows to inf, which saturates to the limit speed.
                with np.errstate(over="ignore"):
                    raw = (position - s.previous_position) / dt
                velocity = geometry_utils.saturate_velocity(
                    raw, self.limits.speed_of_light, self.limits.max_speed)

        if not all(geometry_utils.is_finite(v) for v in (position, direction, up, right, velocity)):
            # Finite inputs can never get here; this is a programming error upstream.
            error = KinematicsError(
                f"Non-finite kinematics (position={position.tolist()}, "
                f"velocity={np.asarray(velocity).tolist()}); holding last valid state")
            logger.error("%s", error)
            self._restore_last_valid()
            self._notify_diagnostic(error)
            return

        s.position = position
        s.direction, s.up, s.right = direction, up, right
        s.velocity = velocity
        if dt is not None:
            s.previous_position = position.copy()
        self._last_valid = s.copy()

    def _restore_last_valid(self) -> None:
        """
        Hold the derived fields at their last valid values.

        Applied polar parameters (angle, distance, height, fov) are kept so
        that a drag or zoom is not undone; only a non-finite one is restored.
        """
        snapshot = self._last_valid.copy()
        for name in _DERIVED_FIELDS:
            setattr(self._state, name, getattr(snapshot, name))
        for name in _POLAR_FIELDS:
            if not math.isfinite(getattr(self._state, name)):
                setattr(self._state, name, getattr(snapshot, name))

    # =====================================================
    # Parameter setters
    # =====================================================

    def set_distance(self, distance: float) -> float:
        """
        Set the orbit radius, clamped to [min_distance, max_distance].

        :raise InvalidParameter: If distance is NaN, infinite or negative
        """
        distance = _non_negative("distance", distance)
        self._state.distance = _clamp(distance, self.limits.min_distance, self.limits.max_distance)
        return self._state.distance

    def set_height_offset(self, height: float) -> float:
        """Set the vertical offset of the orbit plane, clamped to +/- max_height."""
        height = _finite("height_offset", height)
        limit = self.limits.max_height
        self._state.height_offset = _clamp(height, -limit, limit)
        return self._state.height_offset

    def set_field_of_view(self, fov: float) -> float:
        """Set the field of view in degrees, clamped to [min_fov, max_fov]."""
        fov = _non_negative("field_of_view", fov)
        self._state.field_of_view = _clamp(fov, self.limits.min_fov, self.limits.max_fov)
        return self._state.field_of_view

    def set_orbiting(self, enabled: bool) -> None:
        """Enable or disable autonomous orbiting; the orbit angle is kept."""
        enabled = bool(enabled)
        if enabled != self._state.is_orbiting:
            self._state.is_orbiting = enabled
            logger.debug("Orbiting %s at angle %.3f rad",
                         "enabled" if enabled else "disabled", self._state.orbit_angle)

    def set_orbit_angle(self, angle: float) -> float:
        """Set the orbit angle in radians (wrapped into [0, 2*pi))."""
        self._state.orbit_angle = wrap_angle(_finite("orbit_angle", angle))
        return self._state.orbit_angle

    def rotate(self, delta_angle: float, delta_height: float = 0.0) -> KinematicsState:
        """
        Apply a manual orbit change.

        Both deltas are validated before either is applied, so a rejected
        call leaves the state untouched.
        """
        delta_angle = _finite("delta_angle", delta_angle)
        delta_height = _finite("delta_height", delta_height)
        new_angle = wrap_angle(self._state.orbit_angle + wrap_angle(delta_angle))
        limit = self.limits.max_height
        new_height = _clamp(self._state.height_offset + delta_height, -limit, limit)

        self._state.orbit_angle = new_angle
        self._state.height_offset = new_height
        return self._state

    def set_look_at_target(self, target: Sequence[float] | None) -> None:
        """Aim at an explicit point instead of the origin; None restores the origin."""
        if target is None:
            self._state.look_at_target = None
            return
        try:
            vector = geometry_utils.as_vector(target)
        except (TypeError, ValueError) as e:
            raise InvalidParameter("look_at_target", target, str(e)) from e
        if not geometry_utils.is_finite(vector):
            raise InvalidParameter("look_at_target", target, "not finite")
        self._state.look_at_target = vector

    def reset(self, camera_config: CameraConfig) -> KinematicsState:
        """
        Return to the configured pose with zero velocity.

        The next advance() is treated as the first step after construction.
        """
        self.set_distance(camera_config.distance)
        self.set_height_offset(camera_config.height)
        self.set_field_of_view(camera_config.fov)
        self.set_orbiting(camera_config.orbit)
        s = self._state
        s.orbit_angle = 0.0
        s.look_at_target = None
        s.velocity = np.zeros(3)
        s.previous_position = None
        self._update_pose(dt=None)
        logger.info("Observer reset: %s", s)
        return s

    # =====================================================
    # Diagnostics
    # =====================================================

    def add_diagnostic_callback(self, callback: DiagnosticCallback) -> None:
        """
        Add a callback for recovered kinematics errors.

        Callback signature: callback(error: KinematicsError) -> None
        """
        self._diagnostic_callbacks.append(callback)

    def remove_diagnostic_callback(self, callback: DiagnosticCallback) -> None:
        self._diagnostic_callbacks.remove(callback)

    def report(self, error: KinematicsError) -> None:
        """Record an error recovered elsewhere (e.g. by the session)."""
        self._notify_diagnostic(error)

    def _notify_diagnostic(self, error: KinematicsError) -> None:
        self.last_diagnostic = error
        for callback in self._diagnostic_callbacks:
            try:
                callback(error)
            except Exception as e:
                logger.exception(f"Error in diagnostic callback: {e}")
