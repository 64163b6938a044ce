"""Observer pose and motion, kept separate from integration and UI concerns."""
from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field

import numpy as np

from bhview.core import geometry_utils

TWO_PI = 2.0 * math.pi


def wrap_angle(angle: float) -> float:
    """Wrap an angle into [0, 2*pi)."""
    wrapped = math.fmod(angle, TWO_PI)
    if wrapped < 0.0:
        wrapped += TWO_PI
    # fmod of a tiny negative number can round up to exactly 2*pi.
    return 0.0 if wrapped >= TWO_PI else wrapped


def orbit_position(orbit_angle: float, distance: float, height_offset: float) -> np.ndarray:
    """Position on the orbit circle; the orbit lies in the x-z plane, +y is up."""
    return np.array([
        distance * math.cos(orbit_angle),
        height_offset,
        distance * math.sin(orbit_angle),
    ])


@dataclass(eq=False)
class KinematicsState:
    """
    Authoritative record of one observer's pose and motion.

    Written only by OrbitIntegrator (directly or on behalf of the
    interaction controller); everything else reads it.
    """
    orbit_angle: float = 0.0
    distance: float = 10.0
    height_offset: float = 0.0
    field_of_view: float = 90.0
    is_orbiting: bool = True
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    direction: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, -1.0]))
    up: np.ndarray = field(default_factory=lambda: np.array([0.0, 1.0, 0.0]))
    right: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0]))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    look_at_target: np.ndarray | None = None
    previous_position: np.ndarray | None = None

    def __post_init__(self):
        self.orbit_angle = wrap_angle(self.orbit_angle)

    @property
    def target(self) -> np.ndarray:
        """Point the observer faces: the look-at target, or the origin."""
        if self.look_at_target is not None:
            return self.look_at_target
        return np.zeros(3)

    @property
    def speed(self) -> float:
        """Magnitude of the velocity, as a fraction of light speed."""
        return geometry_utils.calculate_norm(self.velocity)

    def is_basis_orthonormal(self, tolerance: float = 1e-9) -> bool:
        return geometry_utils.is_orthonormal(self.direction, self.up, self.right,
                                             tolerance=tolerance)

    def is_finite(self) -> bool:
        """Return True if no scalar or vector field holds NaN or Inf."""
        scalars = (self.orbit_angle, self.distance, self.height_offset, self.field_of_view)
        if not all(math.isfinite(s) for s in scalars):
            return False
        vectors = (self.position, self.direction, self.up, self.right, self.velocity)
        return all(geometry_utils.is_finite(v) for v in vectors)

    def copy(self) -> KinematicsState:
        """Deep copy, so the snapshot does not share arrays with the live state."""
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return (f"angle={math.degrees(self.orbit_angle):.1f}deg, "
                f"distance={self.distance:.2f}, height={self.height_offset:.2f}, "
                f"speed={self.speed:.3f}c, orbiting={self.is_orbiting}")
