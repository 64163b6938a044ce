"""Geometry utility functions for vector and basis operations."""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from bhview.core.errors import DegenerateBasis

WORLD_UP = np.array([0.0, 1.0, 0.0])

# Below this length a vector is treated as zero.
EPSILON = 1e-9


def as_vector(values: Sequence[float]) -> np.ndarray:
    """Return a float64 copy of a 3-component vector."""
    vector = np.array(values, dtype=np.float64)
    if vector.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {vector.shape}")
    return vector


def direction_vector(start_point: Sequence[float], end_point: Sequence[float]) -> np.ndarray:
    """Calculate the direction vector between two points."""
    return as_vector(end_point) - as_vector(start_point)


def calculate_norm(vector: Sequence[float]) -> float:
    """
    Calculate the norm of a vector.

    :param vector: Vector (x, y, z)
    :return: Magnitude of the vector
    """
    return float(np.linalg.norm(vector))


def calculate_distance(start_point: Sequence[float], end_point: Sequence[float]) -> float:
    """Calculate the distance between two points."""
    return calculate_norm(direction_vector(start_point, end_point))


def is_finite(vector: Sequence[float]) -> bool:
    """Return True if every component is a finite number."""
    return bool(np.all(np.isfinite(vector)))


def normalize_vector(vector: Sequence[float]) -> np.ndarray:
    """
    Normalize a 3D vector.

    :param vector: Vector (x, y, z)
    :return: Unit vector
    :raise DegenerateBasis: If the vector is zero-length or not finite
    """
    v = as_vector(vector)
    norm = calculate_norm(v)
    if not math.isfinite(norm) or norm < EPSILON:
        raise DegenerateBasis(f"Cannot normalize vector {v.tolist()} (norm={norm})")
    return v / norm


def orthonormal_basis(
        position: Sequence[float],
        target: Sequence[float],
        world_up: Sequence[float] = WORLD_UP,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Build a right-handed viewing basis looking from position toward target.

    right = normalize(direction x world_up), up = right x direction.
    The basis is rebuilt from scratch on every call so drift cannot build up.

    :return: (direction, up, right)
    :raise DegenerateBasis: If position coincides with target, or the view
        direction is parallel to world_up
    """
    direction = normalize_vector(direction_vector(position, target))
    right = normalize_vector(np.cross(direction, as_vector(world_up)))
    up = normalize_vector(np.cross(right, direction))
    return direction, up, right


def is_orthonormal(*vectors: np.ndarray, tolerance: float = 1e-9) -> bool:
    """Check that the vectors are unit length and pairwise orthogonal."""
    for i, a in enumerate(vectors):
        if abs(calculate_norm(a) - 1.0) > tolerance:
            return False
        for b in vectors[i + 1:]:
            if abs(float(np.dot(a, b))) > tolerance:
                return False
    return True


def saturate_velocity(raw_velocity: Sequence[float], speed_of_light: float,
                      max_speed: float) -> np.ndarray:
    """
    Rescale a scene-space velocity into natural units (fraction of c).

    The scene speed divided by speed_of_light is treated as a rapidity, and
    the resulting speed is max_speed * tanh(rapidity). The mapping is
    continuous, monotonic and keeps the direction of raw_velocity. Because
    tanh never exceeds 1.0 in floating point, the magnitude is bounded by
    max_speed < 1 for any finite input.

    The norm is taken on the vector scaled by its largest component, so huge
    speeds saturate instead of overflowing. Infinite components (a raw
    velocity from a vanishing dt) give the limit speed along their signs.

    :param raw_velocity: Velocity in scene units per second
    :param speed_of_light: Scene units per second that map to rapidity 1
    :param max_speed: Asymptotic speed, strictly below 1
    :return: Velocity in natural units
    """
    v = as_vector(raw_velocity)
    scale = float(np.max(np.abs(v)))
    if scale < EPSILON:
        return np.zeros(3)
    if math.isinf(scale):
        return normalize_vector(np.where(np.isinf(v), np.sign(v), 0.0)) * max_speed

    unit = v / scale
    length = calculate_norm(unit)
    # scale * length may overflow to inf; tanh(inf) is exactly 1.0.
    speed = scale * length
    return unit * (max_speed * math.tanh(speed / speed_of_light) / length)
