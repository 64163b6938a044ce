import math

import numpy as np
import pytest

from bhview.core import geometry_utils as gu
from bhview.core.errors import DegenerateBasis


def test_normalize_vector_returns_unit_length():
    v = gu.normalize_vector([3.0, 0.0, 4.0])
    assert gu.calculate_norm(v) == pytest.approx(1.0)
    assert v.tolist() == pytest.approx([0.6, 0.0, 0.8])


@pytest.mark.parametrize("vector", [[0.0, 0.0, 0.0], [1e-12, 0.0, 0.0], [math.nan, 1.0, 0.0]])
def test_normalize_vector_rejects_degenerate_input(vector):
    with pytest.raises(DegenerateBasis):
        gu.normalize_vector(vector)


def test_as_vector_rejects_wrong_shape():
    with pytest.raises(ValueError):
        gu.as_vector([1.0, 2.0])


def test_orthonormal_basis_faces_target():
    direction, up, right = gu.orthonormal_basis([10.0, 0.0, 0.0], [0.0, 0.0, 0.0])
    assert direction.tolist() == pytest.approx([-1.0, 0.0, 0.0])
    # right = direction x world_up
    assert right.tolist() == pytest.approx([0.0, 0.0, -1.0])
    assert up.tolist() == pytest.approx([0.0, 1.0, 0.0])
    assert gu.is_orthonormal(direction, up, right)


@pytest.mark.parametrize("position", [
    [10.0, 0.0, 0.0],
    [0.0, 5.0, -3.0],
    [-7.5, -19.0, 2.0],
    [1e-3, 20.0, 1e-3],
])
def test_orthonormal_basis_is_orthonormal(position):
    direction, up, right = gu.orthonormal_basis(position, [0.0, 0.0, 0.0])
    assert gu.is_orthonormal(direction, up, right, tolerance=1e-9)
    # Right-handed: right x up == -direction
    assert np.cross(right, up).tolist() == pytest.approx((-direction).tolist())


def test_orthonormal_basis_parallel_to_world_up_is_degenerate():
    with pytest.raises(DegenerateBasis):
        gu.orthonormal_basis([0.0, 10.0, 0.0], [0.0, 0.0, 0.0])


def test_orthonormal_basis_position_on_target_is_degenerate():
    with pytest.raises(DegenerateBasis):
        gu.orthonormal_basis([1.0, 2.0, 3.0], [1.0, 2.0, 3.0])


def test_is_orthonormal_detects_skew():
    a = np.array([1.0, 0.0, 0.0])
    b = gu.normalize_vector([1.0, 1.0, 0.0])
    assert not gu.is_orthonormal(a, b)
    assert not gu.is_orthonormal(a * 2.0)


def test_saturate_velocity_keeps_direction_and_bounds_speed():
    raw = np.array([3.0, 0.0, 4.0]) * 1e6
    v = gu.saturate_velocity(raw, speed_of_light=20.0, max_speed=0.99)
    assert gu.calculate_norm(v) < 1.0
    assert gu.calculate_norm(v) == pytest.approx(0.99)
    assert gu.normalize_vector(v).tolist() == pytest.approx([0.6, 0.0, 0.8])


def test_saturate_velocity_is_monotonic():
    speeds = [gu.calculate_norm(gu.saturate_velocity([s, 0.0, 0.0], 20.0, 0.99))
              for s in (0.1, 1.0, 10.0, 20.0, 100.0, 1000.0)]
    assert speeds == sorted(speeds)
    assert all(s < 1.0 for s in speeds)


def test_saturate_velocity_huge_speeds_stay_saturated():
    speeds = [gu.calculate_norm(gu.saturate_velocity([s, 0.0, 0.0], 20.0, 0.99))
              for s in (1e3, 1e150, 1e160, 1e308)]
    assert speeds == sorted(speeds)
    assert speeds == pytest.approx([0.99] * 4)
    assert all(s < 1.0 for s in speeds)

    v = gu.saturate_velocity([3e200, 0.0, -4e200], 20.0, 0.99)
    assert v.tolist() == pytest.approx([0.99 * 0.6, 0.0, -0.99 * 0.8])


def test_saturate_velocity_infinite_component():
    v = gu.saturate_velocity([math.inf, 0.0, 0.0], 20.0, 0.99)
    assert gu.is_finite(v)
    assert v.tolist() == pytest.approx([0.99, 0.0, 0.0])

    v = gu.saturate_velocity([-math.inf, 1.0, math.inf], 20.0, 0.99)
    assert gu.calculate_norm(v) == pytest.approx(0.99)
    assert v[0] < 0.0 < v[2]
    assert v[1] == 0.0


def test_saturate_velocity_small_speeds_are_nearly_linear():
    v = gu.saturate_velocity([0.2, 0.0, 0.0], speed_of_light=20.0, max_speed=0.99)
    assert v[0] == pytest.approx(0.99 * 0.01, rel=1e-3)


def test_saturate_velocity_zero():
    assert gu.saturate_velocity([0.0, 0.0, 0.0], 20.0, 0.99).tolist() == [0.0, 0.0, 0.0]


def test_calculate_distance():
    assert gu.calculate_distance([1.0, 1.0, 1.0], [4.0, 5.0, 1.0]) == pytest.approx(5.0)
