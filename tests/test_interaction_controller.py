import math

import pytest

from bhview.core.errors import AlreadyDragging, InvalidParameter
from bhview.core.frame_state import ViewportSize
from bhview.core.observer_config import InteractionConfig
from bhview.viewers.controllers.interaction_controller import (
    InteractionController,
    InteractionMode,
)


@pytest.fixture
def controller(integrator):
    return InteractionController(integrator, viewport=ViewportSize(1280, 720))


@pytest.fixture
def resuming_controller(integrator):
    return InteractionController(
        integrator,
        config=InteractionConfig(resume_orbit_after_release=True),
        viewport=ViewportSize(1280, 720),
    )


def test_begin_drag_parks_observer(controller, integrator):
    integrator.advance(1.0, 0.5)
    controller.begin_drag(0)

    assert not integrator.state.is_orbiting
    assert controller.current_mode is InteractionMode.DRAGGING
    assert controller.drag_origin == (pytest.approx(0.5), 0.0)

    # Angle is frozen until a delta arrives.
    integrator.advance(1.0, 0.5)
    assert integrator.state.orbit_angle == pytest.approx(0.5)


def test_drag_fifty_pixels_without_resume(controller, integrator):
    controller.begin_drag(0)
    assert controller.on_drag_move(0, 50.0, 0.0)
    controller.end_drag(0)

    expected = 50.0 * math.pi / 1280
    assert integrator.state.orbit_angle == pytest.approx(expected)
    assert controller.angle_for_drag(50.0) == pytest.approx(expected)
    assert not integrator.state.is_orbiting
    assert controller.current_mode is InteractionMode.IDLE

    integrator.advance(1.0, 0.5)
    assert integrator.state.orbit_angle == pytest.approx(expected)


def test_drag_is_resolution_independent(integrator):
    small = InteractionController(integrator, viewport=ViewportSize(640, 360))
    large = InteractionController(integrator, viewport=ViewportSize(2560, 1440))
    assert small.angle_for_drag(64) == pytest.approx(large.angle_for_drag(256))


def test_vertical_drag_changes_height(controller, integrator):
    controller.begin_drag(0)
    controller.on_drag_move(0, 0.0, 72.0)
    # Dragging down by a tenth of the viewport lowers by a tenth of height_sensitivity.
    assert integrator.state.height_offset == pytest.approx(-1.0)

    controller.on_drag_move(0, 0.0, -100000.0)
    assert integrator.state.height_offset == integrator.limits.max_height


def test_end_drag_with_resume_continues_from_current_angle(resuming_controller, integrator):
    controller = resuming_controller
    controller.begin_drag(0)
    controller.on_drag_move(0, 100.0, 0.0)
    angle = integrator.state.orbit_angle
    controller.end_drag(0)

    assert integrator.state.is_orbiting
    assert integrator.state.orbit_angle == angle
    integrator.advance(0.1, 0.5)
    assert integrator.state.orbit_angle == pytest.approx(angle + 0.05)


def test_cancel_drag_never_resumes(resuming_controller, integrator):
    controller = resuming_controller
    controller.begin_drag(3)
    controller.on_drag_move(3, 25.0, 10.0)
    state = integrator.state.copy()

    assert controller.cancel_drag(3)

    assert not integrator.state.is_orbiting
    assert integrator.state.orbit_angle == state.orbit_angle
    assert integrator.state.height_offset == state.height_offset
    assert controller.active_pointer is None


def test_second_begin_drag_is_rejected_without_changes(controller, integrator):
    controller.begin_drag(1)
    controller.on_drag_move(1, 40.0, 0.0)
    angle = integrator.state.orbit_angle

    with pytest.raises(AlreadyDragging) as exc:
        controller.begin_drag(2)

    assert exc.value.active_pointer == 1
    assert exc.value.requested_pointer == 2
    assert controller.active_pointer == 1
    assert integrator.state.orbit_angle == angle
    assert controller.drag_origin == (0.0, 0.0)


def test_events_from_other_pointers_are_ignored(controller, integrator):
    controller.begin_drag(1)
    assert not controller.on_drag_move(2, 500.0, 0.0)
    assert not controller.end_drag(2)
    assert integrator.state.orbit_angle == 0.0
    assert controller.is_dragging


def test_drag_move_without_drag_is_ignored(controller, integrator):
    assert not controller.on_drag_move(0, 50.0, 0.0)
    assert integrator.state.orbit_angle == 0.0


def test_non_finite_drag_delta_is_rejected(controller, integrator):
    controller.begin_drag(0)
    with pytest.raises(InvalidParameter):
        controller.on_drag_move(0, math.nan, 0.0)
    assert integrator.state.orbit_angle == 0.0


def test_zoom_in_from_ten_to_nine(controller, integrator):
    assert controller.on_zoom(-1) == pytest.approx(9.0)
    assert integrator.state.distance == pytest.approx(9.0)


def test_many_zoom_ins_stop_at_min_distance(controller, integrator):
    for _ in range(201):
        distance = controller.on_zoom(-1)
        assert distance >= integrator.limits.min_distance
        assert distance > 0
    assert integrator.state.distance == integrator.limits.min_distance


def test_huge_zoom_magnitude_is_one_step(controller, integrator):
    controller.on_zoom(-1e9)
    assert integrator.state.distance == pytest.approx(9.0)


def test_zoom_out_stops_at_max_distance(controller, integrator):
    controller.on_zoom(1)
    assert integrator.state.distance == pytest.approx(11.0)
    for _ in range(100):
        controller.on_zoom(1)
    assert integrator.state.distance == integrator.limits.max_distance


def test_zero_zoom_is_ignored(controller, integrator):
    assert controller.on_zoom(0) == 10.0


def test_zoom_rejects_nan(controller, integrator):
    with pytest.raises(InvalidParameter):
        controller.on_zoom(math.nan)
    assert integrator.state.distance == 10.0


def test_handle_resize_updates_projection_only(controller, integrator):
    before = integrator.state.copy()
    controller.handle_resize(2.0, ViewportSize(1600, 800))

    assert controller.projection.aspect == 2.0
    assert controller.viewport == ViewportSize(1600, 800)
    assert integrator.state.position.tolist() == before.position.tolist()
    assert integrator.state.field_of_view == before.field_of_view


@pytest.mark.parametrize("aspect", [0.0, -1.0, math.nan, math.inf])
def test_handle_resize_rejects_invalid_aspect(controller, aspect):
    with pytest.raises(InvalidParameter):
        controller.handle_resize(aspect)


def test_mode_changed_callbacks(controller):
    changes = []
    controller.add_mode_changed_callback(lambda old, new: changes.append((old, new)))

    controller.begin_drag(0)
    controller.end_drag(0)

    assert changes == [
        (InteractionMode.IDLE, InteractionMode.DRAGGING),
        (InteractionMode.DRAGGING, InteractionMode.IDLE),
    ]
