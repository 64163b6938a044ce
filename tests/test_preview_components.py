import pytest
import vtk

from bhview.core.frame_state import ViewportSize, export_frame_state
from bhview.core.input_events import DragCancel, DragEnd, DragMove, DragStart, Zoom
from bhview.core.observer_config import EffectConfig
from bhview.viewers.camera.camera_controller import CameraController, CameraPreset
from bhview.viewers.interactor_styles.observer_interactor_style import ObserverInteractorStyle


class RecordingViewer:
    def __init__(self):
        self.events = []

    def post_input(self, event):
        self.events.append(event)


@pytest.fixture
def style():
    viewer = RecordingViewer()
    style = ObserverInteractorStyle(viewer)
    interactor = vtk.vtkRenderWindowInteractor()
    style.SetInteractor(interactor)
    # Keep the interactor alive for the test; SetInteractor holds no reference.
    yield style


def _at(style, x, y):
    style.GetInteractor().SetEventPosition(x, y)


def test_left_drag_posts_drag_events(style):
    _at(style, 100, 100)
    style.on_left_button_down(None, None)
    _at(style, 130, 90)
    style.on_mouse_move(None, None)
    style.on_left_button_up(None, None)

    assert style.parent.events == [DragStart(0), DragMove(0, 30, 10), DragEnd(0)]


def test_mouse_move_without_button_is_ignored(style):
    _at(style, 10, 10)
    style.on_mouse_move(None, None)
    style.on_left_button_up(None, None)
    assert style.parent.events == []


def test_leaving_during_drag_cancels(style):
    _at(style, 0, 0)
    style.on_left_button_down(None, None)
    style.on_leave(None, None)
    style.on_leave(None, None)
    assert style.parent.events == [DragStart(0), DragCancel(0)]
    assert not style.dragging


def test_wheel_posts_zoom(style):
    style.on_wheel_forward(None, None)
    style.on_wheel_backward(None, None)
    assert style.parent.events == [Zoom(-1.0), Zoom(1.0)]


@pytest.fixture
def camera_controller():
    renderer = vtk.vtkRenderer()
    return CameraController(renderer.GetActiveCamera(), renderer)


def test_camera_follows_frame(camera_controller, integrator):
    integrator.advance(1.0, 0.5)
    frame = export_frame_state(integrator.state, EffectConfig(), ViewportSize(800, 600))

    camera_controller.sync_to_frame(frame)

    assert camera_controller.get_position() == pytest.approx(frame.cam_pos)
    assert camera_controller.get_view_direction() == pytest.approx(frame.cam_dir)
    assert camera_controller.get_view_up() == pytest.approx(frame.cam_up)
    assert camera_controller.camera.GetViewAngle() == pytest.approx(frame.fov)


def test_overview_ignores_frames(camera_controller, integrator):
    camera_controller.set_overview(True)
    frame = export_frame_state(integrator.state, EffectConfig(), ViewportSize(800, 600))

    camera_controller.sync_to_frame(frame)

    assert camera_controller.overview
    assert camera_controller.get_position() == pytest.approx(CameraPreset.POSITION)
