"""
Interactor style for the observer preview.

VTK mouse events are turned into typed input events and handed to the
viewer; the observer session applies them at the next frame tick.
"""
import logging

from vtkmodules.vtkInteractionStyle import vtkInteractorStyleTrackballCamera

from bhview.core.input_events import DragCancel, DragEnd, DragMove, DragStart, Zoom

logger = logging.getLogger(__name__)

MOUSE_POINTER_ID = 0


class ObserverInteractorStyle(vtkInteractorStyleTrackballCamera):
    """
    Left drag orbits the observer, the wheel zooms.

    The default trackball handlers are removed, so VTK never moves the
    camera by itself.
    """

    def __init__(self, parent=None):
        super().__init__()
        self.parent = parent
        self._last_pos = None

        for event in ("LeftButtonPressEvent", "LeftButtonReleaseEvent", "MouseMoveEvent",
                      "MouseWheelForwardEvent", "MouseWheelBackwardEvent", "LeaveEvent",
                      "RightButtonPressEvent", "MiddleButtonPressEvent"):
            self.RemoveObservers(event)

        self.AddObserver("LeftButtonPressEvent", self.on_left_button_down)
        self.AddObserver("LeftButtonReleaseEvent", self.on_left_button_up)
        self.AddObserver("MouseMoveEvent", self.on_mouse_move)
        self.AddObserver("MouseWheelForwardEvent", self.on_wheel_forward)
        self.AddObserver("MouseWheelBackwardEvent", self.on_wheel_backward)
        self.AddObserver("LeaveEvent", self.on_leave)
        # Swallow right/middle buttons so the trackball never pans or spins.
        self.AddObserver("RightButtonPressEvent", lambda obj, event: None)
        self.AddObserver("MiddleButtonPressEvent", lambda obj, event: None)

    @property
    def dragging(self) -> bool:
        return self._last_pos is not None

    def on_left_button_down(self, obj, event):
        if self.dragging:
            return
        self._last_pos = self.GetInteractor().GetEventPosition()
        self.parent.post_input(DragStart(MOUSE_POINTER_ID))

    def on_mouse_move(self, obj, event):
        if not self.dragging:
            return
        x, y = self.GetInteractor().GetEventPosition()
        lx, ly = self._last_pos
        self._last_pos = (x, y)
        # VTK display y grows upward; input events use screen y (downward).
        self.parent.post_input(DragMove(MOUSE_POINTER_ID, x - lx, -(y - ly)))

    def on_left_button_up(self, obj, event):
        if not self.dragging:
            return
        self._last_pos = None
        self.parent.post_input(DragEnd(MOUSE_POINTER_ID))

    def on_leave(self, obj, event):
        if not self.dragging:
            return
        logger.debug("Pointer left the preview during a drag")
        self._last_pos = None
        self.parent.post_input(DragCancel(MOUSE_POINTER_ID))

    def on_wheel_forward(self, obj, event):
        self.parent.post_input(Zoom(-1.0))

    def on_wheel_backward(self, obj, event):
        self.parent.post_input(Zoom(1.0))
