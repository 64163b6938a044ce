from __future__ import annotations

import logging

import vtk

from bhview.core import geometry_utils
from bhview.core.frame_state import FrameState

logger = logging.getLogger(__name__)


class CameraPreset:
    """Fixed overview camera used when the observer marker is shown."""
    POSITION = (0.0, 35.0, 45.0)
    FOCAL_POINT = (0.0, 0.0, 0.0)
    VIEWUP = (0.0, 1.0, 0.0)
    VIEW_ANGLE = 45.0


class CameraController:
    """
    Drives the VTK preview camera from exported frame records.

    Two views are supported:
    - observer view: the VTK camera is placed at the observer's pose
    - overview: a fixed camera looking at the whole orbit
    """

    def __init__(self, camera: vtk.vtkCamera, renderer: vtk.vtkRenderer) -> None:
        self.camera = camera
        self.renderer = renderer
        self._overview = False
        self.camera.SetClippingRange(0.1, 80000.0)

    @property
    def overview(self) -> bool:
        """True when the fixed overview camera is active."""
        return self._overview

    def set_overview(self, enabled: bool) -> None:
        """Switch between the observer's eye and the overview camera."""
        self._overview = bool(enabled)
        if self._overview:
            self.camera.SetPosition(*CameraPreset.POSITION)
            self.camera.SetFocalPoint(*CameraPreset.FOCAL_POINT)
            self.camera.SetViewUp(*CameraPreset.VIEWUP)
            self.camera.SetViewAngle(CameraPreset.VIEW_ANGLE)
            self.renderer.ResetCameraClippingRange()
        logger.info("Preview camera: %s", "overview" if self._overview else "observer")

    def sync_to_frame(self, frame: FrameState) -> None:
        """
        Place the camera at the observer pose of a frame.

        Does nothing while the overview camera is active.
        """
        if self._overview:
            return

        position = frame.cam_pos
        focal_point = tuple(position[i] + frame.cam_dir[i] for i in range(3))

        self.camera.SetPosition(*position)
        self.camera.SetFocalPoint(*focal_point)
        self.camera.SetViewUp(*frame.cam_up)
        # vtk and the frame record both use the vertical field of view.
        self.camera.SetViewAngle(frame.fov)
        self.renderer.ResetCameraClippingRange()

    def get_position(self) -> tuple[float, float, float]:
        """Get the current camera position."""
        return tuple(self.camera.GetPosition())

    def get_view_direction(self) -> tuple[float, float, float]:
        """Get the unit vector from the camera position to its focal point."""
        view = geometry_utils.direction_vector(self.camera.GetPosition(), self.camera.GetFocalPoint())
        return tuple(geometry_utils.normalize_vector(view).tolist())

    def get_view_up(self) -> tuple[float, float, float]:
        """Get the current camera view up vector."""
        return tuple(self.camera.GetViewUp())
