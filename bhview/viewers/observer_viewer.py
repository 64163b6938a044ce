"""Observer preview widget: a rasterized stand-in for the shaded black hole."""
from __future__ import annotations

import logging
import math

import vtk

from bhview.core.frame_state import FrameState
from bhview.viewers.base_viewer import BaseViewer
from bhview.viewers.interactor_styles.observer_interactor_style import ObserverInteractorStyle

logger = logging.getLogger(__name__)

# Scene scale: Schwarzschild radius = 1.
EVENT_HORIZON_RADIUS = 1.0
PHOTON_SPHERE_RADIUS = 1.5
DISK_INNER_RADIUS = 3.0
DISK_OUTER_RADIUS = 12.0
STAR_SHELL_RADIUS = 500.0


class ObserverViewer(BaseViewer):
    """
    Preview of the scene geometry around the black hole.

    Provides:
    - Event horizon, photon sphere and accretion disk actors
    - A star shell toggled by the stars flag
    - An overview mode showing the observer marker, view cone, orbit and
      velocity vector
    """

    def __init__(self, parent=None) -> None:
        self._marker_actors: list[vtk.vtkActor] = []
        super().__init__(parent=parent)

    def setup_interactor_style(self) -> None:
        """Set up the interactor style for the observer preview."""
        self._interactor_style = ObserverInteractorStyle(self)
        self.interactor.SetInteractorStyle(self._interactor_style)

    # =====================================================
    # Scene
    # =====================================================

    def build_scene(self) -> None:
        horizon = vtk.vtkSphereSource()
        horizon.SetRadius(EVENT_HORIZON_RADIUS)
        horizon.SetThetaResolution(48)
        horizon.SetPhiResolution(48)
        self.horizon_actor = self._make_actor(horizon, color=(0.02, 0.02, 0.02))

        photon_ring = self._make_ring(PHOTON_SPHERE_RADIUS)
        self.photon_ring_actor = self._make_actor(photon_ring, color=(1.0, 0.6, 0.2))
        self.photon_ring_actor.GetProperty().SetOpacity(0.5)

        disk = vtk.vtkDiskSource()
        disk.SetInnerRadius(DISK_INNER_RADIUS)
        disk.SetOuterRadius(DISK_OUTER_RADIUS)
        disk.SetCircumferentialResolution(128)
        disk.SetRadialResolution(8)
        self.disk_actor = self._make_actor(disk, color=(1.0, 0.55, 0.15))
        # vtkDiskSource lies in the x-y plane; the disk belongs in x-z.
        self.disk_actor.RotateX(90.0)
        self.disk_actor.GetProperty().SetOpacity(0.8)

        stars = vtk.vtkPointSource()
        stars.SetNumberOfPoints(3000)
        stars.SetRadius(STAR_SHELL_RADIUS)
        stars.SetDistributionToShell()
        self.star_actor = self._make_actor(stars, color=(1.0, 1.0, 1.0))
        self.star_actor.GetProperty().SetPointSize(2)

        self._build_observer_marker()
        self._set_marker_visible(False)

    def _build_observer_marker(self) -> None:
        """Observer dot, wireframe view cone, orbit ring and velocity line."""
        self._marker_source = vtk.vtkSphereSource()
        self._marker_source.SetRadius(0.15)
        self.marker_actor = self._make_actor(self._marker_source, color=(1.0, 0.0, 0.0))

        self._cone_source = vtk.vtkConeSource()
        self._cone_source.SetHeight(1.5)
        self._cone_source.SetRadius(0.4)
        self._cone_source.SetResolution(8)
        self.cone_actor = self._make_actor(self._cone_source, color=(1.0, 0.0, 0.0))
        self.cone_actor.GetProperty().SetRepresentationToWireframe()
        self.cone_actor.GetProperty().SetOpacity(0.4)

        self._orbit_source = self._make_ring(10.0)
        self.orbit_actor = self._make_actor(self._orbit_source, color=(0.4, 0.4, 0.9))

        self._velocity_source = vtk.vtkLineSource()
        self.velocity_actor = self._make_actor(self._velocity_source, color=(0.2, 1.0, 1.0))
        self.velocity_actor.GetProperty().SetLineWidth(2)

        self._marker_actors = [self.marker_actor, self.cone_actor,
                               self.orbit_actor, self.velocity_actor]

    def _make_ring(self, radius: float) -> vtk.vtkRegularPolygonSource:
        ring = vtk.vtkRegularPolygonSource()
        ring.GeneratePolygonOff()
        ring.SetNumberOfSides(128)
        ring.SetNormal(0.0, 1.0, 0.0)
        ring.SetRadius(radius)
        return ring

    def _make_actor(self, source, color: tuple[float, float, float]) -> vtk.vtkActor:
        mapper = vtk.vtkPolyDataMapper()
        mapper.SetInputConnection(source.GetOutputPort())
        actor = vtk.vtkActor()
        actor.SetMapper(mapper)
        actor.GetProperty().SetColor(*color)
        self.renderer.AddActor(actor)
        return actor

    def _set_marker_visible(self, visible: bool) -> None:
        for actor in self._marker_actors:
            actor.SetVisibility(visible)

    # =====================================================
    # Frame updates
    # =====================================================

    @property
    def overview(self) -> bool:
        return self.camera_controller.overview

    def set_overview(self, enabled: bool) -> None:
        """Show the observer from outside instead of through its eyes."""
        self.camera_controller.set_overview(enabled)
        self._set_marker_visible(enabled)
        self.update_view()

    def toggle_overview(self) -> None:
        self.set_overview(not self.overview)

    def update_frame(self, frame: FrameState) -> None:
        """Apply a frame record to the preview and render."""
        self.disk_actor.SetVisibility(frame.flags.accretion_disk)
        self.star_actor.SetVisibility(frame.flags.show_stars)

        if self.overview:
            self._update_marker(frame)
        self.camera_controller.sync_to_frame(frame)
        self.update_view()

    def _update_marker(self, frame: FrameState) -> None:
        x, y, z = frame.cam_pos
        self._marker_source.SetCenter(x, y, z)

        dx, dy, dz = frame.cam_dir
        # Cone apex points along its direction; put the apex at the observer.
        self._cone_source.SetDirection(-dx, -dy, -dz)
        self._cone_source.SetCenter(x + 0.75 * dx, y + 0.75 * dy, z + 0.75 * dz)

        self._orbit_source.SetCenter(0.0, y, 0.0)
        self._orbit_source.SetRadius(math.hypot(x, z))

        vx, vy, vz = frame.cam_vel
        scale = 5.0
        self._velocity_source.SetPoint1(x, y, z)
        self._velocity_source.SetPoint2(x + scale * vx, y + scale * vy, z + scale * vz)
