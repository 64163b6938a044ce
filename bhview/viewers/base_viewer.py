"""Base viewer class for VTK-based viewers"""
from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod

import vtk
from PySide6 import QtWidgets, QtCore

from bhview.core.frame_state import FrameState
from bhview.core.input_events import InputEvent, Resize
from bhview.viewers.camera.camera_controller import CameraController

logger = logging.getLogger(__name__)


class ABCQtMeta(ABCMeta, type(QtWidgets.QWidget)):
    """
    Metaclass that combines ABCMeta and type(QWidget)
    """
    pass


class BaseViewer(QtWidgets.QWidget, metaclass=ABCQtMeta):
    """
    Base class for VTK-based viewers

    Provides common functionality:
    - VTK rendering setup (renderer, interactor)
    - Camera control driven by frame records
    - Forwarding of input and resize events as typed input events

    Subclasses should implement:
    - setup_interactor_style(): Set up the interactor style
    - build_scene(): Create the scene actors
    - update_frame(): Apply a frame record to the scene
    """

    # Signals
    inputPosted = QtCore.Signal(object)

    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        """
        Initialize the base viewer.
        :param parent: Parent widget
        """
        super().__init__(parent)
        self._setup_ui()
        self._setup_vtk_rendering()

        self.camera_controller = CameraController(
            self.renderer.GetActiveCamera(),
            self.renderer)

        self.build_scene()
        self.setup_interactor_style()
        self.interactor.Initialize()

    def _setup_ui(self) -> None:
        """Setup the UI."""
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        from vtkmodules.qt.QVTKRenderWindowInteractor import QVTKRenderWindowInteractor
        self.vtk_widget = QVTKRenderWindowInteractor(self)
        layout.addWidget(self.vtk_widget)

        self.setLayout(layout)

        logger.debug("Base viewer UI created.")

    def _setup_vtk_rendering(self) -> None:
        """Setup the VTK rendering components."""
        render_window = self.vtk_widget.GetRenderWindow()

        self.renderer = vtk.vtkRenderer()
        self.renderer.SetBackground(0.0, 0.0, 0.0)
        render_window.AddRenderer(self.renderer)

        self.interactor = render_window.GetInteractor()

        logger.debug("VTK rendering components initialized.")

    @abstractmethod
    def setup_interactor_style(self) -> None:
        """
        Setup the interactor style for user interaction.

        Example:
        style = CustomInteractorStyle(self)
        self.interactor.SetInteractorStyle(style)
        """
        pass

    @abstractmethod
    def build_scene(self) -> None:
        """Create the actors of the scene."""
        pass

    @abstractmethod
    def update_frame(self, frame: FrameState) -> None:
        """Apply a frame record to the scene and render."""
        pass

    # =====================================================
    # Input
    # =====================================================

    def post_input(self, event: InputEvent) -> None:
        """Publish a typed input event to whoever owns the observer."""
        self.inputPosted.emit(event)

    def resizeEvent(self, event) -> None:
        """Report the new viewport size in device pixels."""
        super().resizeEvent(event)
        ratio = self.devicePixelRatioF()
        size = event.size()
        self.post_input(Resize(round(size.width() * ratio), round(size.height() * ratio)))

    # =====================================================
    # Rendering
    # =====================================================

    def update_view(self) -> None:
        """Trigger a render."""
        self.vtk_widget.GetRenderWindow().Render()

    # =====================================================
    # Lifecycle
    # =====================================================

    def closeEvent(self, event) -> None:
        """Handle close event."""
        if hasattr(self, "interactor") and self.interactor:
            self.interactor.TerminateApp()
        super().closeEvent(event)
