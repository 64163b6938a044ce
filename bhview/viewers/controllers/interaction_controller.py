"""Interaction controller - turns pointer and zoom input into orbit changes."""
from __future__ import annotations

import logging
import math
from dataclasses import replace
from enum import Enum, auto
from typing import Callable

from bhview.core.errors import AlreadyDragging, InvalidParameter
from bhview.core.frame_state import ProjectionParams, ViewportSize
from bhview.core.kinematics_state import KinematicsState
from bhview.core.observer_config import InteractionConfig
from bhview.core.orbit_integrator import OrbitIntegrator

logger = logging.getLogger(__name__)


class InteractionMode(Enum):
    """Enum for the interaction modes."""
    IDLE = auto()
    DRAGGING = auto()


class InteractionController:
    """
    Translates drag and zoom gestures into orbit parameter changes.

    This class owns the transition between manual and autonomous orbiting:
    - begin_drag() parks the observer (orbiting off)
    - on_drag_move() sweeps the orbit angle and height
    - end_drag() optionally resumes orbiting from the current angle
    - cancel_drag() ends the gesture and keeps the observer parked

    Only one drag can be active at a time. Every event is applied in one
    step, so a cancelled gesture leaves the last fully applied state.

    Usage:
        controller = InteractionController(integrator)
        controller.begin_drag(0)
        controller.on_drag_move(0, 50, 0)
        controller.end_drag(0)
    """

    def __init__(self,
                 integrator: OrbitIntegrator,
                 config: InteractionConfig | None = None,
                 viewport: ViewportSize | None = None,
                 projection: ProjectionParams | None = None) -> None:
        self._integrator = integrator
        self._config = config or InteractionConfig()
        self._viewport = viewport or ViewportSize(1280, 720)
        self._projection = projection or ProjectionParams(aspect=self._viewport.aspect)

        self._current_mode: InteractionMode = InteractionMode.IDLE
        self._active_pointer: int | None = None
        self._drag_origin: tuple[float, float] | None = None

        self._on_mode_changed_callbacks: list[Callable[[InteractionMode, InteractionMode], None]] = []

    @property
    def state(self) -> KinematicsState:
        return self._integrator.state

    @property
    def config(self) -> InteractionConfig:
        return self._config

    def set_config(self, config: InteractionConfig) -> None:
        self._config = config
        logger.debug("Interaction config updated: %s", config)

    @property
    def current_mode(self) -> InteractionMode:
        """Get current interaction mode."""
        return self._current_mode

    @property
    def is_dragging(self) -> bool:
        return self._current_mode is InteractionMode.DRAGGING

    @property
    def active_pointer(self) -> int | None:
        return self._active_pointer

    @property
    def drag_origin(self) -> tuple[float, float] | None:
        """(orbit_angle, height_offset) at the start of the active drag."""
        return self._drag_origin

    @property
    def viewport(self) -> ViewportSize:
        return self._viewport

    @property
    def projection(self) -> ProjectionParams:
        return self._projection

    # =====================================================
    # Gestures
    # =====================================================

    def begin_drag(self, pointer_id: int) -> None:
        """
        Start a drag and park the observer at its current angle.

        :raise AlreadyDragging: If another drag is active; nothing is changed
        """
        if self._active_pointer is not None:
            logger.warning("Drag start from pointer %s ignored: pointer %s is dragging",
                           pointer_id, self._active_pointer)
            raise AlreadyDragging(self._active_pointer, pointer_id)

        self._active_pointer = pointer_id
        self._drag_origin = (self.state.orbit_angle, self.state.height_offset)
        self._integrator.set_orbiting(False)
        self._set_mode(InteractionMode.DRAGGING)

    def angle_for_drag(self, delta_x: float) -> float:
        """Orbit angle change (radians) for a horizontal drag of delta_x pixels."""
        return delta_x * self._config.drag_sensitivity / self._viewport.width

    def height_for_drag(self, delta_y: float) -> float:
        """Height change for a vertical drag; dragging down lowers the observer."""
        return -delta_y * self._config.height_sensitivity / self._viewport.height

    def on_drag_move(self, pointer_id: int, delta_x: float, delta_y: float) -> bool:
        """
        Apply a pointer move to the orbit.

        The horizontal delta is scaled by the inverse viewport width so the
        drag feel does not depend on resolution.

        :return: True if the move was applied
        :raise InvalidParameter: If a delta is not finite; nothing is changed
        """
        if pointer_id != self._active_pointer:
            logger.debug("Drag move from inactive pointer %s ignored", pointer_id)
            return False
        for name, value in (("delta_x", delta_x), ("delta_y", delta_y)):
            if not math.isfinite(value):
                raise InvalidParameter(name, value, "not finite")

        self._integrator.rotate(self.angle_for_drag(delta_x), self.height_for_drag(delta_y))
        return True

    def on_zoom(self, delta: float) -> float:
        """
        Zoom in (delta < 0) or out (delta > 0) by one zoom_sensitivity step.

        :return: The new orbit distance
        :raise InvalidParameter: If delta is not finite
        """
        if not math.isfinite(delta):
            raise InvalidParameter("zoom delta", delta, "not finite")
        if delta == 0:
            return self.state.distance

        factor = 1.0 + math.copysign(self._config.zoom_sensitivity, delta)
        distance = self._integrator.set_distance(self.state.distance * factor)
        logger.debug("Zoom %+g -> distance %.3f", delta, distance)
        return distance

    def end_drag(self, pointer_id: int) -> bool:
        """
        Finish the drag; resume orbiting if configured to do so.

        :return: True if the active drag was ended
        """
        if not self._finish_drag(pointer_id):
            return False
        if self._config.resume_orbit_after_release:
            self._integrator.set_orbiting(True)
        return True

    def cancel_drag(self, pointer_id: int) -> bool:
        """
        Abort the drag after the pointer was lost.

        The last applied move stays in effect and orbiting is not resumed.
        """
        if not self._finish_drag(pointer_id):
            return False
        logger.info("Drag cancelled for pointer %s, observer parked at %.3f rad",
                    pointer_id, self.state.orbit_angle)
        return True

    def _finish_drag(self, pointer_id: int) -> bool:
        if self._active_pointer is None or pointer_id != self._active_pointer:
            logger.debug("Drag end from inactive pointer %s ignored", pointer_id)
            return False
        self._active_pointer = None
        self._drag_origin = None
        self._set_mode(InteractionMode.IDLE)
        return True

    def handle_resize(self, new_aspect: float, viewport_size: ViewportSize | None = None) -> None:
        """
        Forward a new aspect ratio to the projection parameters.

        The kinematics state is not touched.

        :raise InvalidParameter: If the aspect ratio is not positive and finite
        """
        if not (math.isfinite(new_aspect) and new_aspect > 0):
            raise InvalidParameter("aspect", new_aspect, "must be positive")
        self._projection = replace(self._projection, aspect=float(new_aspect))
        if viewport_size is not None:
            self._viewport = viewport_size
        logger.debug("Viewport resized: aspect=%.3f, viewport=%s", new_aspect, self._viewport)

    # =====================================================
    # Callbacks
    # =====================================================

    def add_mode_changed_callback(
            self,
            callback: Callable[[InteractionMode, InteractionMode], None]
    ) -> None:
        """
        Add a callback for interaction mode changes.

        Callback signature: callback(old_mode: InteractionMode, new_mode: InteractionMode) -> None
        """
        self._on_mode_changed_callbacks.append(callback)

    def _set_mode(self, mode: InteractionMode) -> None:
        if mode == self._current_mode:
            return
        old_mode = self._current_mode
        self._current_mode = mode
        logger.debug(f"Interaction mode changed from {old_mode.name} -> {mode.name}")
        for callback in self._on_mode_changed_callbacks:
            try:
                callback(old_mode, mode)
            except Exception as e:
                logger.exception(f"Error in mode changed callback: {e}")
