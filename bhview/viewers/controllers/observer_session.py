"""
Observer session - the per-frame pipeline.

One tick runs, in order:
1. pending camera configuration
2. queued input events (in arrival order)
3. OrbitIntegrator.advance()
4. export of the FrameState

Everything runs on the thread that drives the display loop; nothing here
blocks or locks.
"""
from __future__ import annotations

import logging
import math
from collections import deque

from bhview.core.errors import InvalidParameter, KinematicsError
from bhview.core.frame_state import FrameState, SamplerBindings, ViewportSize, export_frame_state
from bhview.core.frame_stats import FrameStats
from bhview.core.input_events import (
    DragCancel,
    DragEnd,
    DragMove,
    DragStart,
    InputEvent,
    Resize,
    Zoom,
)
from bhview.core.kinematics_state import KinematicsState
from bhview.core.observer_config import (
    CameraConfig,
    EffectConfig,
    InteractionConfig,
    OrbitLimits,
    PerformanceConfig,
)
from bhview.core.orbit_integrator import OrbitIntegrator
from bhview.viewers.controllers.interaction_controller import InteractionController

logger = logging.getLogger(__name__)


class ObserverSession:
    """Owns the single observer of an application session."""

    def __init__(self,
                 camera_config: CameraConfig | None = None,
                 interaction_config: InteractionConfig | None = None,
                 limits: OrbitLimits | None = None,
                 viewport: ViewportSize | None = None) -> None:
        self._camera_config = camera_config or CameraConfig()
        self._pending_config: CameraConfig | None = None
        # Orbit flag requested while a drag owned it; applied when the drag ends.
        self._deferred_orbit: bool | None = None

        self.integrator = OrbitIntegrator(limits=limits, camera_config=self._camera_config)
        self.controller = InteractionController(
            self.integrator, config=interaction_config, viewport=viewport)

        self._events: deque[InputEvent] = deque()
        self.elapsed_time = 0.0
        self.frame_count = 0
        self.stats = FrameStats()

    @property
    def state(self) -> KinematicsState:
        return self.integrator.state

    @property
    def camera_config(self) -> CameraConfig:
        return self._camera_config

    @property
    def pending_event_count(self) -> int:
        return len(self._events)

    def post_event(self, event: InputEvent) -> None:
        """Queue an input event for the next tick."""
        self._events.append(event)

    def apply_camera_config(self, config: CameraConfig) -> None:
        """Stage a camera configuration; it is applied at the start of the next tick."""
        self._pending_config = config

    def reset_camera(self) -> None:
        """Return the observer to the configured pose."""
        self._events.clear()
        if self.controller.is_dragging:
            self.controller.cancel_drag(self.controller.active_pointer)
        self._deferred_orbit = None
        self.integrator.reset(self._camera_config)

    # =====================================================
    # Frame pipeline
    # =====================================================

    def tick(self,
             dt: float,
             effects: EffectConfig,
             *,
             performance: PerformanceConfig | None = None,
             samplers: SamplerBindings | None = None) -> FrameState:
        """
        Run one frame: config, events, integration, export.

        :param dt: Seconds since the previous tick
        :param effects: Effect toggles for this frame
        :return: The frame record for the shading collaborator
        """
        self._apply_pending_config()
        self._drain_events()

        try:
            self.integrator.advance(dt, self._camera_config.auto_orbit_rate)
        except KinematicsError as e:
            logger.warning("Integration step skipped: %s", e)
            self.integrator.report(e)
        else:
            self.elapsed_time += dt
            self.stats.record(dt)

        self.frame_count += 1
        return export_frame_state(
            self.state,
            effects,
            self.controller.viewport,
            elapsed_time=self.elapsed_time,
            projection=self.controller.projection,
            performance=performance,
            samplers=samplers,
        )

    def _apply_pending_config(self) -> None:
        config, self._pending_config = self._pending_config, None
        if config is None:
            return

        old = self._camera_config
        deferred = None
        if self.controller.is_dragging:
            # A drag owns the orbit flag until it ends. The stale config and
            # the parked observer can disagree, so compare against both.
            if config.orbit != old.orbit or config.orbit != self.state.is_orbiting:
                deferred = config.orbit
            config = config.with_changes(orbit=old.orbit)
        if config == old and deferred is None:
            return

        try:
            _validate_camera_config(config)
            if config.distance != old.distance:
                self.integrator.set_distance(config.distance)
            if config.height != old.height:
                self.integrator.set_height_offset(config.height)
            if config.fov != old.fov:
                self.integrator.set_field_of_view(config.fov)
        except KinematicsError as e:
            logger.warning("Camera config rejected, keeping previous values: %s", e)
            self.integrator.report(e)
            return

        if deferred is not None:
            self._deferred_orbit = deferred
            logger.debug("Orbit request deferred until the drag ends: %s", deferred)
        elif config.orbit != old.orbit:
            self.integrator.set_orbiting(config.orbit)
        self._camera_config = config
        logger.debug("Camera config applied: %s", config)

    def _drain_events(self) -> None:
        while self._events:
            event = self._events.popleft()
            try:
                self._dispatch(event)
            except KinematicsError as e:
                logger.warning("Input event %s rejected: %s", event, e)
                self.integrator.report(e)

    def _dispatch(self, event: InputEvent) -> None:
        controller = self.controller
        if isinstance(event, DragStart):
            controller.begin_drag(event.pointer_id)
        elif isinstance(event, DragMove):
            controller.on_drag_move(event.pointer_id, event.delta_x, event.delta_y)
        elif isinstance(event, DragEnd):
            if controller.end_drag(event.pointer_id):
                self._after_drag()
        elif isinstance(event, DragCancel):
            if controller.cancel_drag(event.pointer_id):
                self._after_drag()
        elif isinstance(event, Zoom):
            controller.on_zoom(event.delta)
        elif isinstance(event, Resize):
            if event.width <= 0 or event.height <= 0:
                logger.debug("Ignoring resize to empty viewport %s", event)
                return
            controller.handle_resize(event.aspect, ViewportSize(event.width, event.height))
        else:
            logger.warning(f"Unknown input event: {event!r}")

    def _after_drag(self) -> None:
        """Apply a deferred orbit request, else record the flag the drag left behind."""
        orbit, self._deferred_orbit = self._deferred_orbit, None
        if orbit is not None:
            self.integrator.set_orbiting(orbit)
        if self._camera_config.orbit != self.state.is_orbiting:
            self._camera_config = self._camera_config.with_changes(orbit=self.state.is_orbiting)


def _validate_camera_config(config: CameraConfig) -> None:
    """Reject the whole config before any field of it is applied."""
    for name in ("distance", "height", "fov", "auto_orbit_rate"):
        value = getattr(config, name)
        if not math.isfinite(value):
            raise InvalidParameter(name, value, "not finite")
    for name in ("distance", "fov"):
        value = getattr(config, name)
        if value < 0:
            raise InvalidParameter(name, value, "negative")
