import copy
import logging

from PySide6 import QtCore
from PySide6.QtWidgets import QMainWindow, QWidget, QVBoxLayout, QSplitter, QLabel

from bhview.app.app_settings_manager import AppSettingsManager
from bhview.app.shortcut_manager import ShortcutManager
from bhview.app.status import STATUS_FIELDS, StatusField
from bhview.core.errors import KinematicsError
from bhview.core.frame_state import FrameState, SamplerBindings, ShadingCollaborator
from bhview.core.observer_config import CameraConfig, EffectConfig, PerformanceConfig
from bhview.core.render_quality import get_quality
from bhview.ui.error_notifier import ErrorNotifier
from bhview.ui.widgets.control_panel import ControlPanel
from bhview.ui.widgets.frame_time_widget import FrameTimeWidget
from bhview.utils.log_util import log_io
from bhview.utils.resource_paths import settings_dir
from bhview.viewers.controllers.observer_session import ObserverSession
from bhview.viewers.observer_viewer import ObserverViewer

logger = logging.getLogger(__name__)

# Display loop period; the integrator uses the measured interval, not this value.
TICK_INTERVAL_MS = 16
# The plot and the status bar are refreshed every this many frames.
OVERLAY_REFRESH_FRAMES = 10


class MainWindow(QMainWindow):
    """Main application window: observer preview, controls and performance overlay."""

    def __init__(self, settings_mgr: AppSettingsManager | None = None,
                 shading: ShadingCollaborator | None = None,
                 samplers: SamplerBindings | None = None):
        """
        Initialize the main window.

        :param settings_mgr: Application settings manager.
        :param shading: Optional renderer that receives every frame record.
        :param samplers: Texture handles forwarded to the renderer.
        """
        super().__init__()

        self.setting = settings_mgr or AppSettingsManager()
        self.shading = shading
        self.samplers = samplers or SamplerBindings()

        self.effects = EffectConfig()
        self.performance: PerformanceConfig = self.setting.performance_config()
        self.session = ObserverSession(
            camera_config=self.setting.camera_config(),
            interaction_config=self.setting.interaction_config(),
        )
        self.session.integrator.add_diagnostic_callback(self._on_diagnostic)
        self.last_frame: FrameState | None = None

        # Setup shortcuts
        self.shortcut_mgr = ShortcutManager(
            parent=self,
            config_path=settings_dir(),
            settings_manager=self.setting,
        )

        # Status fields
        self.status_fields: dict[str, StatusField] = {
            k: copy.deepcopy(v) for k, v in STATUS_FIELDS.items()
        }
        self._status_label: dict[str, QLabel | None] = {}

        # Setup UI
        self.setWindowTitle("BHView - Black Hole Observer")
        self._setup_ui()
        self._setup_menus()
        self._setup_status_bar()

        self._register_shortcuts()
        self._apply_quality()

        # Display loop
        self._clock = QtCore.QElapsedTimer()
        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(TICK_INTERVAL_MS)
        self._timer.timeout.connect(self._on_tick)

        self.show()
        self.start()

    def _setup_ui(self) -> None:
        """Setup the main UI layout"""
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        main_layout = QVBoxLayout(central_widget)

        horizontal = QSplitter(QtCore.Qt.Horizontal)
        vertical = QSplitter(QtCore.Qt.Vertical)

        self.observer_viewer = ObserverViewer(parent=central_widget)

        self.frame_time_widget = FrameTimeWidget(history_size=self.session.stats.history_size)
        self.frame_time_widget.setMinimumHeight(100)

        vertical.addWidget(self.observer_viewer)
        vertical.addWidget(self.frame_time_widget)
        vertical.setStretchFactor(0, 4)
        vertical.setStretchFactor(1, 1)

        self.control_panel = ControlPanel(
            camera_config=self.session.camera_config,
            effect_config=self.effects,
            performance_config=self.performance,
            limits=self.session.integrator.limits,
        )
        horizontal.addWidget(vertical)
        horizontal.addWidget(self.control_panel)
        horizontal.setStretchFactor(0, 4)
        horizontal.setStretchFactor(1, 1)

        main_layout.addWidget(horizontal)
        self.setGeometry(100, 100, 1280, 800)

        # Connect signals
        self.observer_viewer.inputPosted.connect(self.session.post_event)
        self.control_panel.cameraConfigChanged.connect(self._on_camera_config_changed)
        self.control_panel.effectConfigChanged.connect(self._on_effect_config_changed)
        self.control_panel.performanceConfigChanged.connect(self._on_performance_config_changed)

    def _setup_menus(self) -> None:
        """Create the menus for the main window."""
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        file_menu.addAction("&Quit", self.close)

        view_menu = menubar.addMenu("&View")
        view_menu.addAction("&Reset Camera", self.reset_camera)
        view_menu.addAction("Toggle &Orbit", self.toggle_orbit)
        view_menu.addAction("Toggle O&verview", self.observer_viewer.toggle_overview)
        view_menu.addSeparator()
        view_menu.addAction("Toggle Performance &Overlay", self.toggle_overlay)

    def _setup_status_bar(self) -> None:
        """Setup the status bar."""
        status_bar = self.statusBar()

        for key, field in self.status_fields.items():
            if not field.visible:
                self._status_label[key] = None
                continue
            label = QLabel("", self)
            status_bar.addPermanentWidget(label)
            self._status_label[key] = label

    def _register_shortcuts(self) -> None:
        """Register keyboard shortcuts."""
        self.shortcut_mgr.add_callback("toggle_overlay", self.toggle_overlay)
        self.shortcut_mgr.add_callback("toggle_orbit", self.toggle_orbit)
        self.shortcut_mgr.add_callback("reset_camera", self.reset_camera)
        self.shortcut_mgr.add_callback("toggle_overview", self.observer_viewer.toggle_overview)

    # =====================================================
    # Display loop
    # =====================================================

    def start(self) -> None:
        self._clock.start()
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def _on_tick(self) -> None:
        dt = self._clock.restart() / 1000.0
        frame = self.session.tick(
            dt, self.effects, performance=self.performance, samplers=self.samplers)
        self.last_frame = frame

        self.observer_viewer.update_frame(frame)
        if self.shading is not None:
            self.shading.submit(frame)

        self.control_panel.set_orbit_checked(self.session.state.is_orbiting)
        if self.session.frame_count % OVERLAY_REFRESH_FRAMES == 0:
            self._refresh_overlay()

    def _refresh_overlay(self) -> None:
        state = self.session.state
        stats = self.session.stats
        self._update_status("orbit_angle", state.orbit_angle)
        self._update_status("distance", state.distance)
        self._update_status("height", state.height_offset)
        self._update_status("speed", state.speed)
        self._update_status("orbit", state.is_orbiting)
        self._update_status("fps", stats.fps)
        self._update_status("frame_time", stats.average_frame_time_ms)

        if self.frame_time_widget.isVisible():
            self.frame_time_widget.set_history(stats.history_ms, stats.average_frame_time_ms)

    # =====================================================
    # Actions
    # =====================================================

    @log_io(level=logging.INFO)
    def reset_camera(self) -> None:
        self.session.reset_camera()
        self.control_panel.set_camera_config(self.session.camera_config)

    def toggle_orbit(self) -> None:
        self.control_panel.orbit_check.toggle()

    def toggle_overlay(self) -> None:
        visible = not self.frame_time_widget.isVisible()
        self.frame_time_widget.setVisible(visible)
        logger.debug("Performance overlay %s", "shown" if visible else "hidden")

    def _apply_quality(self) -> None:
        if self.shading is not None:
            self.shading.set_quality(get_quality(self.performance.quality))

    # =====================================================
    # Signal Handlers
    # =====================================================

    def _on_camera_config_changed(self, config: CameraConfig) -> None:
        self.session.apply_camera_config(config)

    def _on_effect_config_changed(self, effects: EffectConfig) -> None:
        self.effects = effects

    def _on_performance_config_changed(self, performance: PerformanceConfig) -> None:
        quality_changed = performance.quality != self.performance.quality
        self.performance = performance
        self.setting.set_resolution_scale(performance.resolution_scale)
        self.setting.set_quality(performance.quality)
        if quality_changed:
            self._apply_quality()

    def _on_diagnostic(self, error: KinematicsError) -> None:
        ErrorNotifier.instance().notify(
            title="Observer",
            msg=str(error),
            severity="warning",
            dedup_seconds=5.0,
        )

    def _update_status(self, key: str, value) -> None:
        """Update status bar label."""
        label = self._status_label.get(key)
        if label is None:
            return

        field = self.status_fields.get(key)
        if field is None:
            return

        field.value = value
        try:
            label.setText(field.text())
        except (TypeError, ValueError) as e:
            logger.warning("Error formatting status field %s: %s", key, e)
            label.setText(str(value))

    def closeEvent(self, event) -> None:
        self.stop()
        self.observer_viewer.close()
        super().closeEvent(event)
