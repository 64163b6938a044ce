"""Side panel with the camera, effect and performance controls."""
from __future__ import annotations

import logging

from PySide6 import QtCore
from PySide6.QtWidgets import (QWidget, QVBoxLayout, QFormLayout, QGroupBox, QSlider,
                               QCheckBox, QComboBox, QLabel, QHBoxLayout)

from bhview.core.observer_config import (CameraConfig, EffectConfig, OrbitLimits,
                                         PerformanceConfig)
from bhview.core.render_quality import QUALITY_PRESETS

logger = logging.getLogger(__name__)

# Sliders are integer; distance and height move in steps of 0.1.
SLIDER_SCALE = 10

RESOLUTION_SCALES = (0.25, 0.5, 0.75, 1.0, 1.5, 2.0)

EFFECT_LABELS = {
    "accretion_disk": "Accretion disk",
    "use_disk_texture": "Disk texture",
    "show_stars": "Stars",
    "show_milkyway": "Milky Way",
    "lorentz_transform": "Lorentz transform",
    "doppler_shift": "Doppler shift",
    "beaming": "Relativistic beaming",
}


class ControlPanel(QWidget):
    """
    Builds a new frozen config whenever a control changes.

    Signals:
    - cameraConfigChanged(CameraConfig)
    - effectConfigChanged(EffectConfig)
    - performanceConfigChanged(PerformanceConfig)
    """
    cameraConfigChanged = QtCore.Signal(object)
    effectConfigChanged = QtCore.Signal(object)
    performanceConfigChanged = QtCore.Signal(object)

    def __init__(self,
                 camera_config: CameraConfig | None = None,
                 effect_config: EffectConfig | None = None,
                 performance_config: PerformanceConfig | None = None,
                 limits: OrbitLimits | None = None,
                 parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._limits = limits or OrbitLimits()
        self._camera = camera_config or CameraConfig()
        self._effects = effect_config or EffectConfig()
        self._performance = performance_config or PerformanceConfig()

        self._effect_boxes: dict[str, QCheckBox] = {}
        self._setup_ui()
        self._sync_widgets()

    @property
    def camera_config(self) -> CameraConfig:
        return self._camera

    @property
    def effect_config(self) -> EffectConfig:
        return self._effects

    @property
    def performance_config(self) -> PerformanceConfig:
        return self._performance

    # =====================================================
    # UI
    # =====================================================

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.addWidget(self._build_camera_group())
        layout.addWidget(self._build_effect_group())
        layout.addWidget(self._build_performance_group())
        layout.addStretch(1)

    def _slider(self, lower: float, upper: float, scale: int) -> QSlider:
        slider = QSlider(QtCore.Qt.Orientation.Horizontal, self)
        slider.setRange(round(lower * scale), round(upper * scale))
        return slider

    def _with_value_label(self, slider: QSlider) -> tuple[QWidget, QLabel]:
        row = QWidget(self)
        h = QHBoxLayout(row)
        h.setContentsMargins(0, 0, 0, 0)
        label = QLabel("", row)
        label.setMinimumWidth(48)
        h.addWidget(slider)
        h.addWidget(label)
        return row, label

    def _build_camera_group(self) -> QGroupBox:
        group = QGroupBox("Camera", self)
        form = QFormLayout(group)
        lim = self._limits

        self.distance_slider = self._slider(lim.min_distance, lim.max_distance, SLIDER_SCALE)
        self.height_slider = self._slider(-lim.max_height, lim.max_height, SLIDER_SCALE)
        self.fov_slider = self._slider(lim.min_fov, lim.max_fov, 1)
        self.orbit_check = QCheckBox("Auto orbit", group)

        row, self.distance_label = self._with_value_label(self.distance_slider)
        form.addRow("Distance", row)
        row, self.height_label = self._with_value_label(self.height_slider)
        form.addRow("Height", row)
        row, self.fov_label = self._with_value_label(self.fov_slider)
        form.addRow("FOV", row)
        form.addRow(self.orbit_check)

        self.distance_slider.valueChanged.connect(self._on_camera_changed)
        self.height_slider.valueChanged.connect(self._on_camera_changed)
        self.fov_slider.valueChanged.connect(self._on_camera_changed)
        self.orbit_check.toggled.connect(self._on_camera_changed)
        return group

    def _build_effect_group(self) -> QGroupBox:
        group = QGroupBox("Effects", self)
        v = QVBoxLayout(group)
        for name, text in EFFECT_LABELS.items():
            box = QCheckBox(text, group)
            box.toggled.connect(self._on_effects_changed)
            v.addWidget(box)
            self._effect_boxes[name] = box
        return group

    def _build_performance_group(self) -> QGroupBox:
        group = QGroupBox("Performance", self)
        form = QFormLayout(group)

        self.quality_combo = QComboBox(group)
        for name in QUALITY_PRESETS:
            self.quality_combo.addItem(name.title(), name)

        self.resolution_combo = QComboBox(group)
        for scale in RESOLUTION_SCALES:
            self.resolution_combo.addItem(f"{scale:g}x", scale)

        form.addRow("Quality", self.quality_combo)
        form.addRow("Resolution", self.resolution_combo)

        self.quality_combo.currentIndexChanged.connect(self._on_performance_changed)
        self.resolution_combo.currentIndexChanged.connect(self._on_performance_changed)
        return group

    # =====================================================
    # Sync
    # =====================================================

    def set_camera_config(self, config: CameraConfig) -> None:
        """Show a config without emitting cameraConfigChanged."""
        self._camera = config
        self._sync_widgets()

    def set_orbit_checked(self, orbiting: bool) -> None:
        """Reflect the observer's orbit flag, e.g. after a drag parked it."""
        if self.orbit_check.isChecked() == orbiting:
            return
        self._camera = self._camera.with_changes(orbit=orbiting)
        self.orbit_check.blockSignals(True)
        self.orbit_check.setChecked(orbiting)
        self.orbit_check.blockSignals(False)

    def _sync_widgets(self) -> None:
        widgets = [self.distance_slider, self.height_slider, self.fov_slider, self.orbit_check,
                   self.quality_combo, self.resolution_combo, *self._effect_boxes.values()]
        for w in widgets:
            w.blockSignals(True)
        try:
            c = self._camera
            self.distance_slider.setValue(round(c.distance * SLIDER_SCALE))
            self.height_slider.setValue(round(c.height * SLIDER_SCALE))
            self.fov_slider.setValue(round(c.fov))
            self.orbit_check.setChecked(c.orbit)

            for name, box in self._effect_boxes.items():
                box.setChecked(getattr(self._effects, name))

            q = self.quality_combo.findData(self._performance.quality)
            self.quality_combo.setCurrentIndex(max(q, 0))
            r = self.resolution_combo.findData(self._performance.resolution_scale)
            if r < 0:
                r = self.resolution_combo.findData(1.0)
            self.resolution_combo.setCurrentIndex(r)
        finally:
            for w in widgets:
                w.blockSignals(False)
        self._refresh_labels()

    def _refresh_labels(self) -> None:
        self.distance_label.setText(f"{self._camera.distance:.1f}")
        self.height_label.setText(f"{self._camera.height:.1f}")
        self.fov_label.setText(f"{self._camera.fov:.0f}°")

    # =====================================================
    # Signal Handlers
    # =====================================================

    def _on_camera_changed(self, *_args) -> None:
        self._camera = self._camera.with_changes(
            distance=self.distance_slider.value() / SLIDER_SCALE,
            height=self.height_slider.value() / SLIDER_SCALE,
            fov=float(self.fov_slider.value()),
            orbit=self.orbit_check.isChecked(),
        )
        self._refresh_labels()
        logger.debug("Camera controls changed: %s", self._camera)
        self.cameraConfigChanged.emit(self._camera)

    def _on_effects_changed(self, *_args) -> None:
        self._effects = self._effects.with_changes(
            **{name: box.isChecked() for name, box in self._effect_boxes.items()})
        logger.debug("Effect toggles changed: %s", self._effects)
        self.effectConfigChanged.emit(self._effects)

    def _on_performance_changed(self, *_args) -> None:
        self._performance = PerformanceConfig(
            resolution_scale=float(self.resolution_combo.currentData()),
            quality=self.quality_combo.currentData(),
        )
        logger.debug("Performance settings changed: %s", self._performance)
        self.performanceConfigChanged.emit(self._performance)
