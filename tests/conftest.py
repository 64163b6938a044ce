import os
from pathlib import Path

# Qt must use the offscreen platform before any QApplication is created.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QSettings

from bhview.app.app_settings_manager import ORG_DOMAIN, APP_NAME
from bhview.core.observer_config import CameraConfig, InteractionConfig
from bhview.core.orbit_integrator import OrbitIntegrator


@pytest.fixture
def tmp_settings(tmp_path: Path):
    """Point QSettings at an INI file in a temporary folder so tests do not leak."""
    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path))
    s = QSettings(ORG_DOMAIN, APP_NAME)
    s.clear()
    yield s
    s.clear()


@pytest.fixture
def integrator():
    """Observer at distance 10, angle 0, orbiting."""
    return OrbitIntegrator(camera_config=CameraConfig(distance=10.0))


@pytest.fixture
def interaction_config():
    return InteractionConfig()
