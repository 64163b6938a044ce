import logging
import sys

from PySide6 import QtWidgets

from bhview.ui.mainwindow import MainWindow
from bhview.app.app_settings_manager import AppSettingsManager
from bhview.app.logging_setup import apply_logging_policy, LogSystem
from bhview.ui.error_notifier import ErrorNotifier

logger = logging.getLogger(__name__)


def main():
    logs = LogSystem("bhview")

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(sys.argv)

    logger.info("App start")
    settings_mgr = AppSettingsManager()
    apply_logging_policy(logs, settings_mgr)
    ErrorNotifier.configure(settings_mgr)
    for warning in settings_mgr.warnings:
        logger.warning("Settings: %s", warning)

    main_window = MainWindow(settings_mgr)

    # Stop the log listener when Qt quits.
    app.aboutToQuit.connect(logs.stop)
    try:
        rc = app.exec()
        logger.info("App exit (rc=%s)", rc)
        sys.exit(rc)
    finally:
        main_window.stop()
        logs.stop()


if __name__ == "__main__":
    main()
