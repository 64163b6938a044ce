# NOTE:
# Startup diagnostics (logging / Qt message handler) must be set up
# before the QApplication instance is created.

from bhview.app.logging_setup import setup_startup_logging, install_qt_message_handler

setup_startup_logging(app_name="bhview")
install_qt_message_handler()

from bhview.main import main  # noqa: E402

main()
