import argparse
import logging
import os
import signal
import sys

try:
    import qdarktheme
except ImportError:
    qdarktheme = None
from PySide6.QtCore import QTimer  # SIGINT heartbeat
from PySide6.QtWidgets import QApplication

from .settings import load_last_dir, load_settings
from .view import MainWindow
from .viewmodel import FileBrowserViewModel

_LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def configure_logging(log_file: str | None = None):
    # Only call basicConfig if no handlers are configured (prevents duplicate handlers)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=getattr(logging, _LOG_LEVEL, logging.INFO), format="%(levelname)s:%(name)s:%(message)s")
    if log_file:
        try:
            fh = logging.FileHandler(log_file, mode="a")
            fh.setLevel(getattr(logging, _LOG_LEVEL, logging.INFO))
            fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))
            logging.getLogger().addHandler(fh)
            logging.info(f"Logging also written to file: {log_file}")
        except OSError as e:
            logging.warning(f"Could not open log file {log_file}: {e}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="DeskTidy - Qt desktop file manager")
    parser.add_argument("--log-file", "-l", help="Path to write log output (appends)", default=None)
    parser.add_argument("--directory", "-d", help="Folder to open instead of the last one", default=None)
    args, _ = parser.parse_known_args(argv)
    return args


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_file)
    logging.info("App main() starting...")
    try:
        app = QApplication(sys.argv)

        def _handle_signal(signum, frame):
            logging.info(f"Signal {signum} received, quitting application...")
            app.quit()

        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)

        # Heartbeat timer to allow Python signal handling while Qt blocks
        timer = QTimer()
        timer.setInterval(200)
        timer.timeout.connect(lambda: None)
        timer.start()

        if qdarktheme is not None:
            try:
                qdarktheme.setup_theme()
            except Exception:
                logging.exception("Failed to setup qdarktheme")
        else:
            logging.info("qdarktheme not available; skipping theme setup")

        settings = load_settings()
        directory = args.directory if args.directory and os.path.isdir(args.directory) else load_last_dir()
        logging.info(f"Opening directory: {directory}")
        viewmodel = FileBrowserViewModel(directory, settings=settings)
        view = MainWindow(viewmodel)

        # Keep strong references to prevent premature garbage collection
        app.view = view  # type: ignore
        app.viewmodel = viewmodel  # type: ignore

        app.aboutToQuit.connect(viewmodel.cleanup)
        view.show()
        QTimer.singleShot(0, viewmodel.load_items)
        exit_code = app.exec()
        logging.info("Qt event loop exited.")
        sys.exit(exit_code)
    except Exception:
        logging.exception("Fatal error in main()")
        raise


if __name__ == "__main__":
    main()
