"""Application entry point and setup for the Keystride typing trainer."""

import logging
import os
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from keystride.core.layouts import DEFAULT_LAYOUT_KEY, LayoutRepository
from keystride.core.progress import ProgressStore
from keystride.core.session import TypingSession
from keystride.core.words import WordGenerator
from keystride.ui.main_window import MainWindow
from keystride.ui.ticker import QtTickScheduler


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    level_name = os.environ.get("KEYSTRIDE_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Initialize the application, load resources, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Keystride")
    app.setApplicationDisplayName("Keystride")

    layouts = LayoutRepository()
    layout_key = os.environ.get("KEYSTRIDE_LAYOUT", DEFAULT_LAYOUT_KEY)
    try:
        layout = layouts.get(layout_key)
    except KeyError:
        logging.warning("Unknown layout %r, falling back to %s", layout_key, layouts.default().key)
        layout = layouts.default()
    logging.info("Using layout: %s", layout.name)

    progress_store = ProgressStore()
    session = TypingSession(layout, WordGenerator(), scheduler=QtTickScheduler(app))

    window = MainWindow(session=session, progress_store=progress_store)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(int(geometry.width() * 0.7), int(geometry.height() * 0.7))
    window.show()

    sys.exit(app.exec())
