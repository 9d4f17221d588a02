#!/usr/bin/env python3
"""Simple demo script showcasing the FloatDesk overlay over a host window."""

import argparse
import sys

from PySide6.QtWidgets import QApplication, QLabel, QMainWindow, QTextEdit, QVBoxLayout, QWidget

# Add the src directory to the path so we can import FloatDesk
sys.path.insert(0, 'src')

from FloatDesk.core.key_value_store import SettingsKeyValueStore
from FloatDesk.core.overlay_manager import OverlayManager
from FloatDesk.overlay_surface import OverlaySurface
from FloatDesk.utils.log import setup_logging
from FloatDesk.widgets import register_builtin_widgets

SAMPLE_PAGE = (
    "FloatDesk places floating windows over the page you are reading. "
    "Drag a window by its header and resize it from the bottom-right corner. "
    "Free users may open three windows and one split pane. "
    "Premium users have no limits and get every widget."
)


def create_host_window():
    """Create a stand-in for the page the overlay sits on."""
    window = QMainWindow()
    window.setWindowTitle("FloatDesk Demo - press Alt+T to toggle the overlay")
    window.resize(1200, 800)

    central = QWidget()
    layout = QVBoxLayout(central)
    layout.addWidget(QLabel("Host page"))
    page = QTextEdit()
    page.setPlainText(SAMPLE_PAGE)
    layout.addWidget(page)
    window.setCentralWidget(central)
    return window, page


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--site", default="demo", help="layout namespace to load and save")
    parser.add_argument("--premium", action="store_true", help="unlock the premium tier with the demo key")
    parser.add_argument("--debug", action="store_true", help="log a registry dump on every save")
    args = parser.parse_args()

    app = QApplication(sys.argv)
    setup_logging(args.debug)

    register_builtin_widgets()
    store = SettingsKeyValueStore("FloatDesk", "FloatDeskDemo")
    manager = OverlayManager(store, site=args.site)
    manager.set_debug_mode(args.debug)

    host, page = create_host_window()
    surface = OverlaySurface(manager)
    surface.install_shortcuts(host)
    surface.set_page_text(page.toPlainText())
    page.textChanged.connect(lambda: surface.set_page_text(page.toPlainText()))

    def on_restored(windows):
        if args.premium:
            manager.license.verify_license_key("FLOATDESK-PREMIUM-DEMO")
        surface.setGeometry(host.geometry())
        manager.handle_command("auto-open-overlay")

    manager.start(on_restored)
    host.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
