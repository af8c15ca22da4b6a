"""
Main entry point for the Biosignal Viewer application.
"""
import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt

from ..core import configure_logging, load_settings
from .main_window import MainWindow

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    """Parse viewer options; unknown arguments are left for Qt."""
    parser = argparse.ArgumentParser(description="Viewer for wearable biosignal exports")
    parser.add_argument(
        "files",
        nargs="*",
        help="Export files to load on startup"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to a JSON settings file"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level"
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Show synthetic demo waveforms"
    )
    return parser.parse_known_args(argv)


def main():
    """Run the Biosignal Viewer application."""
    args, qt_args = parse_args(sys.argv[1:])

    settings = load_settings(args.config)
    if args.log_level:
        settings.log_level = args.log_level.upper()
    if args.demo:
        settings.show_demo_channels = True

    configure_logging(settings.log_level)
    logger.info(f"Starting Biosignal Viewer, log level {settings.log_level}")

    # Enable high DPI scaling
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication([sys.argv[0], *qt_args])

    # Set application metadata
    app.setApplicationName("Biosignal Viewer")
    app.setOrganizationName("BiosignalViewer")
    app.setApplicationVersion("0.1.0")

    # Apply dark style
    app.setStyle("Fusion")

    # Create dark palette
    from PySide6.QtGui import QPalette, QColor

    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor(53, 53, 53))
    palette.setColor(QPalette.ColorRole.WindowText, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.Base, QColor(25, 25, 25))
    palette.setColor(QPalette.ColorRole.AlternateBase, QColor(53, 53, 53))
    palette.setColor(QPalette.ColorRole.ToolTipBase, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.ToolTipText, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.Text, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.Button, QColor(53, 53, 53))
    palette.setColor(QPalette.ColorRole.ButtonText, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.BrightText, Qt.GlobalColor.red)
    palette.setColor(QPalette.ColorRole.Link, QColor(42, 130, 218))
    palette.setColor(QPalette.ColorRole.Highlight, QColor(42, 130, 218))
    palette.setColor(QPalette.ColorRole.HighlightedText, Qt.GlobalColor.black)

    app.setPalette(palette)

    # Create and show main window
    window = MainWindow(settings)
    window.show()
    window.open_files(args.files)

    # Run event loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
