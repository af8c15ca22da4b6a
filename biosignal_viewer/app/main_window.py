"""
Main Window for the Biosignal Viewer application.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Slot
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QDockWidget,
    QFileDialog,
    QMainWindow,
    QMessageBox,
)

from ..core import (
    ChannelCollection,
    IngestWorker,
    ViewerSettings,
    demo_channels,
)
from ..plot import ChannelPlotWidget
from .widgets import ChannelListWidget

logger = logging.getLogger(__name__)


FILE_FILTER = "Recordings (*.txt *.csv);;All Files (*)"


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, settings: Optional[ViewerSettings] = None):
        super().__init__()
        self.settings = settings or ViewerSettings()

        self.setWindowTitle("Biosignal Viewer")
        self.setMinimumSize(800, 500)
        self.resize(self.settings.window_width, self.settings.window_height)

        # Core data, only mutated on this thread
        self.collection = ChannelCollection()
        self.worker = IngestWorker()

        self._setup_ui()
        self._setup_menus()
        self._setup_toolbar()

        # Merge finished ingestion results once per frame
        self._poll_timer = QTimer(self)
        self._poll_timer.timeout.connect(self.on_poll_ingest)
        self._poll_timer.start(self.settings.poll_interval_ms)

        if self.settings.show_demo_channels:
            self.collection.extend(demo_channels())
            self._refresh_channels(reset_view=True)

        self.statusBar().showMessage("Ready")

    def _setup_ui(self):
        """Set up the main UI layout."""
        self.plot_widget = ChannelPlotWidget(self.settings)
        self.setCentralWidget(self.plot_widget)

        self.channel_list = ChannelListWidget()
        self.channel_list.presentation_changed.connect(self.on_presentation_changed)
        right_dock = QDockWidget("Channels", self)
        right_dock.setWidget(self.channel_list)
        right_dock.setFeatures(
            QDockWidget.DockWidgetFeature.DockWidgetMovable |
            QDockWidget.DockWidgetFeature.DockWidgetFloatable
        )
        right_dock.setMinimumWidth(300)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, right_dock)

    def _setup_menus(self):
        """Set up the menu bar."""
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")

        self.add_files_action = QAction("Add Data From File...", self)
        self.add_files_action.setShortcut(QKeySequence.StandardKey.Open)
        self.add_files_action.triggered.connect(self.on_add_files)
        file_menu.addAction(self.add_files_action)

        self.clear_action = QAction("Clear Channels", self)
        self.clear_action.triggered.connect(self.on_clear_channels)
        file_menu.addAction(self.clear_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        view_menu = menubar.addMenu("&View")

        self.reset_view_action = QAction("Reset View", self)
        self.reset_view_action.setShortcut(QKeySequence("Ctrl+0"))
        self.reset_view_action.triggered.connect(self.plot_widget.reset_view)
        view_menu.addAction(self.reset_view_action)

        demo_action = QAction("Add Demo Waveforms", self)
        demo_action.triggered.connect(self.on_add_demo)
        view_menu.addAction(demo_action)

        help_menu = menubar.addMenu("&Help")

        about_action = QAction("About", self)
        about_action.triggered.connect(self.on_about)
        help_menu.addAction(about_action)

    def _setup_toolbar(self):
        """Set up the toolbar."""
        toolbar = self.addToolBar("Main")
        toolbar.setMovable(False)
        toolbar.addAction(self.add_files_action)
        toolbar.addAction(self.clear_action)
        toolbar.addSeparator()
        toolbar.addAction(self.reset_view_action)

    def open_files(self, files: list[str | Path]) -> None:
        """Queue files for background parsing."""
        for filepath in files:
            self.worker.submit(filepath)
        if files:
            self.statusBar().showMessage(f"Loading {len(files)} file(s)...")

    def _refresh_channels(self, reset_view: bool = False):
        self.plot_widget.set_channels(self.collection)
        self.channel_list.set_channels(self.collection)
        self.plot_widget.set_title(f"Channels ({len(self.collection)})")
        if reset_view:
            self.plot_widget.reset_view()

    @Slot()
    def on_add_files(self):
        """Pick recordings and parse them in the background."""
        files, _ = QFileDialog.getOpenFileNames(
            self,
            "Add Data From File",
            "",
            FILE_FILTER
        )
        self.open_files(files)

    @Slot()
    def on_poll_ingest(self):
        """Merge results of finished background parses."""
        results = self.worker.poll()
        if not results:
            return

        was_empty = len(self.collection) == 0
        messages = []
        for result in results:
            added = self.collection.merge(result)
            if result.error:
                messages.append(f"Failed to load {result.source}: {result.error}")
            elif added == 0:
                messages.append(f"No channels in {result.source} (unrecognized format)")
            else:
                messages.append(f"Loaded {added} channel(s) from {result.source}")

        logger.debug(f"Merged {len(results)} ingestion result(s), {len(self.collection)} channel(s) loaded")
        self._refresh_channels(reset_view=was_empty)
        self.statusBar().showMessage("; ".join(messages))

    @Slot()
    def on_clear_channels(self):
        """Remove all channels."""
        self.collection.clear()
        self.plot_widget.clear_plot()
        self.channel_list.clear()
        self.plot_widget.set_title("Channels")
        self.statusBar().showMessage("All channels cleared")

    @Slot()
    def on_add_demo(self):
        """Add the synthetic demo waveforms."""
        was_empty = len(self.collection) == 0
        self.collection.extend(demo_channels())
        self._refresh_channels(reset_view=was_empty)

    @Slot()
    def on_presentation_changed(self):
        """Redraw after a scaling factor or color change."""
        self.plot_widget.set_channels(self.collection)

    @Slot()
    def on_about(self):
        """Show about dialog."""
        QMessageBox.about(
            self,
            "About Biosignal Viewer",
            "Biosignal Viewer\n\n"
            "Viewer for wearable biosignal exports.\n\n"
            "Supported files:\n"
            "- Chest-strap ECG, accelerometer, heart rate and RR interval exports\n"
            "- Smartwatch ECG sample exports\n\n"
            "Use Reset View (Ctrl+0) to show every channel.\n"
            "Drag with the right mouse button to zoom."
        )

    def closeEvent(self, event):
        """Handle window close."""
        self._poll_timer.stop()
        event.accept()
