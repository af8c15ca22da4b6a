"""
Channel plot widget with ECG time grid, crosshair and hover readout.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..core import (
    Channel,
    ChannelCollection,
    PlotStyle,
    ViewerSettings,
    hover_label,
    points_in_window,
    tick_levels,
)


# Color palette for channels without an explicit color
COLORS = [
    "#1f77b4",  # Blue
    "#ff7f0e",  # Orange
    "#2ca02c",  # Green
    "#d62728",  # Red
    "#9467bd",  # Purple
    "#8c564b",  # Brown
    "#e377c2",  # Pink
    "#7f7f7f",  # Gray
    "#bcbd22",  # Yellow-green
    "#17becf",  # Cyan
]

# Fraction of the data range added around it on reset
VIEW_MARGIN = 0.1


class EcgAxisItem(pg.AxisItem):
    """Time axis whose ticks follow the ECG paper grid."""

    def __init__(self, min_spacing_px: float = 6.0, **kwargs):
        super().__init__(orientation="bottom", **kwargs)
        self.min_spacing_px = min_spacing_px

    def tickValues(self, minVal, maxVal, size):
        return tick_levels(minVal, maxVal, size, self.min_spacing_px)

    def tickStrings(self, values, scale, spacing):
        return [f"{v * scale:g}" for v in values]


class CrosshairReadout(QFrame):
    """Widget displaying the value under the cursor."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setStyleSheet("""
            QFrame {
                background-color: rgba(40, 40, 40, 200);
                border: 1px solid #555;
                border-radius: 4px;
                padding: 4px;
            }
            QLabel {
                color: white;
                font-family: monospace;
                font-size: 11px;
            }
        """)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 4, 6, 4)

        self.label = QLabel("")
        self.label.setFont(QFont("monospace", 10))
        layout.addWidget(self.label)

        self.setVisible(False)

    def set_text(self, text: str):
        """Set the readout text; hide when empty."""
        self.label.setText(text)
        self.adjustSize()
        self.setVisible(bool(text))

    def clear(self):
        """Clear the readout."""
        self.set_text("")


class ChannelPlotWidget(QWidget):
    """
    Plot of every channel in a collection on a shared time axis.

    Points are re-extracted for the visible range whenever the X range
    changes, so drawing cost follows the window rather than the recording
    length.
    """

    crosshair_moved = Signal(float)  # x_value

    def __init__(
        self,
        settings: Optional[ViewerSettings] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)
        self.settings = settings or ViewerSettings()

        self._channels: list[Channel] = []
        self._items: list[pg.PlotDataItem] = []
        self._points: list[np.ndarray] = []

        self._setup_ui()
        self._setup_crosshair()

    def _setup_ui(self):
        """Set up the plot UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        toolbar = QHBoxLayout()
        toolbar.setContentsMargins(5, 2, 5, 2)

        self.title_label = QLabel("Channels")
        self.title_label.setStyleSheet("font-weight: bold;")
        toolbar.addWidget(self.title_label)

        toolbar.addStretch()

        reset_btn = QPushButton("Reset View")
        reset_btn.clicked.connect(self.reset_view)
        toolbar.addWidget(reset_btn)

        layout.addLayout(toolbar)

        pg.setConfigOptions(antialias=self.settings.antialias, useOpenGL=False)

        self.time_axis = EcgAxisItem(min_spacing_px=self.settings.min_grid_spacing_px)
        self.plot_widget = pg.PlotWidget(axisItems={"bottom": self.time_axis})
        self.plot_widget.setBackground(self.settings.background)
        self.plot_widget.showGrid(x=True, y=True, alpha=0.3)

        self.plot_item = self.plot_widget.getPlotItem()
        self.plot_item.setLabel("bottom", "Time [s]")
        self.plot_item.setLabel("left", "mV")
        self.plot_item.addLegend(offset=(10, -10))

        # X follows the user; Y follows the visible data
        self.plot_item.enableAutoRange(x=False, y=True)
        self.plot_item.setAutoVisible(y=True)
        self.plot_item.getViewBox().sigXRangeChanged.connect(self._on_x_range_changed)

        layout.addWidget(self.plot_widget)

        self.readout = CrosshairReadout(self.plot_widget)
        self.readout.move(10, 10)

    def _setup_crosshair(self):
        """Set up crosshair lines."""
        pen = pg.mkPen(color="#888", width=1, style=Qt.PenStyle.DashLine)

        self.vline = pg.InfiniteLine(angle=90, movable=False, pen=pen)
        self.hline = pg.InfiniteLine(angle=0, movable=False, pen=pen)

        self.plot_item.addItem(self.vline, ignoreBounds=True)
        self.plot_item.addItem(self.hline, ignoreBounds=True)

        self.plot_widget.scene().sigMouseMoved.connect(self._on_mouse_moved)

    def _on_mouse_moved(self, pos):
        """Handle mouse movement for crosshair."""
        if not self.plot_item.sceneBoundingRect().contains(pos):
            self.readout.clear()
            return

        mouse_point = self.plot_item.vb.mapSceneToView(pos)
        x = mouse_point.x()
        y = mouse_point.y()

        self.vline.setPos(x)
        self.hline.setPos(y)
        self.crosshair_moved.emit(x)

        self.readout.set_text(self._readout_text(x, y))

        widget_pos = self.plot_widget.mapFromScene(pos)
        x_pos = min(widget_pos.x() + 15, self.plot_widget.width() - self.readout.width() - 5)
        y_pos = min(widget_pos.y() + 10, self.plot_widget.height() - self.readout.height() - 5)
        self.readout.move(int(max(5, x_pos)), int(max(5, y_pos)))

    def _readout_text(self, x_val: float, y_val: float) -> str:
        """Label of the channel point closest to the cursor."""
        best = None
        best_distance = float("inf")

        for channel, points in zip(self._channels, self._points):
            if len(points) == 0:
                continue
            idx = int(np.argmin(np.abs(points[:, 0] - x_val)))
            px, py = points[idx]
            if np.isnan(py):
                continue
            distance = abs(py - y_val)
            if distance < best_distance:
                best_distance = distance
                best = (channel, px, py)

        if best is None:
            return ""
        channel, px, py = best
        return hover_label(channel.name, float(px), float(py), channel.unit)

    def _channel_color(self, index: int, channel: Channel):
        if channel.color is not None:
            return channel.color.to_tuple()
        return COLORS[index % len(COLORS)]

    def set_channels(self, collection: ChannelCollection) -> None:
        """Rebuild the plot items for the channels of a collection."""
        for item in self._items:
            self.plot_item.removeItem(item)
        self._items.clear()
        self._points.clear()
        self._channels = list(collection)

        for i, channel in enumerate(self._channels):
            color = self._channel_color(i, channel)
            if channel.plot_style == PlotStyle.POINTS:
                item = pg.PlotDataItem(
                    pen=None,
                    symbol="o",
                    symbolSize=2 * self.settings.marker_radius,
                    symbolBrush=color,
                    symbolPen=None,
                    name=channel.name,
                )
            else:
                item = pg.PlotDataItem(
                    pen=pg.mkPen(color=color, width=self.settings.line_width),
                    connect="finite",
                    name=channel.name,
                )
            self.plot_item.addItem(item)
            self._items.append(item)
            self._points.append(np.empty((0, 2)))

        units = collection.units()
        self.plot_item.setLabel("left", ", ".join(units) if units else "mV")
        self.update_points()

    def update_points(self) -> None:
        """Re-extract the points of every channel for the visible X range."""
        x_min, x_max = self.plot_item.viewRange()[0]

        for i, (channel, item) in enumerate(zip(self._channels, self._items)):
            points = points_in_window(channel, x_min, x_max)
            self._points[i] = points
            item.setData(points[:, 0], points[:, 1])

    def _on_x_range_changed(self, *args):
        self.update_points()

    def reset_view(self) -> None:
        """Show the full time range of all channels."""
        t_min, t_max = self._time_range()
        if t_max <= t_min:
            t_max = t_min + 1.0
        self.plot_item.setXRange(t_min, t_max, padding=VIEW_MARGIN)
        self.plot_item.enableAutoRange(y=True)

    def _time_range(self) -> tuple[float, float]:
        return ChannelCollection(channels=self._channels).time_range()

    def clear_plot(self):
        """Remove all channels from the plot."""
        self.set_channels(ChannelCollection())
        self.readout.clear()

    def set_title(self, title: str):
        """Set the plot title."""
        self.title_label.setText(title)
