"""
Widget components for the Biosignal Viewer application.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QColorDialog,
    QDoubleSpinBox,
    QHeaderView,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..core import Channel, ChannelCollection, Color


class ChannelListWidget(QWidget):
    """Table of loaded channels with their presentation settings.

    Scaling factor and color are the only channel fields that can be changed
    after loading.
    """

    presentation_changed = Signal()

    COLUMNS = ["Name", "Unit", "Kind", "Samples", "Scale", "Color"]

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)

        self._channels: list[Channel] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.table = QTableWidget(0, len(self.COLUMNS))
        self.table.setHorizontalHeaderLabels(self.COLUMNS)
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        for col in range(1, len(self.COLUMNS)):
            self.table.horizontalHeader().setSectionResizeMode(
                col, QHeaderView.ResizeMode.ResizeToContents
            )

        layout.addWidget(self.table)

    def set_channels(self, collection: ChannelCollection) -> None:
        """Show the channels of a collection."""
        self._channels = list(collection)
        self.table.setRowCount(0)

        for row, channel in enumerate(self._channels):
            self.table.insertRow(row)
            self.table.setItem(row, 0, QTableWidgetItem(channel.name))
            self.table.setItem(row, 1, QTableWidgetItem(channel.unit))
            self.table.setItem(row, 2, QTableWidgetItem(channel.kind))
            self.table.setItem(row, 3, QTableWidgetItem(str(len(channel))))

            scale_spin = QDoubleSpinBox()
            scale_spin.setDecimals(4)
            scale_spin.setRange(-1e6, 1e6)
            scale_spin.setValue(channel.scaling_factor)
            scale_spin.valueChanged.connect(
                lambda value, ch=channel: self._on_scale_changed(ch, value)
            )
            self.table.setCellWidget(row, 4, scale_spin)

            color_btn = QPushButton()
            self._style_color_button(color_btn, channel.color)
            color_btn.clicked.connect(
                lambda checked=False, ch=channel, btn=color_btn: self._pick_color(ch, btn)
            )
            self.table.setCellWidget(row, 5, color_btn)

    def _on_scale_changed(self, channel: Channel, value: float):
        """Apply a new scaling factor."""
        channel.scaling_factor = value
        self.presentation_changed.emit()

    def _pick_color(self, channel: Channel, button: QPushButton):
        """Let the user choose a channel color."""
        initial = QColor(*channel.color.to_tuple()) if channel.color else QColor("white")
        color = QColorDialog.getColor(
            initial, self, f"Color of {channel.name}",
            QColorDialog.ColorDialogOption.ShowAlphaChannel
        )
        if not color.isValid():
            return

        channel.color = Color(color.red(), color.green(), color.blue(), color.alpha())
        self._style_color_button(button, channel.color)
        self.presentation_changed.emit()

    def _style_color_button(self, button: QPushButton, color: Optional[Color]):
        if color is None:
            button.setText("auto")
            button.setStyleSheet("")
        else:
            button.setText("")
            r, g, b, a = color.to_tuple()
            button.setStyleSheet(f"background-color: rgba({r}, {g}, {b}, {a});")

    def clear(self) -> None:
        """Remove all rows."""
        self._channels.clear()
        self.table.setRowCount(0)
