"""
App module for Biosignal Viewer application.
Contains Qt UI components and main window.
"""

from .main_window import MainWindow
from .widgets import ChannelListWidget

__all__ = [
    "MainWindow",
    "ChannelListWidget",
]
