"""
Plot module for Biosignal Viewer application.
Contains the channel plot widget with ECG grid and crosshair readout.
"""

from .plot_widget import ChannelPlotWidget, EcgAxisItem

__all__ = ["ChannelPlotWidget", "EcgAxisItem"]
