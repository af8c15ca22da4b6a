"""
Core module for Biosignal Viewer application.
Contains the channel model, format detection and parsers, background
ingestion, grid spacing and settings.
"""

from .models import (
    DEFAULT_UNIT,
    Channel,
    ChannelCollection,
    Color,
    DrawableChannel,
    FileFormat,
    IngestResult,
    PlotStyle,
    SampleIndexedChannel,
    TimeIndexedChannel,
    points_in_window,
)
from .exceptions import (
    ContentError,
    DataConversionError,
    ParserError,
)
from .io_handler import (
    detect_format,
    parse_chest_strap,
    parse_content,
    parse_smartwatch_export,
    read_file,
)
from .ingest import IngestWorker
from .grid import (
    GridMark,
    format_elapsed,
    grid_marks,
    hover_label,
    tick_levels,
)
from .sample_data import (
    demo_channels,
    dot_every_n,
    sin_wave,
    square_wave,
)
from .config import (
    ViewerSettings,
    configure_logging,
    load_settings,
    save_settings,
)

__all__ = [
    # Models
    "DEFAULT_UNIT",
    "Channel",
    "ChannelCollection",
    "Color",
    "DrawableChannel",
    "FileFormat",
    "IngestResult",
    "PlotStyle",
    "SampleIndexedChannel",
    "TimeIndexedChannel",
    "points_in_window",
    # Errors
    "ContentError",
    "DataConversionError",
    "ParserError",
    # IO
    "detect_format",
    "parse_chest_strap",
    "parse_content",
    "parse_smartwatch_export",
    "read_file",
    "IngestWorker",
    # Grid
    "GridMark",
    "format_elapsed",
    "grid_marks",
    "hover_label",
    "tick_levels",
    # Sample data
    "demo_channels",
    "dot_every_n",
    "sin_wave",
    "square_wave",
    # Settings
    "ViewerSettings",
    "configure_logging",
    "load_settings",
    "save_settings",
]
