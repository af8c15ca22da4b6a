"""
Core data models for the Biosignal Viewer application.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional, Union

import numpy as np


# Unit used when a format does not declare one
DEFAULT_UNIT = "mV"


class PlotStyle(Enum):
    """How a channel is drawn."""
    LINE = auto()    # Continuous trace
    POINTS = auto()  # Event markers at samples equal to 0.0


class FileFormat(Enum):
    """Export dialects recognized by the format detector."""
    CHEST_STRAP_ECG = auto()
    CHEST_STRAP_ACC = auto()
    CHEST_STRAP_HR = auto()
    CHEST_STRAP_RR = auto()
    SMARTWATCH_SAMPLE_EXPORT = auto()
    UNRECOGNIZED = auto()

    @property
    def is_chest_strap(self) -> bool:
        """Check if this is one of the semicolon-delimited chest-strap dialects."""
        return self in (
            FileFormat.CHEST_STRAP_ECG,
            FileFormat.CHEST_STRAP_ACC,
            FileFormat.CHEST_STRAP_HR,
            FileFormat.CHEST_STRAP_RR,
        )


@dataclass
class Color:
    """RGBA color with 8-bit components."""
    r: int
    g: int
    b: int
    a: int = 255

    def to_tuple(self) -> tuple[int, int, int, int]:
        """Return the color as an (r, g, b, a) tuple."""
        return (self.r, self.g, self.b, self.a)

    def to_hex(self) -> str:
        """Format as #rrggbbaa."""
        return "#{:02x}{:02x}{:02x}{:02x}".format(*self.to_tuple())

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse #rrggbb or #rrggbbaa."""
        digits = text.lstrip("#")
        if len(digits) not in (6, 8):
            raise ValueError(f"Invalid color: {text!r}")
        components = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        return cls(*components)


def _read_only(values, dtype) -> np.ndarray:
    array = np.array(values, dtype=dtype)
    array.flags.writeable = False
    return array


def _as_points(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    return np.column_stack((np.asarray(x, dtype=float), np.asarray(y, dtype=float)))


def _time_to_index(time: float, samples_per_second: float, length: int, rounding) -> int:
    """Map a time in seconds onto a sample index clamped to [0, length]."""
    position = time * samples_per_second
    # also catches NaN
    if not position > 0:
        return 0
    if position >= length:
        return length
    return min(int(rounding(position)), length)


class DrawableChannel(ABC):
    """
    Common interface of the two channel representations.

    Implementors carry the presentation fields ``name``, ``unit``,
    ``scaling_factor``, ``plot_style`` and ``color``.
    """

    name: str
    unit: str
    scaling_factor: float
    plot_style: PlotStyle
    color: Optional[Color]

    @property
    @abstractmethod
    def kind(self) -> str:
        """Short label of the channel representation."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    @abstractmethod
    def line_points(self, start_time: float, end_time: float) -> np.ndarray:
        """Points of the continuous trace as an (N, 2) array of (seconds, value)."""

    @abstractmethod
    def event_points(self) -> np.ndarray:
        """Event markers for samples whose value is exactly 0.0."""

    @abstractmethod
    def time_range(self) -> tuple[float, float]:
        """Get the (min, max) x coordinate in seconds."""

    def points_in_window(
        self,
        start_time: float = -math.inf,
        end_time: float = math.inf
    ) -> np.ndarray:
        """Get renderer-ready points for the visible time range."""
        if self.plot_style == PlotStyle.POINTS:
            return self.event_points()
        return self.line_points(start_time, end_time)


@dataclass(eq=False)
class SampleIndexedChannel(DrawableChannel):
    """A channel sampled at a fixed rate; the sample index implies the time."""
    name: str
    data: np.ndarray
    samples_per_second: float
    scaling_factor: float = 1.0
    plot_style: PlotStyle = PlotStyle.LINE
    unit: str = DEFAULT_UNIT
    color: Optional[Color] = None

    def __post_init__(self):
        sps = float(self.samples_per_second)
        if not (sps > 0 and math.isfinite(sps)):
            raise ValueError(f"samples_per_second must be positive, got {self.samples_per_second}")
        self.samples_per_second = sps
        self.data = _read_only(self.data, float)

    @property
    def kind(self) -> str:
        return "sample-indexed"

    def __len__(self) -> int:
        return len(self.data)

    def sample_window(self, start_time: float, end_time: float) -> tuple[int, int]:
        """
        Convert a time window into a sample index window.

        Both bounds are clamped to [0, len] and the end never precedes the
        start, so a reversed window is empty rather than inverted.
        """
        length = len(self.data)
        start = _time_to_index(start_time, self.samples_per_second, length, math.floor)
        end = _time_to_index(end_time, self.samples_per_second, length, math.ceil)
        return start, max(start, end)

    def line_points(self, start_time: float, end_time: float) -> np.ndarray:
        start, end = self.sample_window(start_time, end_time)
        x = np.arange(start, end) / self.samples_per_second
        y = self.data[start:end] * self.scaling_factor
        return _as_points(x, y)

    def event_points(self) -> np.ndarray:
        indices = np.flatnonzero(self.data == 0.0)
        x = indices / self.samples_per_second
        y = np.full(len(indices), 1.0 * self.scaling_factor)
        return _as_points(x, y)

    def time_range(self) -> tuple[float, float]:
        if len(self.data) == 0:
            return (0.0, 0.0)
        return (0.0, len(self.data) / self.samples_per_second)


@dataclass(eq=False)
class TimeIndexedChannel(DrawableChannel):
    """A channel whose samples each carry an explicit timestamp."""
    name: str
    timestamps: np.ndarray
    values: np.ndarray
    scaling_factor: float = 1.0
    plot_style: PlotStyle = PlotStyle.LINE
    unit: str = DEFAULT_UNIT
    color: Optional[Color] = None

    def __post_init__(self):
        self.timestamps = _read_only(self.timestamps, "datetime64[ms]")
        self.values = _read_only(self.values, float)
        if len(self.timestamps) != len(self.values):
            raise ValueError(
                f"Got {len(self.timestamps)} timestamps for {len(self.values)} values"
            )

    @property
    def kind(self) -> str:
        return "time-indexed"

    def __len__(self) -> int:
        return len(self.values)

    def epoch_milliseconds(self) -> np.ndarray:
        """Get the timestamps as integer milliseconds since the epoch."""
        return self.timestamps.astype(np.int64)

    def line_points(self, start_time: float, end_time: float) -> np.ndarray:
        # The window is not applied; the full series is returned.
        x = self.epoch_milliseconds() / 1e3
        y = self.values * self.scaling_factor
        return _as_points(x, y)

    def event_points(self) -> np.ndarray:
        mask = self.values == 0.0
        # Divides by 1e6 where the line path divides by 1e3.
        x = self.epoch_milliseconds()[mask] / 1e6
        y = self.values[mask] * self.scaling_factor
        return _as_points(x, y)

    def time_range(self) -> tuple[float, float]:
        if len(self.values) == 0:
            return (0.0, 0.0)
        seconds = self.epoch_milliseconds() / 1e3
        return (float(seconds.min()), float(seconds.max()))


Channel = Union[SampleIndexedChannel, TimeIndexedChannel]


def points_in_window(channel: Channel, start_time: float, end_time: float) -> np.ndarray:
    """
    Get the points of a channel to draw for a visible time range.

    Args:
        channel: Channel to extract from
        start_time: Left edge of the visible range in seconds
        end_time: Right edge of the visible range in seconds

    Returns:
        Array of shape (N, 2) holding (x seconds, scaled value) rows
    """
    return channel.points_in_window(start_time, end_time)


@dataclass
class IngestResult:
    """Channels produced from one input file."""
    source: str = ""
    file_format: FileFormat = FileFormat.UNRECOGNIZED
    sample_channels: list[SampleIndexedChannel] = field(default_factory=list)
    time_channels: list[TimeIndexedChannel] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def channels(self) -> list[Channel]:
        """All channels, sample-indexed first."""
        return [*self.sample_channels, *self.time_channels]

    @property
    def is_empty(self) -> bool:
        """Check if the file produced no channels."""
        return not self.sample_channels and not self.time_channels


@dataclass
class ChannelCollection:
    """Ordered, heterogeneous set of channels shown in one session."""
    channels: list[Channel] = field(default_factory=list)

    def append(self, channel: Channel) -> None:
        """Add a channel at the end of the legend order."""
        self.channels.append(channel)

    def extend(self, channels: list[Channel]) -> None:
        """Add several channels in order."""
        self.channels.extend(channels)

    def merge(self, result: IngestResult) -> int:
        """Append the channels of an ingestion result and return how many were added."""
        added = result.channels
        self.channels.extend(added)
        return len(added)

    def clear(self) -> None:
        """Remove all channels."""
        self.channels.clear()

    def __iter__(self) -> Iterator[Channel]:
        return iter(self.channels)

    def __len__(self) -> int:
        return len(self.channels)

    def __getitem__(self, index: int) -> Channel:
        return self.channels[index]

    def time_range(self) -> tuple[float, float]:
        """Get overall time range of all non-empty channels."""
        min_t, max_t = float('inf'), float('-inf')
        for channel in self.channels:
            if len(channel) == 0:
                continue
            t_min, t_max = channel.time_range()
            min_t = min(min_t, t_min)
            max_t = max(max_t, t_max)
        if min_t == float('inf'):
            return (0.0, 0.0)
        return (min_t, max_t)

    def units(self) -> list[str]:
        """Get the distinct channel units in legend order."""
        result: list[str] = []
        for channel in self.channels:
            if channel.unit not in result:
                result.append(channel.unit)
        return result
