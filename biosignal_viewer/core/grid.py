"""
Time axis grid spacing and cursor label formatting.

The grid follows classic ECG paper: 40 ms between the smallest marks, 200 ms
between the medium marks and 1 s between the large marks. When zoomed out it
switches to 10 s, minute, 5 minute and hour marks.
"""
from __future__ import annotations

import math
from dataclasses import dataclass


# (minimum base step size, step sizes), coarsest first
ECG_STEP_TABLE = [
    (60.0, (60.0, 300.0, 3600.0)),
    (10.0, (10.0, 60.0, 300.0)),
    (1.0, (1.0, 10.0, 60.0)),
    (0.2, (0.2, 1.0, 10.0)),
]

ECG_FINE_STEPS = (0.04, 0.2, 1.0)

# Smallest distance between two grid lines on screen
MIN_GRID_SPACING_PX = 6.0


@dataclass(frozen=True)
class GridMark:
    """A tick position on the time axis."""
    value: float
    step_size: float


def ecg_step_sizes(base_step_size: float) -> tuple[float, float, float]:
    """Select the three step sizes for a base step size."""
    for threshold, steps in ECG_STEP_TABLE:
        if base_step_size >= threshold:
            return steps
    return ECG_FINE_STEPS


def fill_marks_between(out: list[GridMark], step_size: float, bounds: tuple[float, float]) -> None:
    """Fill in all values in [min, max) which are a multiple of ``step_size``."""
    min_val, max_val = bounds
    if not max_val > min_val:
        raise ValueError(f"Grid bounds must satisfy max > min, got {bounds}")

    first = math.ceil(min_val / step_size)
    last = math.ceil(max_val / step_size)
    out.extend(GridMark(value=i * step_size, step_size=step_size) for i in range(first, last))


def grid_marks(base_step_size: float, bounds: tuple[float, float]) -> list[GridMark]:
    """
    Generate grid marks for a time axis.

    Marks of all three step sizes are returned together; a value that is a
    multiple of several step sizes appears once per step size.

    Args:
        base_step_size: Smallest sensible step in data units for the current zoom
        bounds: (min, max) of the visible range, max must exceed min

    Returns:
        List of GridMark, finest step size first

    Raises:
        ValueError: max is not greater than min
    """
    marks: list[GridMark] = []
    for step_size in ecg_step_sizes(base_step_size):
        fill_marks_between(marks, step_size, bounds)
    return marks


def tick_levels(
    min_val: float,
    max_val: float,
    size_px: float,
    min_spacing_px: float = MIN_GRID_SPACING_PX
) -> list[tuple[float, list[float]]]:
    """
    Group grid marks by step size for a view of ``size_px`` pixels.

    Step sizes that would put more than one mark per pixel on the axis are
    left out, so a view spanning years never builds millions of marks.

    Returns:
        List of (step_size, values) tuples, coarsest step first, or an empty
        list for a degenerate view
    """
    if not (max_val > min_val and size_px > 0):
        return []
    if not (math.isfinite(min_val) and math.isfinite(max_val)):
        return []

    span = max_val - min_val
    base_step_size = span / size_px * min_spacing_px

    levels = []
    for step_size in sorted(ecg_step_sizes(base_step_size), reverse=True):
        if span / step_size > size_px:
            continue
        marks: list[GridMark] = []
        fill_marks_between(marks, step_size, (min_val, max_val))
        if marks:
            levels.append((step_size, [mark.value for mark in marks]))

    return levels


def format_elapsed(seconds: float) -> str:
    """Format seconds as HH:MM:SS.mmm."""
    if not math.isfinite(seconds):
        return "--:--:--.---"
    sign = "-" if seconds < 0 else ""
    total_ms = int(abs(seconds) * 1000)
    total_s, millis = divmod(total_ms, 1000)
    minutes, secs = divmod(total_s, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def hover_label(name: str, x: float, y: float, unit: str) -> str:
    """Text shown next to the cursor for a channel; empty without a name."""
    if not name:
        return ""
    return f"{name}\n({x:.2f}:{y:.2f}) {unit}\n{format_elapsed(x)}"
