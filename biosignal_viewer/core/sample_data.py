"""
Synthetic waveforms for trying out the viewer without recordings.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from .models import Color, PlotStyle, SampleIndexedChannel


def square_wave(
    switch_every_n_samples: int,
    samples_per_second: float,
    n_samples: int,
    color: Optional[Color] = None
) -> SampleIndexedChannel:
    """
    Generate a 0/1 square wave.

    The level toggles at every multiple of ``switch_every_n_samples``,
    including index 0, so the wave starts low.
    """
    if switch_every_n_samples <= 0:
        raise ValueError("switch_every_n_samples must be positive")

    toggles = np.arange(n_samples) // switch_every_n_samples + 1
    data = (toggles % 2 == 0).astype(float)

    return SampleIndexedChannel(
        name=f"square wave, switch every {switch_every_n_samples} samples",
        data=data,
        samples_per_second=samples_per_second,
        scaling_factor=1.0,
        plot_style=PlotStyle.LINE,
        color=color,
    )


def sin_wave(
    samples_per_second: float,
    n_samples: int,
    color: Optional[Color] = None
) -> SampleIndexedChannel:
    """Generate sin(0.01 * i) for each sample index i."""
    data = np.sin(np.arange(n_samples) * 0.01)

    return SampleIndexedChannel(
        name="sin wave",
        data=data,
        samples_per_second=samples_per_second,
        scaling_factor=1.0,
        plot_style=PlotStyle.LINE,
        color=color,
    )


def dot_every_n(
    dot_every_n_samples: int,
    samples_per_second: float,
    n_samples: int,
    color: Optional[Color] = None
) -> SampleIndexedChannel:
    """
    Generate an event channel with a marker every ``dot_every_n_samples``.

    Holds ``i % n`` for i in 0..n_samples inclusive; the zero samples are the
    events drawn in POINTS style.
    """
    if dot_every_n_samples <= 0:
        raise ValueError("dot_every_n_samples must be positive")

    data = (np.arange(n_samples + 1) % dot_every_n_samples).astype(float)

    return SampleIndexedChannel(
        name=f"dot every {dot_every_n_samples} samples",
        data=data,
        samples_per_second=samples_per_second,
        scaling_factor=1.0,
        plot_style=PlotStyle.POINTS,
        color=color,
    )


def demo_channels() -> list[SampleIndexedChannel]:
    """Square and sine waves plus an event channel, all at 1 kHz."""
    return [
        square_wave(1000, 1000.0, 100_000),
        sin_wave(1000.0, 100_000),
        dot_every_n(1000, 1000.0, 100_000),
    ]
