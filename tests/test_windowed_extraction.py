"""
Tests for channel models and windowed point extraction.
"""
import math

import numpy as np
import pytest

from biosignal_viewer.core import (
    ChannelCollection,
    Color,
    IngestResult,
    PlotStyle,
    SampleIndexedChannel,
    TimeIndexedChannel,
    points_in_window,
)


def make_time_channel(seconds, values, **kwargs) -> TimeIndexedChannel:
    """Build a time-indexed channel from epoch seconds."""
    timestamps = (np.asarray(seconds, dtype=float) * 1000).astype("int64").astype("datetime64[ms]")
    return TimeIndexedChannel(name="t", timestamps=timestamps, values=values, **kwargs)


class TestSampleIndexedWindow:
    """Tests for windowed extraction on sample-indexed channels."""

    def setup_method(self):
        """Ten samples at 10 Hz covering one second."""
        self.channel = SampleIndexedChannel(
            name="ramp",
            data=np.arange(10, dtype=float),
            samples_per_second=10.0,
        )

    def test_unbounded_window_returns_all(self):
        """Test an infinite window returns every sample."""
        points = points_in_window(self.channel, -math.inf, math.inf)

        assert points.shape == (10, 2)
        np.testing.assert_array_almost_equal(points[:, 0], np.arange(10) / 10.0)
        np.testing.assert_array_almost_equal(points[:, 1], np.arange(10))

    def test_default_window_returns_all(self):
        """Test the method defaults to an unbounded window."""
        assert len(self.channel.points_in_window()) == 10

    def test_partial_window(self):
        """Test the start rounds down and the end rounds up."""
        points = points_in_window(self.channel, 0.25, 0.55)

        np.testing.assert_array_almost_equal(points[:, 0], [0.2, 0.3, 0.4, 0.5])
        np.testing.assert_array_almost_equal(points[:, 1], [2, 3, 4, 5])

    def test_reversed_window_is_empty(self):
        """Test start after end gives no points."""
        start, end = self.channel.sample_window(0.8, 0.2)

        assert start == end
        assert points_in_window(self.channel, 0.8, 0.2).shape == (0, 2)

    def test_bounds_are_clamped(self):
        """Test windows beyond the recording clamp instead of failing."""
        assert self.channel.sample_window(-5.0, 100.0) == (0, 10)
        assert self.channel.sample_window(2.0, 3.0) == (10, 10)
        assert self.channel.sample_window(-3.0, -1.0) == (0, 0)
        assert len(points_in_window(self.channel, -5.0, 100.0)) == 10

    def test_nan_bounds_are_empty(self):
        """Test NaN bounds never index out of range."""
        assert len(points_in_window(self.channel, math.nan, math.nan)) == 0

    def test_scaling_factor_applied(self):
        """Test values are multiplied by the scaling factor."""
        self.channel.scaling_factor = 2.5

        points = points_in_window(self.channel, 0.0, 0.25)

        np.testing.assert_array_almost_equal(points[:, 1], [0.0, 2.5, 5.0])

    def test_empty_channel(self):
        """Test an empty channel yields no points."""
        channel = SampleIndexedChannel(name="empty", data=[], samples_per_second=10.0)

        assert points_in_window(channel, -math.inf, math.inf).shape == (0, 2)
        assert channel.time_range() == (0.0, 0.0)

    def test_time_range(self):
        assert self.channel.time_range() == (0.0, 1.0)


class TestSampleIndexedChannel:
    """Tests for sample-indexed channel construction."""

    def test_data_is_read_only(self):
        """Test channel data cannot be changed after construction."""
        channel = SampleIndexedChannel(name="c", data=[1.0, 2.0], samples_per_second=1.0)

        with pytest.raises(ValueError):
            channel.data[0] = 5.0

    def test_source_array_not_shared(self):
        """Test later changes to the source array do not leak in."""
        source = np.array([1.0, 2.0])
        channel = SampleIndexedChannel(name="c", data=source, samples_per_second=1.0)

        source[0] = 9.0

        assert channel.data[0] == 1.0

    @pytest.mark.parametrize("rate", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_rate(self, rate):
        """Test non-positive or non-finite rates are rejected."""
        with pytest.raises(ValueError):
            SampleIndexedChannel(name="c", data=[1.0], samples_per_second=rate)


class TestEventPoints:
    """Tests for POINTS style extraction."""

    def test_sample_indexed_events(self):
        """Test only exact zeros become markers at unit height."""
        channel = SampleIndexedChannel(
            name="beats",
            data=[0.0, 1.0, 0.0, 2.0, 0.0001],
            samples_per_second=2.0,
            scaling_factor=3.0,
            plot_style=PlotStyle.POINTS,
        )

        points = points_in_window(channel, -math.inf, math.inf)

        np.testing.assert_array_almost_equal(points[:, 0], [0.0, 1.0])
        np.testing.assert_array_almost_equal(points[:, 1], [3.0, 3.0])

    def test_sample_indexed_events_ignore_window(self):
        """Test markers are not restricted to the visible range."""
        channel = SampleIndexedChannel(
            name="beats",
            data=[0.0, 1.0, 0.0, 1.0],
            samples_per_second=1.0,
            plot_style=PlotStyle.POINTS,
        )

        assert len(points_in_window(channel, 2.5, 3.5)) == 2

    def test_time_indexed_events(self):
        """Test time-indexed markers divide epoch milliseconds by 1e6."""
        channel = make_time_channel([1.0, 2.0, 3.0], [0.0, 5.0, 0.0], plot_style=PlotStyle.POINTS)

        points = points_in_window(channel, -math.inf, math.inf)

        np.testing.assert_array_almost_equal(points[:, 0], [0.001, 0.003])
        np.testing.assert_array_almost_equal(points[:, 1], [0.0, 0.0])


class TestTimeIndexedChannel:
    """Tests for time-indexed channels."""

    def test_line_points_in_seconds(self):
        """Test line points use epoch seconds and scaled values."""
        channel = make_time_channel([1.0, 2.5], [4.0, 6.0], scaling_factor=0.5)

        points = points_in_window(channel, -math.inf, math.inf)

        np.testing.assert_array_almost_equal(points[:, 0], [1.0, 2.5])
        np.testing.assert_array_almost_equal(points[:, 1], [2.0, 3.0])

    def test_window_not_applied(self):
        """Test the full series is returned regardless of the window."""
        channel = make_time_channel([1.0, 2.0, 3.0], [1.0, 2.0, 3.0])

        assert len(points_in_window(channel, 100.0, 200.0)) == 3

    def test_length_mismatch(self):
        """Test timestamps and values must have equal length."""
        with pytest.raises(ValueError):
            make_time_channel([1.0, 2.0], [1.0])

    def test_epoch_milliseconds(self):
        channel = make_time_channel([1.5], [0.0])

        assert channel.epoch_milliseconds()[0] == 1500

    def test_time_range(self):
        """Test the range spans the smallest and largest timestamps."""
        channel = make_time_channel([3.0, 1.0, 2.0], [0.0, 0.0, 0.0])

        assert channel.time_range() == (1.0, 3.0)


class TestChannelCollection:
    """Tests for ChannelCollection."""

    def setup_method(self):
        self.sample = SampleIndexedChannel(name="s", data=np.zeros(20), samples_per_second=10.0)
        self.timed = make_time_channel([5.0, 6.0], [1.0, 2.0], unit="bpm")

    def test_merge_keeps_order(self):
        """Test merged channels are appended, sample-indexed first."""
        collection = ChannelCollection()
        result = IngestResult(sample_channels=[self.sample], time_channels=[self.timed])

        added = collection.merge(result)

        assert added == 2
        assert list(collection) == [self.sample, self.timed]

    def test_merge_empty_result(self):
        collection = ChannelCollection()

        assert collection.merge(IngestResult(error="broken")) == 0
        assert len(collection) == 0

    def test_time_range(self):
        """Test the overall range covers every channel."""
        collection = ChannelCollection([self.sample, self.timed])

        assert collection.time_range() == (0.0, 6.0)

    def test_empty_time_range(self):
        assert ChannelCollection().time_range() == (0.0, 0.0)

    def test_units(self):
        """Test units are listed once in legend order."""
        other = SampleIndexedChannel(name="s2", data=[1.0], samples_per_second=1.0)
        collection = ChannelCollection([self.sample, self.timed, other])

        assert collection.units() == ["mV", "bpm"]

    def test_clear(self):
        collection = ChannelCollection([self.sample])

        collection.clear()

        assert len(collection) == 0

    def test_presentation_fields_are_settable(self):
        """Test color and scaling can change after creation."""
        collection = ChannelCollection([self.sample])

        collection[0].color = Color(255, 0, 0)
        collection[0].scaling_factor = 2.0

        assert collection[0].color.to_hex() == "#ff0000ff"
        assert collection[0].scaling_factor == 2.0


class TestColor:
    """Tests for Color."""

    def test_hex_round_trip(self):
        color = Color.from_hex("#12abef80")

        assert color.to_tuple() == (0x12, 0xab, 0xef, 0x80)
        assert color.to_hex() == "#12abef80"

    def test_hex_without_alpha(self):
        assert Color.from_hex("#000000").a == 255

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            Color.from_hex("#abc")
