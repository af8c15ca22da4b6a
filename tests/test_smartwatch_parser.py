"""
Tests for the smartwatch ECG sample export parser.
"""
import math

import numpy as np
import pytest

from biosignal_viewer.core import (
    ContentError,
    FileFormat,
    PlotStyle,
    parse_content,
    parse_smartwatch_export,
)


def make_export(
    subject: str = "Jane Doe",
    birth_date: str = "1985-03-14",
    sample_rate: str = "512000 hertz",
    samples: tuple = ("0,125", "-0,05", "1.5"),
    newline: str = "\n"
) -> str:
    """Build a smartwatch export with the given metadata and samples."""
    lines = [
        f"Name,{subject}",
        f"Date of Birth,{birth_date}",
        "Average Heart Rate,72",
        "Classification,Sinus Rhythm",
        "Symptoms,",
        "Software Version,1.90",
        "Device,Watch",
        f"Sample Rate,{sample_rate}",
        "",
        "",
        "Lead,Lead I",
        "Unit,mV",
        *samples,
    ]
    return newline.join(lines) + newline


class TestSmartwatchExport:
    """Tests for parse_smartwatch_export."""

    def test_single_channel(self):
        """Test the export yields one named sample-indexed channel."""
        channels = parse_smartwatch_export(make_export())

        assert len(channels) == 1
        channel = channels[0]
        assert channel.name == "Jane Doe 1985-03-14"
        assert channel.unit == "mV"
        assert channel.plot_style == PlotStyle.LINE
        assert channel.samples_per_second == 512.0

    def test_decimal_separators(self):
        """Test both comma and period decimal separators are accepted."""
        channel = parse_smartwatch_export(make_export())[0]

        np.testing.assert_array_almost_equal(channel.data, [0.125, -0.05, 1.5])

    def test_corrupt_sample_becomes_nan(self):
        """Test an unparseable sample keeps its index as NaN."""
        export = make_export(samples=("0,1", "garbage", "0,3"))

        channel = parse_smartwatch_export(export)[0]

        assert len(channel) == 3
        assert channel.data[0] == pytest.approx(0.1)
        assert math.isnan(channel.data[1])
        assert channel.data[2] == pytest.approx(0.3)

    def test_unparseable_rate_uses_default(self):
        """Test the sampling rate falls back to 500 Hz."""
        channel = parse_smartwatch_export(make_export(sample_rate="unknown"))[0]

        assert channel.samples_per_second == 500.0

    def test_zero_rate_uses_default(self):
        """Test a zero sampling rate falls back to 500 Hz."""
        channel = parse_smartwatch_export(make_export(sample_rate="0 hertz"))[0]

        assert channel.samples_per_second == 500.0

    def test_crlf_line_endings(self):
        """Test Windows line endings are accepted."""
        channel = parse_smartwatch_export(make_export(newline="\r\n"))[0]

        assert channel.name == "Jane Doe 1985-03-14"
        np.testing.assert_array_almost_equal(channel.data, [0.125, -0.05, 1.5])

    def test_no_samples(self):
        """Test an export without samples gives an empty channel."""
        channel = parse_smartwatch_export(make_export(samples=()))[0]

        assert len(channel) == 0


class TestSmartwatchMetadataErrors:
    """Tests for fatal metadata problems."""

    def test_bad_birth_date(self):
        """Test an unparseable date of birth is a content error."""
        with pytest.raises(ContentError):
            parse_smartwatch_export(make_export(birth_date="14.03.1985"))

    def test_missing_separator(self):
        """Test a metadata row without a comma is a content error."""
        text = make_export().replace("Average Heart Rate,72", "Average Heart Rate 72")

        with pytest.raises(ContentError):
            parse_smartwatch_export(text)

    def test_truncated_metadata(self):
        """Test a file ending inside the metadata is a content error."""
        with pytest.raises(ContentError):
            parse_smartwatch_export("Name,Jane Doe\n")


class TestSmartwatchIngestion:
    """Tests for smartwatch exports through parse_content."""

    def test_goes_to_sample_channels(self):
        """Test smartwatch channels land in sample_channels."""
        result = parse_content(make_export().encode(), source="watch.csv")

        assert result.file_format == FileFormat.SMARTWATCH_SAMPLE_EXPORT
        assert len(result.sample_channels) == 1
        assert result.time_channels == []

    def test_bom_prefixed_export(self):
        """Test a byte-order mark does not leak into the channel name."""
        result = parse_content(make_export().encode("utf-8-sig"))

        assert result.sample_channels[0].name == "Jane Doe 1985-03-14"

    def test_bad_metadata_contained(self):
        """Test metadata errors give an empty result instead of raising."""
        result = parse_content(make_export(birth_date="yesterday").encode())

        assert result.is_empty
        assert "yesterday" in result.error
