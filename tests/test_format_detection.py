"""
Tests for export dialect detection and the ingestion boundary.
"""
import pytest

from biosignal_viewer.core import FileFormat, detect_format, parse_content
from biosignal_viewer.core.io_handler import decode_content, first_line


ECG_HEADER = "Phone timestamp;sensor timestamp [ns];timestamp [ms];ecg [uV]"
ACC_HEADER = "Phone timestamp;sensor timestamp [ns];X [mg];Y [mg];Z [mg]"
HR_HEADER = "Phone timestamp;HR [bpm]"
RR_HEADER = "Phone timestamp;RR-interval [ms]"


class TestDetectFormat:
    """Tests for detect_format."""

    @pytest.mark.parametrize("header,expected", [
        (ECG_HEADER, FileFormat.CHEST_STRAP_ECG),
        (ACC_HEADER, FileFormat.CHEST_STRAP_ACC),
        (HR_HEADER, FileFormat.CHEST_STRAP_HR),
        (RR_HEADER, FileFormat.CHEST_STRAP_RR),
    ])
    def test_chest_strap_signatures(self, header, expected):
        """Test each chest-strap header maps to its dialect."""
        assert detect_format(header + "\n2024-05-01T09:30:00.000;1\n") == expected

    def test_surrounding_whitespace_and_crlf(self):
        """Test the first line is trimmed before matching."""
        assert detect_format("  " + HR_HEADER + "  \r\nrow\r\n") == FileFormat.CHEST_STRAP_HR

    def test_match_is_case_sensitive(self):
        """Test that a differently cased header is not recognized."""
        assert detect_format(HR_HEADER.lower() + "\n") == FileFormat.UNRECOGNIZED

    def test_no_prefix_matching_for_chest_strap(self):
        """Test that extra header columns break the exact match."""
        assert detect_format(HR_HEADER + ";extra\n") == FileFormat.UNRECOGNIZED

    def test_smartwatch_prefix(self):
        """Test smartwatch exports are recognized by their first field."""
        assert detect_format("Name,Jane Doe\n") == FileFormat.SMARTWATCH_SAMPLE_EXPORT

    def test_smartwatch_prefix_with_bom(self):
        """Test a byte-order mark before the prefix is accepted."""
        text = decode_content("Name,Jane Doe\n".encode("utf-8-sig"))
        assert detect_format(text) == FileFormat.SMARTWATCH_SAMPLE_EXPORT

    def test_unknown_header(self):
        """Test any other first line is unrecognized."""
        assert detect_format("time,value\n0,1\n") == FileFormat.UNRECOGNIZED

    def test_empty_text(self):
        """Test empty text is unrecognized."""
        assert detect_format("") == FileFormat.UNRECOGNIZED

    def test_header_without_terminator(self):
        """Test a lone header with no line terminator is unrecognized."""
        assert detect_format(HR_HEADER) == FileFormat.UNRECOGNIZED
        assert detect_format("Name,Jane Doe") == FileFormat.UNRECOGNIZED


class TestDecoding:
    """Tests for content decoding helpers."""

    def test_invalid_utf8_is_replaced(self):
        """Test invalid byte sequences never raise."""
        text = decode_content(b"abc\xff\xfedef")
        assert text.startswith("abc")
        assert text.endswith("def")
        assert "\ufffd" in text

    def test_first_line(self):
        """Test first line extraction."""
        assert first_line("first\nsecond\n") == "first"
        assert first_line("only") == ""
        assert first_line("") == ""


class TestParseContent:
    """Tests for parse_content dispatch and error containment."""

    def test_empty_content(self):
        """Test empty content yields an empty unrecognized result."""
        result = parse_content(b"", source="empty.txt")

        assert result.file_format == FileFormat.UNRECOGNIZED
        assert result.is_empty
        assert result.error is None

    def test_unrecognized_content_is_logged(self, caplog):
        """Test unknown files produce no channels and a warning."""
        with caplog.at_level("WARNING"):
            result = parse_content(b"time,value\n0,1\n", source="other.csv")

        assert result.file_format == FileFormat.UNRECOGNIZED
        assert result.is_empty
        assert "other.csv" in caplog.text

    def test_invalid_utf8_content(self):
        """Test undecodable bytes are unrecognized rather than an error."""
        result = parse_content(b"\xff\xfe\x00garbage\n")

        assert result.file_format == FileFormat.UNRECOGNIZED
        assert result.is_empty

    def test_unterminated_header_gives_no_channels(self):
        """Test content without a complete first line loads nothing."""
        result = parse_content(HR_HEADER.encode(), source="cut.txt")

        assert result.file_format == FileFormat.UNRECOGNIZED
        assert result.is_empty

    def test_chest_strap_goes_to_time_channels(self):
        """Test chest-strap channels land in time_channels."""
        content = f"{HR_HEADER}\n2024-05-01T09:30:00.000;61\n".encode()

        result = parse_content(content, source="hr.txt")

        assert result.file_format == FileFormat.CHEST_STRAP_HR
        assert len(result.time_channels) == 1
        assert result.sample_channels == []
        assert result.source == "hr.txt"

    def test_parse_failure_is_contained(self):
        """Test a parser error becomes an empty result with an error message."""
        content = f"{HR_HEADER}\n2024-05-01T09:30:00.000;sixty\n".encode()

        result = parse_content(content, source="bad.txt")

        assert result.file_format == FileFormat.CHEST_STRAP_HR
        assert result.is_empty
        assert "sixty" in result.error

    def test_parsing_is_repeatable(self):
        """Test parsing the same bytes twice gives equal channels."""
        content = (
            f"{ECG_HEADER}\n"
            "2024-05-01T09:30:00.000;1;0;100\n"
            "2024-05-01T09:30:00.008;2;8;-50\n"
        ).encode()

        first = parse_content(content)
        second = parse_content(content)

        assert len(first.channels) == len(second.channels) == 1
        a, b = first.time_channels[0], second.time_channels[0]
        assert a.name == b.name
        assert a.unit == b.unit
        assert (a.timestamps == b.timestamps).all()
        assert (a.values == b.values).all()
