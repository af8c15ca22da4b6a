"""
File IO, format detection and export dialect parsers for the Biosignal Viewer application.
"""
from __future__ import annotations

import logging
import math
import re
from datetime import datetime
from io import StringIO
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from .exceptions import ContentError, DataConversionError, ParserError
from .models import (
    DEFAULT_UNIT,
    FileFormat,
    IngestResult,
    PlotStyle,
    SampleIndexedChannel,
    TimeIndexedChannel,
)

logger = logging.getLogger(__name__)


# Exact first lines of the chest-strap exports
CHEST_STRAP_SIGNATURES = {
    "Phone timestamp;sensor timestamp [ns];timestamp [ms];ecg [uV]": FileFormat.CHEST_STRAP_ECG,
    "Phone timestamp;sensor timestamp [ns];X [mg];Y [mg];Z [mg]": FileFormat.CHEST_STRAP_ACC,
    "Phone timestamp;HR [bpm]": FileFormat.CHEST_STRAP_HR,
    "Phone timestamp;RR-interval [ms]": FileFormat.CHEST_STRAP_RR,
}

# First-line prefixes of the smartwatch sample export
SMARTWATCH_PREFIXES = ("Name,", "\ufeffName,")

# Leading header columns that do not name an output channel
CHEST_STRAP_SKIPPED_COLUMNS = {
    FileFormat.CHEST_STRAP_ECG: 3,
    FileFormat.CHEST_STRAP_ACC: 2,
    FileFormat.CHEST_STRAP_HR: 1,
    FileFormat.CHEST_STRAP_RR: 1,
}

# Columns holding the channel values
CHEST_STRAP_VALUE_COLUMNS = {
    FileFormat.CHEST_STRAP_ECG: (3,),
    FileFormat.CHEST_STRAP_ACC: (2, 3, 4),
    FileFormat.CHEST_STRAP_HR: (1,),
    FileFormat.CHEST_STRAP_RR: (1,),
}

# Factor from the exported unit to the plotted one
CHEST_STRAP_SCALE = {
    FileFormat.CHEST_STRAP_ECG: 1e-3,  # uV -> mV
    FileFormat.CHEST_STRAP_ACC: 1e-3,  # mg -> g
    FileFormat.CHEST_STRAP_HR: 1.0,    # bpm
    FileFormat.CHEST_STRAP_RR: 1e-3,   # ms -> s
}

# Phone timestamp, with and without fractional seconds
TIMESTAMP_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f", "%Y-%m-%dT%H:%M:%S")

# Stand-in for unparseable timestamps: earliest millisecond pandas can represent
MIN_TIMESTAMP = pd.Timestamp.min.ceil("ms").to_datetime64().astype("datetime64[ms]")

# Pattern: Name [Unit]
UNIT_PATTERN = re.compile(r"^(?P<name>.*?)\s*\[(?P<unit>[^\]]*)\]")

# Sampling rate used when the smartwatch export does not state a usable one
DEFAULT_SAMPLES_PER_SECOND = 500.0

SMARTWATCH_DATE_FORMAT = "%Y-%m-%d"


def decode_content(content: bytes) -> str:
    """Decode file content as UTF-8, replacing invalid sequences."""
    return content.decode("utf-8", errors="replace")


def first_line(text: str) -> str:
    """
    Get the first line of a text with surrounding whitespace removed.

    Text without any line terminator has no complete first line and gives an
    empty string.
    """
    line, separator, _ = text.partition("\n")
    if not separator:
        return ""
    return line.strip()


def detect_format(text: str) -> FileFormat:
    """
    Select the export dialect from the first line of a file.

    Args:
        text: Decoded file content

    Returns:
        The matching FileFormat, UNRECOGNIZED if none matches
    """
    line = first_line(text)

    file_format = CHEST_STRAP_SIGNATURES.get(line)
    if file_format is not None:
        return file_format

    if line.startswith(SMARTWATCH_PREFIXES):
        return FileFormat.SMARTWATCH_SAMPLE_EXPORT

    return FileFormat.UNRECOGNIZED


def parse_header_unit(header: str) -> str:
    """Extract the bracketed unit from a header like ``ecg [uV]``."""
    match = UNIT_PATTERN.match(header)
    if match:
        return match.group("unit").strip()
    return header


def _text_lines(text: str) -> list[str]:
    """Split text on newlines, dropping a trailing carriage return per line."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_timestamps(column: pd.Series) -> np.ndarray:
    """
    Parse phone timestamps leniently.

    Rows that do not match the timestamp pattern are kept with the minimum
    representable timestamp.
    """
    parsed = pd.to_datetime(column, format=TIMESTAMP_FORMATS[0], errors="coerce")
    fallback = pd.to_datetime(column, format=TIMESTAMP_FORMATS[1], errors="coerce")
    parsed = parsed.fillna(fallback)

    # NaT survives the cast; fill afterwards so the sentinel is not wrapped
    timestamps = parsed.to_numpy().astype("datetime64[ms]")
    invalid = np.isnat(timestamps)
    if invalid.any():
        logger.debug(f"{int(invalid.sum())} row(s) with unparseable timestamps")
        timestamps[invalid] = MIN_TIMESTAMP

    return timestamps


def parse_values(column: pd.Series, scale: float) -> np.ndarray:
    """
    Convert a text column to scaled floats.

    Raises:
        DataConversionError: A field is not a number
    """
    converted = pd.to_numeric(column, errors="coerce")
    invalid = converted.isna() & (column.str.strip().str.lower() != "nan")
    if invalid.any():
        raise DataConversionError(str(column[invalid].iloc[0]))
    return converted.to_numpy(dtype=float) * scale


def parse_chest_strap(
    text: str,
    file_format: FileFormat,
    n_records: int = 0
) -> list[TimeIndexedChannel]:
    """
    Parse a semicolon-delimited chest-strap export.

    Args:
        text: Decoded file content, header row first
        file_format: One of the chest-strap dialects
        n_records: Expected number of rows (informational)

    Returns:
        One time-indexed channel per value column

    Raises:
        ContentError: Unsupported dialect or malformed CSV structure
        DataConversionError: A value field is not a number
    """
    if not file_format.is_chest_strap:
        raise ContentError(f"Not a chest-strap dialect: {file_format.name}")

    try:
        df = pd.read_csv(
            StringIO(text),
            sep=";",
            dtype=str,
            keep_default_na=False,
            index_col=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ContentError(f"Malformed {file_format.name} export: {e}") from e

    # Missing fields are the only NaN source; a short row ends the recording
    short_rows = df.isna().any(axis=1).to_numpy()
    if short_rows.any():
        first_short = int(np.argmax(short_rows))
        logger.debug(
            f"{file_format.name}: data row {first_short + 1} has fewer fields than the header, "
            f"keeping the {first_short} row(s) before it"
        )
        df = df.iloc[:first_short]

    headers = [str(h) for h in df.columns]
    value_columns = CHEST_STRAP_VALUE_COLUMNS[file_format]
    if len(headers) <= max(value_columns):
        raise ContentError(
            f"{file_format.name} export has {len(headers)} columns, "
            f"expected at least {max(value_columns) + 1}"
        )

    channel_headers = headers[CHEST_STRAP_SKIPPED_COLUMNS[file_format]:]
    logger.debug(f"{file_format.name}: {len(df)} rows (expected ~{n_records}), channels {channel_headers}")

    timestamps = parse_timestamps(df.iloc[:, 0])
    scale = CHEST_STRAP_SCALE[file_format]

    channels = []
    for column_index, header in zip(value_columns, channel_headers):
        values = parse_values(df.iloc[:, column_index], scale)
        channels.append(TimeIndexedChannel(
            name=header,
            timestamps=timestamps,
            values=values,
            scaling_factor=1.0,
            plot_style=PlotStyle.LINE,
            unit=parse_header_unit(header),
        ))

    return channels


def _metadata_value(line: Optional[str], description: str) -> str:
    """Get the value of a ``label,value`` metadata row."""
    if line is None:
        raise ContentError(f"Missing {description} row")
    label, separator, value = line.partition(",")
    if not separator:
        raise ContentError(f"Malformed {description} row: {line!r}")
    return value


def _parse_sample_rate(value: str) -> float:
    """Parse ``<value> <unit>`` into samples per second."""
    number = value.partition(" ")[0]
    try:
        samples_per_second = float(number) / 1000.0
    except ValueError:
        logger.debug(f"Unparseable sampling rate {value!r}, using {DEFAULT_SAMPLES_PER_SECOND} Hz")
        return DEFAULT_SAMPLES_PER_SECOND

    if not (samples_per_second > 0 and math.isfinite(samples_per_second)):
        logger.debug(f"Invalid sampling rate {value!r}, using {DEFAULT_SAMPLES_PER_SECOND} Hz")
        return DEFAULT_SAMPLES_PER_SECOND
    return samples_per_second


def _parse_sample(line: str) -> float:
    try:
        return float(line.replace(",", "."))
    except ValueError:
        return math.nan


def parse_smartwatch_export(text: str, n_records: int = 0) -> list[SampleIndexedChannel]:
    """
    Parse a comma-delimited smartwatch ECG sample export.

    The file starts with positional metadata rows (subject name, date of
    birth, average pulse, four informational rows, sampling rate), then two
    blank rows and two channel description rows. Every remaining line holds
    one sample with a comma or period decimal separator.

    Args:
        text: Decoded file content
        n_records: Expected number of lines (informational)

    Returns:
        A single sample-indexed channel named after the subject

    Raises:
        ContentError: A metadata row is missing or malformed
    """
    lines = iter(_text_lines(text))

    subject = _metadata_value(next(lines, None), "subject name")

    birth_text = _metadata_value(next(lines, None), "date of birth")
    try:
        birth_date = datetime.strptime(birth_text, SMARTWATCH_DATE_FORMAT).date()
    except ValueError as e:
        raise ContentError(f"Invalid date of birth: {birth_text!r}") from e

    # average pulse, not used
    _metadata_value(next(lines, None), "average pulse")

    # category, symptoms, software version, device
    for _ in range(4):
        next(lines, None)

    samples_per_second = _parse_sample_rate(_metadata_value(next(lines, None), "sampling rate"))

    # two blank rows, two channel descriptions
    for _ in range(4):
        next(lines, None)

    data = np.array([_parse_sample(line) for line in lines], dtype=float)
    logger.debug(f"Smartwatch export: {len(data)} samples at {samples_per_second} Hz (expected ~{n_records} lines)")

    return [SampleIndexedChannel(
        name=f"{subject} {birth_date.isoformat()}",
        data=data,
        samples_per_second=samples_per_second,
        scaling_factor=1.0,
        plot_style=PlotStyle.LINE,
        unit=DEFAULT_UNIT,
    )]


def parse_content(content: bytes, source: str = "") -> IngestResult:
    """
    Detect the dialect of raw file content and parse it into channels.

    Never raises for bad content: unrecognized or unparseable files produce
    an empty result and a log entry.

    Args:
        content: Raw file bytes
        source: Name of the file, used for diagnostics

    Returns:
        IngestResult with sample-indexed and time-indexed channels
    """
    result = IngestResult(source=source)
    label = source or "<content>"

    if not content:
        logger.warning(f"{label}: empty content")
        return result

    text = decode_content(content)
    n_records = text.count("\n") + 1
    result.file_format = detect_format(text)

    try:
        if result.file_format.is_chest_strap:
            logger.info(f"{label}: chest-strap export ({result.file_format.name})")
            result.time_channels.extend(parse_chest_strap(text, result.file_format, n_records))
        elif result.file_format == FileFormat.SMARTWATCH_SAMPLE_EXPORT:
            logger.info(f"{label}: smartwatch sample export")
            result.sample_channels.extend(parse_smartwatch_export(text, n_records))
        else:
            logger.warning(f"{label}: unknown data type, first line {first_line(text)!r}")
    except ParserError as e:
        logger.warning(f"{label}: failed to parse as {result.file_format.name}: {e}")
        result.error = str(e)

    return result


def read_file(filepath: Path | str) -> IngestResult:
    """Read an export file from disk and parse it."""
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    return parse_content(filepath.read_bytes(), source=filepath.name)
