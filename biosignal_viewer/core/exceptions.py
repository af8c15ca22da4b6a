"""
Exceptions raised by the export file parsers.

A parser error is contained to the file being parsed: the ingestion layer
logs it and the file contributes no channels.
"""


class ParserError(Exception):
    """Base exception for all parse failures."""
    pass


class ContentError(ParserError):
    """The file is structurally invalid for its dialect.

    Raised for missing or malformed header and metadata rows, and when a
    parser is asked to handle a dialect it does not support.
    """

    def __init__(self, message: str = "Invalid file content"):
        super().__init__(message)


class DataConversionError(ParserError):
    """A single value could not be converted where no leniency applies.

    Attributes:
        field: The offending text, kept for diagnostics
    """

    def __init__(self, field: str):
        super().__init__(f"Data Error: {field}")
        self.field = field
