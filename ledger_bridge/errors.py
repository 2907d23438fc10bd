"""Error types raised by the statement codecs.

Every failure that crosses the package boundary is a ``LedgerBridgeError``.
Decoders raise the format-specific subclasses for structural problems and
``MissingFieldError`` / ``InvalidFieldValueError`` for mandatory fields.
"""
from typing import Optional


class LedgerBridgeError(Exception):
    """Base class for all parsing and formatting errors."""

    prefix = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class InvalidFormatError(LedgerBridgeError):
    """Unrecognized format selector (e.g. ``--in-format xls``)."""

    prefix = "Invalid format"


class MissingFieldError(LedgerBridgeError):
    """A structurally required field was absent after a full decode pass."""

    def __init__(self, field: str):
        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        return f"Missing required field: {self.field}"


class InvalidFieldValueError(LedgerBridgeError):
    """A field was present but its value could not be parsed."""

    def __init__(self, field: str, value: Optional[str]):
        super().__init__(f"{field}={value!r}")
        self.field = field
        self.value = value

    def __str__(self) -> str:
        return f"Invalid value '{self.value}' for field '{self.field}'"


class FormatError(LedgerBridgeError):
    """Malformed document structure for a specific wire format."""

    prefix = "Format error"


class CsvFormatError(FormatError):
    prefix = "CSV error"


class Mt940FormatError(FormatError):
    prefix = "MT940 error"


class Camt053FormatError(FormatError):
    prefix = "CAMT.053 error"


class StatementIOError(LedgerBridgeError):
    """Underlying I/O failure while reading a source or writing a sink."""

    prefix = "I/O error"

    @classmethod
    def from_os_error(cls, err: OSError) -> "StatementIOError":
        error = cls(str(err))
        error.__cause__ = err
        return error
