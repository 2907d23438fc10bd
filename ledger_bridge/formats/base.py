"""Base statement codec with shared I/O plumbing for all formats.

Every wire format implements ``decode`` (bytes or a binary stream to a
format model) and ``render`` (a statement to document text). Reading the
source, UTF-8 decoding and writing to an optional sink are shared here so
each codec only deals with its own grammar.
"""

import logging
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Type, Union

from ..errors import FormatError, StatementIOError
from ..models import Statement

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, str, BinaryIO]


class BaseStatementCodec(ABC):
    """
    Abstract base class for statement codecs.

    Codecs hold configuration only; all per-call parser state lives in
    local objects, so one instance can be shared between threads.
    """

    format_name: str = "unknown"
    statement_class: Type[Statement] = Statement
    error_class: Type[FormatError] = FormatError

    @abstractmethod
    def decode(self, data: Source) -> Statement:
        """
        Decode a document into this format's statement model.

        Args:
            data: Raw document bytes or a readable binary stream

        Returns:
            Decoded statement
        """
        pass

    @abstractmethod
    def render(self, statement: Statement) -> str:
        """Render a statement as document text."""
        pass

    def encode(self, statement: Statement, sink: Optional[BinaryIO] = None) -> bytes:
        """
        Encode a statement and optionally write it to a sink.

        Args:
            statement: Statement in any format model
            sink: Writable binary stream (optional)

        Returns:
            Encoded document bytes

        Raises:
            StatementIOError: If writing to the sink fails
        """
        payload = self.render(statement).encode('utf-8')
        self._write(payload, sink)
        return payload

    def _read_bytes(self, data: Source) -> bytes:
        """Read the whole source into memory."""
        if isinstance(data, (bytes, bytearray)):
            return bytes(data)
        if isinstance(data, str):
            return data.encode('utf-8')

        try:
            payload = data.read()
        except OSError as err:
            raise StatementIOError.from_os_error(err) from err

        if isinstance(payload, str):
            return payload.encode('utf-8')
        return payload or b""

    def _read_text(self, data: Source) -> str:
        """Read the source and decode it as UTF-8 (a leading BOM is dropped)."""
        raw = self._read_bytes(data)
        try:
            return raw.decode('utf-8-sig')
        except UnicodeDecodeError as err:
            raise self.error_class(f"Input is not valid UTF-8: {err}") from err

    def _write(self, payload: bytes, sink: Optional[BinaryIO]) -> None:
        """Write encoded bytes to the sink, if one was given."""
        if sink is None:
            return

        try:
            sink.write(payload)
            if hasattr(sink, 'flush'):
                sink.flush()
        except OSError as err:
            raise StatementIOError.from_os_error(err) from err

        logger.debug(f"Wrote {len(payload)} bytes of {self.format_name}")
