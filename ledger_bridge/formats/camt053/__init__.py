"""ISO 20022 CAMT.053 (Bank to Customer Statement) codec."""
import logging

from ...errors import Camt053FormatError
from ...models import Camt053Statement, Statement
from ..base import BaseStatementCodec, Source
from .elements import CAMT053_NAMESPACE, ElementName
from .parser import CamtParser, parse_document
from .writer import render_document

logger = logging.getLogger(__name__)


class Camt053Codec(BaseStatementCodec):
    """Codec for CAMT.053 XML statements."""

    format_name = "camt053"
    statement_class = Camt053Statement
    error_class = Camt053FormatError

    def decode(self, data: Source) -> Camt053Statement:
        """
        Decode a CAMT.053 document.

        Raises:
            Camt053FormatError: Empty input or malformed XML
            MissingFieldError: Account, currency or a booked balance is absent
            InvalidFieldValueError: A booked balance field is unparseable
        """
        statement = parse_document(self._read_bytes(data))
        logger.info(f"Decoded CAMT.053 statement with {statement.transaction_count} transactions")
        return statement

    def render(self, statement: Statement) -> str:
        return render_document(Camt053Statement.from_statement(statement))


__all__ = ['Camt053Codec', 'CamtParser', 'ElementName', 'CAMT053_NAMESPACE']
