"""
Conversion pipeline - decode, validate, encode.

``decode`` and ``encode`` are the raising boundary API. ``ConversionPipeline``
wraps them for callers that want a result object: every failure is turned
into ``ConversionResult(success=False, error_message=...)``.
"""
import logging
import time
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .config.settings import BALANCE_TOLERANCE
from .conversions import convert_statement
from .errors import LedgerBridgeError, StatementIOError
from .formats import StatementFormat, get_codec
from .formats.base import Source
from .models import ConversionResult, Statement
from .utils import log_conversion_audit, setup_logger
from .validators import BalanceValidator

logger = setup_logger()

FormatName = Union[str, StatementFormat]


def decode(data: Source, fmt: FormatName, csv_layout: Optional[str] = None) -> Statement:
    """
    Decode a document into the format's statement model.

    Args:
        data: Raw bytes or a readable binary stream
        fmt: Source format
        csv_layout: Heuristic CSV profile used when the CSV is positional

    Returns:
        Decoded statement

    Raises:
        LedgerBridgeError: On any decode failure
    """
    return get_codec(fmt, csv_layout).decode(data)


def encode(
    statement: Statement,
    sink: Optional[BinaryIO],
    fmt: FormatName,
    csv_layout: Optional[str] = None
) -> bytes:
    """
    Encode a statement, writing it to sink when one is given.

    Args:
        statement: Statement in any format model
        sink: Writable binary stream or None
        fmt: Target format
        csv_layout: "simple", "heuristic" or a heuristic profile name

    Returns:
        Encoded document bytes

    Raises:
        StatementIOError: If writing to the sink fails
    """
    codec = get_codec(fmt, csv_layout)
    return codec.encode(convert_statement(statement, codec.statement_class), sink)


class ConversionPipeline:
    """
    Pipeline for statement conversion.

    Phases:
    1. Decode - Read the source document into a statement model
    2. Validate - Reconcile balances (optional)
    3. Encode - Render the target format (optional)
    """

    def __init__(self, tolerance: float = BALANCE_TOLERANCE):
        """Initialize pipeline with a balance validator."""
        self.validator = BalanceValidator(tolerance=tolerance)

    def process(
        self,
        source: Union[Source, Path],
        input_format: FormatName,
        output_format: Optional[FormatName] = None,
        sink: Optional[BinaryIO] = None,
        csv_layout: Optional[str] = None,
        perform_validation: bool = False
    ) -> ConversionResult:
        """
        Convert a statement end-to-end.

        Args:
            source: File path, raw bytes or readable binary stream
            input_format: Source format
            output_format: Target format (decode only when None)
            sink: Writable binary stream for the encoded document
            csv_layout: CSV layout for decoding and encoding CSV
            perform_validation: Whether to perform balance validation

        Returns:
            ConversionResult with statement, output and diagnostics
        """
        start_time = time.time()
        source_name = source.name if isinstance(source, Path) else None
        input_name = str(getattr(input_format, 'value', input_format))
        output_name = str(getattr(output_format, 'value', output_format)) if output_format else None

        logger.info(f"Converting {source_name or 'input'}: {input_name} -> {output_name or '(decode only)'}")

        statement = None
        try:
            input_fmt = StatementFormat.parse(input_format)
            output_fmt = StatementFormat.parse(output_format) if output_format else None

            # Phase 1: DECODE
            logger.debug("Phase 1: DECODE")
            statement = decode(self._read_source(source), input_fmt, csv_layout)

            # Phase 2: VALIDATE
            balance_reconciled = False
            warnings = []
            if perform_validation:
                logger.debug("Phase 2: VALIDATE")
                balance_reconciled, messages = self.validator.perform_full_validation(statement)
                if not balance_reconciled:
                    warnings.extend(messages)
                else:
                    warnings.extend(messages[1:])

            # Phase 3: ENCODE
            output = None
            if output_fmt is not None:
                logger.debug("Phase 3: ENCODE")
                output = encode(statement, sink, output_fmt, csv_layout)

            result = ConversionResult(
                statement=statement,
                success=True,
                input_format=input_fmt.value,
                output_format=output_fmt.value if output_fmt else None,
                balance_reconciled=balance_reconciled,
                output=output,
                warnings=warnings,
                processing_time=time.time() - start_time
            )

            log_conversion_audit(
                input_format=result.input_format,
                output_format=result.output_format,
                success=True,
                transaction_count=result.transaction_count,
                source=source_name
            )
            logger.info(
                f"Conversion complete in {result.processing_time:.2f} seconds "
                f"({result.transaction_count} transactions)"
            )
            return result

        except LedgerBridgeError as e:
            return self._create_error_result(
                str(e), input_name, output_name, statement, source_name,
                processing_time=time.time() - start_time
            )
        except Exception as e:
            logger.exception(f"Pipeline failed: {e}")
            return self._create_error_result(
                f"Conversion failed: {e}", input_name, output_name, statement, source_name,
                processing_time=time.time() - start_time
            )

    @staticmethod
    def _read_source(source: Union[Source, Path]) -> Source:
        """Load file paths eagerly; pass bytes and streams through."""
        if not isinstance(source, Path):
            return source
        try:
            return source.read_bytes()
        except OSError as err:
            raise StatementIOError.from_os_error(err) from err

    def _create_error_result(
        self,
        error_message: str,
        input_format: str,
        output_format: Optional[str],
        statement: Optional[Statement],
        source_name: Optional[str],
        processing_time: float
    ) -> ConversionResult:
        """Create error result."""
        logger.error(error_message)
        log_conversion_audit(
            input_format=input_format,
            output_format=output_format,
            success=False,
            source=source_name,
            error=error_message
        )

        return ConversionResult(
            statement=statement,
            success=False,
            input_format=input_format,
            output_format=output_format,
            error_message=error_message,
            processing_time=processing_time
        )


__all__ = ['ConversionPipeline', 'StatementFormat', 'decode', 'encode']
