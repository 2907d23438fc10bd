"""Conversion result model."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .statement import Statement


@dataclass
class ConversionResult:
    """
    Complete result of one decode/encode run.

    Attributes:
        statement: Decoded statement (None if decoding failed)
        success: Whether the conversion succeeded
        input_format: Name of the source format
        output_format: Name of the target format (None for decode-only runs)
        balance_reconciled: Whether balance validation passed (if performed)
        output: Encoded bytes (None when nothing was encoded)
        error_message: Diagnostic message if the conversion failed
        warnings: Non-fatal messages collected during the run
        processing_time: Time taken (seconds)
        converted_at: Timestamp of the run
    """
    statement: Optional[Statement]
    success: bool = True
    input_format: str = "unknown"
    output_format: Optional[str] = None
    balance_reconciled: bool = False
    output: Optional[bytes] = None
    error_message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    processing_time: float = 0.0
    converted_at: datetime = field(default_factory=datetime.now)

    @property
    def transaction_count(self) -> int:
        """Get number of transactions."""
        return self.statement.transaction_count if self.statement else 0

    def to_dict(self) -> dict:
        """Convert conversion result to dictionary."""
        return {
            'success': self.success,
            'input_format': self.input_format,
            'output_format': self.output_format,
            'transaction_count': self.transaction_count,
            'balance_reconciled': self.balance_reconciled,
            'processing_time': round(self.processing_time, 2),
            'converted_at': self.converted_at.isoformat(),
            'statement': self.statement.to_dict() if self.statement else None,
            'warnings': self.warnings,
            'error_message': self.error_message,
        }
