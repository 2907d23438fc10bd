"""Convert bank statements between CSV, SWIFT MT940 and ISO 20022 CAMT.053."""

__version__ = "0.1.0"

from .errors import (
    LedgerBridgeError,
    InvalidFormatError,
    MissingFieldError,
    InvalidFieldValueError,
    FormatError,
    CsvFormatError,
    Mt940FormatError,
    Camt053FormatError,
    StatementIOError,
)
from .models import (
    BalanceType,
    TransactionType,
    Transaction,
    Statement,
    CsvStatement,
    Mt940Statement,
    Camt053Statement,
    ConversionResult,
)
from .conversions import convert_statement, to_csv, to_mt940, to_camt053
from .pipeline import ConversionPipeline, StatementFormat, decode, encode

__all__ = [
    '__version__',
    'LedgerBridgeError',
    'InvalidFormatError',
    'MissingFieldError',
    'InvalidFieldValueError',
    'FormatError',
    'CsvFormatError',
    'Mt940FormatError',
    'Camt053FormatError',
    'StatementIOError',
    'BalanceType',
    'TransactionType',
    'Transaction',
    'Statement',
    'CsvStatement',
    'Mt940Statement',
    'Camt053Statement',
    'ConversionResult',
    'convert_statement',
    'to_csv',
    'to_mt940',
    'to_camt053',
    'ConversionPipeline',
    'StatementFormat',
    'decode',
    'encode',
]
