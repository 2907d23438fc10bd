"""Data models for statement conversion."""
from .transaction import Transaction, TransactionType, BalanceType
from .statement import Statement, CsvStatement, Mt940Statement, Camt053Statement
from .conversion_result import ConversionResult

__all__ = [
    'Transaction',
    'TransactionType',
    'BalanceType',
    'Statement',
    'CsvStatement',
    'Mt940Statement',
    'Camt053Statement',
    'ConversionResult',
]
