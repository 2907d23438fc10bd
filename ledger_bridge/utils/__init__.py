"""Utility functions."""
from .logger import setup_logger, log_conversion_audit
from .amount_parser import parse_amount, format_amount
from .date_parser import (
    parse_date,
    parse_swift_date,
    format_swift_date,
    normalize_date_string,
    to_plain_date,
    to_utc_datetime,
)

__all__ = [
    'setup_logger',
    'log_conversion_audit',
    'parse_amount',
    'format_amount',
    'parse_date',
    'parse_swift_date',
    'format_swift_date',
    'normalize_date_string',
    'to_plain_date',
    'to_utc_datetime',
]
