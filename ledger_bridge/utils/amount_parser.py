"""Parse and format monetary amounts found in statement files."""
import re
import logging

from ..errors import InvalidFieldValueError

logger = logging.getLogger(__name__)

DECIMAL_SEPARATOR_DOT = "."
DECIMAL_SEPARATOR_COMMA = ","

# Thousands separators seen in exports: space, no-break space, narrow no-break space
_GROUPING_CHARS = re.compile(r"[ \u00a0\u202f']")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def parse_amount(amount_string: str, field: str = "amount") -> float:
    """
    Parse an amount written with either decimal separator.

    Handles:
    - 1234.56 / 1234,56
    - 1 234,56 (space or no-break space grouping)
    - 1.234,56 / 1,234.56 (right-most separator is the decimal one)
    - 100, (trailing separator, SWIFT style) -> 100.00
    - -42,50 (explicit sign)

    Empty input is a zero amount.

    Args:
        amount_string: Raw amount text
        field: Field name reported when the value is rejected

    Returns:
        Parsed amount

    Raises:
        InvalidFieldValueError: If anything other than a number remains
    """
    if amount_string is None:
        return 0.0

    cleaned = _GROUPING_CHARS.sub("", amount_string.strip())
    if not cleaned:
        return 0.0

    if cleaned[-1] in ",.":
        cleaned = cleaned[:-1]

    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            # European format: 1.234,56
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            # UK/US format: 1,234.56
            cleaned = cleaned.replace(",", "")
    else:
        cleaned = cleaned.replace(",", ".")

    if not _NUMBER.fullmatch(cleaned):
        raise InvalidFieldValueError(field, amount_string)

    return float(cleaned)


def format_amount(amount: float, decimal_separator: str = DECIMAL_SEPARATOR_DOT) -> str:
    """
    Format amount with exactly two decimals.

    Args:
        amount: Numeric amount
        decimal_separator: "." or ","

    Returns:
        Formatted amount string, e.g. "1234,56"
    """
    return f"{amount:.2f}".replace(DECIMAL_SEPARATOR_DOT, decimal_separator)
