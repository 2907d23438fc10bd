"""
SWIFT MT940 statement codec.

Handles both full SWIFT messages with a block envelope
(``{1:...}{2:...}{4: ... -}``) and bare tag streams. Fields used:

- ``:25:``  account identification
- ``:60F:`` / ``:60M:`` opening balance (also gives the currency)
- ``:61:``  statement line, optionally followed by ``:86:`` information
- ``:62F:`` / ``:62M:`` closing balance

Balance line:   ``C200101EUR444,29``
Statement line: ``2001010101D65,00NOVBNL47INGB9999999999``
"""
import logging
import re
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from ..config.settings import MT940_RECEIVER_BIC, MT940_SENDER_BIC
from ..errors import InvalidFieldValueError, Mt940FormatError
from ..models import BalanceType, Mt940Statement, Statement, Transaction, TransactionType
from ..utils.amount_parser import DECIMAL_SEPARATOR_COMMA, format_amount, parse_amount
from ..utils.date_parser import format_swift_date, parse_swift_date
from .base import BaseStatementCodec, Source

logger = logging.getLogger(__name__)

BLOCK4_START = "{4:"
BLOCK4_END = "-}"

# :20:, :28C:, :60F: ... opens a field
FIELD_TAG_PATTERN = re.compile(r'^:(?P<tag>[0-9]{2}[A-Z]?):')

BALANCE_PATTERN = re.compile(
    r'^(?P<mark>[CD])(?P<date>\d{6})(?P<currency>[A-Za-z]{3})(?P<amount>[\d,.]+)$'
)

# Value date, optional entry date (MMDD), credit/debit mark (RC/RD are
# reversals), optional funds code, amount, then type code and references
STATEMENT_LINE_PATTERN = re.compile(
    r'^(?P<date>\d{6})(?P<entry_date>\d{4})?(?P<mark>R?[CD])(?P<funds>[A-Z])?'
    r'(?P<amount>[\d,.]+)(?P<rest>.*)$',
    re.DOTALL
)

# N/S/F + three-character transaction type identification code
SWIFT_TYPE_CODE = re.compile(r'^[NSF][A-Z0-9]{3}')
DEFAULT_TYPE_CODE = "NTRF"
NO_REFERENCE = "NONREF"

MARK_TO_TYPE = {
    'C': TransactionType.CREDIT,
    'D': TransactionType.DEBIT,
    'RC': TransactionType.DEBIT,
    'RD': TransactionType.CREDIT,
}


class Mt940Tag(Enum):
    """MT940 field tags."""
    TRANSACTION_REFERENCE = "20"
    RELATED_REFERENCE = "21"
    ACCOUNT = "25"
    STATEMENT_NUMBER = "28C"
    OPENING_BALANCE = "60F"
    INTERMEDIATE_OPENING_BALANCE = "60M"
    STATEMENT_LINE = "61"
    INFORMATION = "86"
    CLOSING_BALANCE = "62F"
    INTERMEDIATE_CLOSING_BALANCE = "62M"
    AVAILABLE_BALANCE = "64"
    FORWARD_AVAILABLE_BALANCE = "65"
    UNRECOGNIZED = "?"

    @classmethod
    def from_code(cls, code: str) -> "Mt940Tag":
        try:
            return cls(code.strip().upper())
        except ValueError:
            return cls.UNRECOGNIZED


OPENING_TAGS = (Mt940Tag.OPENING_BALANCE, Mt940Tag.INTERMEDIATE_OPENING_BALANCE)
CLOSING_TAGS = (Mt940Tag.CLOSING_BALANCE, Mt940Tag.INTERMEDIATE_CLOSING_BALANCE)


def extract_block4(content: str) -> str:
    """
    Return the payload of block 4, or the whole input when there is no envelope.

    Raises:
        Mt940FormatError: If block 4 is opened but never closed
    """
    start = content.find(BLOCK4_START)
    if start == -1:
        return content

    body = content[start + len(BLOCK4_START):]
    end = body.find(BLOCK4_END)
    if end == -1:
        end = body.find("}")
    if end == -1:
        raise Mt940FormatError("Block 4 not properly closed")

    return body[:end]


def tokenize(payload: str) -> List[Tuple[Mt940Tag, str]]:
    """
    Split block 4 into (tag, value) fields.

    A line starting with a ``:NN:`` or ``:NNa:`` tag opens a field; every
    other line continues the open field, even when it starts with ':'.
    """
    fields: List[Tuple[Mt940Tag, str]] = []
    current: Optional[Tuple[Mt940Tag, List[str]]] = None

    for line in payload.splitlines():
        match = FIELD_TAG_PATTERN.match(line.strip())
        if match:
            if current is not None:
                fields.append((current[0], "\n".join(current[1])))
            current = (Mt940Tag.from_code(match.group('tag')), [line.strip()[match.end():]])
        elif current is not None:
            current[1].append(line)

    if current is not None:
        fields.append((current[0], "\n".join(current[1])))

    return fields


def parse_balance(value: str) -> Tuple[float, datetime, BalanceType, str]:
    """
    Parse a balance field: C/D mark, YYMMDD date, currency, amount.

    Returns:
        (amount, date, indicator, currency)

    Raises:
        Mt940FormatError: If the line does not follow the balance grammar
    """
    lines = value.strip().splitlines()
    line = lines[0].strip() if lines else ""

    match = BALANCE_PATTERN.match(line)
    if not match:
        raise Mt940FormatError(f"Invalid balance line: '{line}'")

    try:
        balance_date = parse_swift_date(match.group('date'))
    except ValueError as err:
        raise Mt940FormatError(str(err)) from err

    indicator = BalanceType.CREDIT if match.group('mark') == 'C' else BalanceType.DEBIT
    amount = parse_amount(match.group('amount'), 'balance')
    return amount, balance_date, indicator, match.group('currency').upper()


def parse_statement_line(value: str, description: str = "") -> Transaction:
    """
    Parse a :61: statement line.

    Raises:
        Mt940FormatError: If the line does not follow the statement line grammar
    """
    line = value.strip()
    match = STATEMENT_LINE_PATTERN.match(line)
    if not match:
        raise Mt940FormatError(f"Invalid statement line: '{line}'")

    try:
        booking_date = parse_swift_date(match.group('date'))
    except ValueError as err:
        raise Mt940FormatError(str(err)) from err

    reference = match.group('rest').strip()

    return Transaction(
        booking_date=booking_date,
        amount=parse_amount(match.group('amount')),
        transaction_type=MARK_TO_TYPE[match.group('mark')],
        description=description,
        reference=reference or None,
    )


class Mt940Codec(BaseStatementCodec):
    """Codec for SWIFT MT940 messages."""

    format_name = "mt940"
    statement_class = Mt940Statement
    error_class = Mt940FormatError

    def __init__(self, sender_bic: str = MT940_SENDER_BIC, receiver_bic: str = MT940_RECEIVER_BIC):
        self.sender_bic = sender_bic
        self.receiver_bic = receiver_bic

    def decode(self, data: Source) -> Mt940Statement:
        """
        Decode an MT940 message.

        Raises:
            Mt940FormatError: Empty input, unclosed block 4, missing or
                malformed mandatory tags
        """
        content = self._read_text(data)
        if not content.strip():
            raise Mt940FormatError("Empty input")

        fields = tokenize(extract_block4(content))

        account = self._first(fields, (Mt940Tag.ACCOUNT,))
        if account is None:
            raise Mt940FormatError("Missing :25: account tag")

        opening = self._first(fields, OPENING_TAGS)
        if opening is None:
            raise Mt940FormatError("Missing :60F: or :60M: tag")

        closing = self._first(fields, CLOSING_TAGS)
        if closing is None:
            raise Mt940FormatError("Missing :62F: or :62M: tag")

        opening_balance, opening_date, opening_indicator, currency = parse_balance(opening)
        closing_balance, closing_date, closing_indicator, _ = parse_balance(closing)

        transactions = self._extract_transactions(fields)
        logger.info(f"Decoded MT940 statement with {len(transactions)} transactions")

        return Mt940Statement(
            account_number=account.strip(),
            currency=currency,
            opening_balance=opening_balance,
            opening_date=opening_date,
            opening_indicator=opening_indicator,
            closing_balance=closing_balance,
            closing_date=closing_date,
            closing_indicator=closing_indicator,
            transactions=tuple(transactions),
        )

    @staticmethod
    def _first(fields: List[Tuple[Mt940Tag, str]], tags: Tuple[Mt940Tag, ...]) -> Optional[str]:
        return next((value for tag, value in fields if tag in tags), None)

    def _extract_transactions(self, fields: List[Tuple[Mt940Tag, str]]) -> List[Transaction]:
        transactions = []

        for i, (tag, value) in enumerate(fields):
            if tag is not Mt940Tag.STATEMENT_LINE:
                continue

            description = ""
            if i + 1 < len(fields) and fields[i + 1][0] is Mt940Tag.INFORMATION:
                description = fields[i + 1][1].strip()

            try:
                transactions.append(parse_statement_line(value, description))
            except (Mt940FormatError, InvalidFieldValueError) as err:
                logger.warning(f"Dropping :61: line '{value.strip()}': {err}")

        return transactions

    def render(self, statement: Statement) -> str:
        """Render a statement as an MT940 message with a synthesized envelope."""
        lines = [
            f"{{1:F01{self.sender_bic}0000000000}}{{2:I940{self.receiver_bic}N}}{BLOCK4_START}",
            ":20:STATEMENT",
            f":25:{statement.account_number}",
            ":28C:1/1",
            ":60F:" + self._format_balance(
                statement.opening_indicator, statement.opening_date,
                statement.currency, statement.opening_balance
            ),
        ]

        for tx in statement.transactions:
            mark = 'C' if tx.transaction_type is TransactionType.CREDIT else 'D'
            lines.append(
                f":61:{format_swift_date(tx.booking_date)}{mark}"
                f"{format_amount(tx.amount, DECIMAL_SEPARATOR_COMMA)}"
                f"{self._format_reference(tx.reference)}"
            )
            lines.append(f":86:{tx.description}")

        lines.append(":62F:" + self._format_balance(
            statement.closing_indicator, statement.closing_date,
            statement.currency, statement.closing_balance
        ))
        lines.append(BLOCK4_END)

        return "\n".join(lines) + "\n"

    @staticmethod
    def _format_balance(indicator: BalanceType, balance_date, currency: str, amount: float) -> str:
        mark = 'C' if indicator is BalanceType.CREDIT else 'D'
        return f"{mark}{format_swift_date(balance_date)}{currency}{format_amount(amount, DECIMAL_SEPARATOR_COMMA)}"

    @staticmethod
    def _format_reference(reference: Optional[str]) -> str:
        """Keep references that already carry a type code, else prefix NTRF."""
        if reference and SWIFT_TYPE_CODE.match(reference):
            return reference
        return DEFAULT_TYPE_CODE + (reference or NO_REFERENCE)
