"""Canonical statement model and its per-format variants.

``Statement`` is the shape every codec decodes into and encodes from. The
three format models are structurally identical subclasses; they differ only
in how dates are represented:

- ``Mt940Statement`` / ``Camt053Statement``: timezone-aware UTC datetimes
- ``CsvStatement``: plain calendar dates

``from_statement`` copies every field and converts only the dates, so a
round trip between any two models is lossless apart from the CSV date type.
"""
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Tuple, TypeVar

from ..errors import InvalidFieldValueError
from ..utils.date_parser import to_plain_date, to_utc_datetime
from .transaction import BalanceType, Transaction, TransactionType

S = TypeVar("S", bound="Statement")


@dataclass(frozen=True)
class Statement:
    """
    Represents one account statement.

    Attributes:
        account_number: Bank-assigned identifier (IBAN, local number, digits)
        currency: ISO 4217 currency code
        opening_balance: Opening balance magnitude (sign in opening_indicator)
        opening_date: Date of the opening balance
        opening_indicator: Credit or Debit position of the opening balance
        closing_balance: Closing balance magnitude (sign in closing_indicator)
        closing_date: Date of the closing balance
        closing_indicator: Credit or Debit position of the closing balance
        transactions: Entries in source document order
    """
    account_number: str
    currency: str
    opening_balance: float
    opening_date: date
    opening_indicator: BalanceType
    closing_balance: float
    closing_date: date
    closing_indicator: BalanceType
    transactions: Tuple[Transaction, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.opening_balance < 0:
            raise InvalidFieldValueError("opening_balance", str(self.opening_balance))
        if self.closing_balance < 0:
            raise InvalidFieldValueError("closing_balance", str(self.closing_balance))
        for name in ("opening_indicator", "closing_indicator"):
            if not isinstance(getattr(self, name), BalanceType):
                raise InvalidFieldValueError(name, str(getattr(self, name)))
        if not isinstance(self.transactions, tuple):
            object.__setattr__(self, "transactions", tuple(self.transactions))

    @staticmethod
    def _convert_date(value: date) -> date:
        return value

    @classmethod
    def from_statement(cls: type[S], statement: "Statement") -> S:
        """Build this model from any other statement model."""
        if type(statement) is cls:
            return statement

        transactions = tuple(
            replace(tx, booking_date=cls._convert_date(tx.booking_date))
            for tx in statement.transactions
        )
        return cls(
            account_number=statement.account_number,
            currency=statement.currency,
            opening_balance=statement.opening_balance,
            opening_date=cls._convert_date(statement.opening_date),
            opening_indicator=statement.opening_indicator,
            closing_balance=statement.closing_balance,
            closing_date=cls._convert_date(statement.closing_date),
            closing_indicator=statement.closing_indicator,
            transactions=transactions,
        )

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def signed_opening_balance(self) -> float:
        return self.opening_balance * self.opening_indicator.sign

    @property
    def signed_closing_balance(self) -> float:
        return self.closing_balance * self.closing_indicator.sign

    @property
    def total_credits(self) -> float:
        return sum(
            t.amount for t in self.transactions
            if t.transaction_type is TransactionType.CREDIT
        )

    @property
    def total_debits(self) -> float:
        return sum(
            t.amount for t in self.transactions
            if t.transaction_type is TransactionType.DEBIT
        )

    @property
    def net_movement(self) -> float:
        """Credits minus debits."""
        return self.total_credits - self.total_debits

    def to_dict(self) -> dict:
        """Convert statement to dictionary."""
        return {
            'account_number': self.account_number,
            'currency': self.currency,
            'opening_balance': round(self.opening_balance, 2),
            'opening_date': self.opening_date.strftime('%Y-%m-%d'),
            'opening_indicator': self.opening_indicator.value,
            'closing_balance': round(self.closing_balance, 2),
            'closing_date': self.closing_date.strftime('%Y-%m-%d'),
            'closing_indicator': self.closing_indicator.value,
            'transaction_count': self.transaction_count,
            'transactions': [t.to_dict() for t in self.transactions],
        }


@dataclass(frozen=True)
class Mt940Statement(Statement):
    """Statement decoded from / destined for SWIFT MT940."""

    @staticmethod
    def _convert_date(value: date) -> datetime:
        return to_utc_datetime(value)


@dataclass(frozen=True)
class Camt053Statement(Statement):
    """Statement decoded from / destined for ISO 20022 CAMT.053."""

    @staticmethod
    def _convert_date(value: date) -> datetime:
        return to_utc_datetime(value)


@dataclass(frozen=True)
class CsvStatement(Statement):
    """Statement decoded from / destined for CSV (dates without timezone)."""

    @staticmethod
    def _convert_date(value: date) -> date:
        return to_plain_date(value)
