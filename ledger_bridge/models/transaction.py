"""Transaction data model."""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from ..errors import InvalidFieldValueError


class BalanceType(Enum):
    """Whether a balance is a credit (positive) or debit (negative) position."""
    CREDIT = "Credit"
    DEBIT = "Debit"

    @property
    def sign(self) -> int:
        return 1 if self is BalanceType.CREDIT else -1


class TransactionType(Enum):
    """Direction of a transaction: money received or money paid out."""
    CREDIT = "Credit"
    DEBIT = "Debit"

    @property
    def sign(self) -> int:
        return 1 if self is TransactionType.CREDIT else -1


@dataclass(frozen=True)
class Transaction:
    """
    Represents a single statement entry.

    Attributes:
        booking_date: When the transaction was posted. A timezone-aware
            ``datetime`` for MT940/CAMT.053 models, a plain ``date`` for CSV.
        amount: Transaction amount, never negative
        transaction_type: Credit (incoming) or Debit (outgoing)
        description: Free-text narrative (may join several sub-fields)
        value_date: Value date as written in the source, if any
        reference: External reference or transaction id
        counterparty_name: Name of the other party (debtor or creditor)
        counterparty_account: IBAN or account id of the other party
    """
    booking_date: date
    amount: float
    transaction_type: TransactionType
    description: str = ""
    value_date: Optional[str] = None
    reference: Optional[str] = None
    counterparty_name: Optional[str] = None
    counterparty_account: Optional[str] = None

    def __post_init__(self):
        """Validate transaction data."""
        if self.amount < 0:
            raise InvalidFieldValueError("amount", str(self.amount))
        if not isinstance(self.transaction_type, TransactionType):
            raise InvalidFieldValueError("transaction_type", str(self.transaction_type))

    @property
    def signed_amount(self) -> float:
        """Amount with the direction applied (debits negative)."""
        return self.amount * self.transaction_type.sign

    def to_dict(self) -> dict:
        """Convert transaction to dictionary."""
        return {
            'booking_date': self.booking_date.strftime('%Y-%m-%d'),
            'value_date': self.value_date,
            'amount': round(self.amount, 2),
            'transaction_type': self.transaction_type.value,
            'description': self.description,
            'reference': self.reference,
            'counterparty_name': self.counterparty_name,
            'counterparty_account': self.counterparty_account,
        }
