"""
Commit-on-close scratch records for the CAMT.053 parser.

Raw text is collected while an element is open and only interpreted when
the enclosing ``Bal`` or ``Ntry`` closes.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ...errors import InvalidFieldValueError
from ...models import BalanceType, Transaction, TransactionType
from ...utils.amount_parser import parse_amount
from ...utils.date_parser import parse_date, to_utc_datetime
from .elements import CREDIT_INDICATOR, DEBIT_INDICATOR

logger = logging.getLogger(__name__)


def parse_xml_date(text: str, field_name: str) -> datetime:
    """Parse a Dt or DtTm value into a UTC-midnight datetime."""
    parsed = parse_date(text.strip()) if text else None
    if parsed is None:
        raise InvalidFieldValueError(field_name, text)
    return to_utc_datetime(parsed.date())


def parse_indicator(text: str, field_name: str) -> BalanceType:
    value = (text or "").strip().upper()
    if value == CREDIT_INDICATOR:
        return BalanceType.CREDIT
    if value == DEBIT_INDICATOR:
        return BalanceType.DEBIT
    raise InvalidFieldValueError(field_name, text)


@dataclass
class BalanceScratch:
    """Raw fields of the ``Bal`` element being read."""
    balance_type: Optional[str] = None
    amount: Optional[str] = None
    indicator: Optional[str] = None
    date: Optional[str] = None

    def clear(self) -> None:
        self.balance_type = None
        self.amount = None
        self.indicator = None
        self.date = None


@dataclass
class EntryScratch:
    """Raw fields of the ``Ntry`` element being read."""
    amount: Optional[str] = None
    indicator: Optional[str] = None
    booking_date: Optional[str] = None
    value_date: Optional[str] = None
    ntry_ref: Optional[str] = None
    tx_id: Optional[str] = None
    description_parts: List[str] = field(default_factory=list)
    structured_reference: Optional[str] = None
    debtor_name: Optional[str] = None
    debtor_account: Optional[str] = None
    creditor_name: Optional[str] = None
    creditor_account: Optional[str] = None

    def push_description(self, text: str) -> None:
        self.description_parts.append(text)

    def finish(self) -> Optional[Transaction]:
        """
        Build the transaction, or None when a mandatory field is missing.

        Amount, credit/debit indicator and booking date are mandatory.
        """
        if self.amount is None or self.indicator is None or self.booking_date is None:
            logger.debug(
                f"Dropping entry with missing fields (amount={self.amount}, "
                f"indicator={self.indicator}, booking_date={self.booking_date})"
            )
            return None

        try:
            amount = parse_amount(self.amount)
            indicator = parse_indicator(self.indicator, 'transaction_type')
            booking_date = parse_xml_date(self.booking_date, 'booking_date')
            transaction_type = (
                TransactionType.CREDIT if indicator is BalanceType.CREDIT else TransactionType.DEBIT
            )

            if transaction_type is TransactionType.CREDIT:
                counterparty_name = self.debtor_name or self.creditor_name
                counterparty_account = self.debtor_account or self.creditor_account
            else:
                counterparty_name = self.creditor_name or self.debtor_name
                counterparty_account = self.creditor_account or self.debtor_account

            description = " ".join(self.description_parts)
            if not description and self.structured_reference:
                description = self.structured_reference

            return Transaction(
                booking_date=booking_date,
                value_date=self.value_date,
                amount=amount,
                transaction_type=transaction_type,
                description=description,
                reference=self.tx_id or self.ntry_ref,
                counterparty_name=counterparty_name,
                counterparty_account=counterparty_account,
            )
        except InvalidFieldValueError as err:
            logger.debug(f"Dropping entry: {err}")
            return None
