"""
CAMT.053 document writer.

Element order is fixed so that equal statements always render to identical
bytes::

    Document/BkToCstmrStmt/Stmt
        Acct/{Id/IBAN, Ccy}
        Bal (OPBD), Bal (CLBD)
        Ntry*: [NtryRef] Amt CdtDbtInd BookgDt/Dt [ValDt/Dt]
               NtryDtls/TxDtls/{[Refs/TxId] [RltdPties] [RmtInf/Ustrd]}

Optional elements are omitted when their value is absent, never written empty.
"""
from datetime import date
from typing import Optional
from xml.etree.ElementTree import Element, SubElement, indent, tostring

from ...models import BalanceType, Statement, Transaction, TransactionType
from ...utils.amount_parser import format_amount
from ...utils.date_parser import parse_date
from .elements import (
    CAMT053_NAMESPACE,
    CLOSING_BOOKED,
    CREDIT_INDICATOR,
    DEBIT_INDICATOR,
    OPENING_BOOKED,
)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
ISO_DATE_FORMAT = "%Y-%m-%d"


def _indicator(value) -> str:
    credit = value in (BalanceType.CREDIT, TransactionType.CREDIT)
    return CREDIT_INDICATOR if credit else DEBIT_INDICATOR


def _format_value_date(value: str) -> str:
    """Normalize a value date to YYYY-MM-DD when it can be parsed."""
    parsed = parse_date(value)
    return parsed.strftime(ISO_DATE_FORMAT) if parsed else value


def build_document(statement: Statement) -> Element:
    """Build the element tree for a statement."""
    root = Element("Document", xmlns=CAMT053_NAMESPACE)
    stmt = SubElement(SubElement(root, "BkToCstmrStmt"), "Stmt")

    acct = SubElement(stmt, "Acct")
    SubElement(SubElement(acct, "Id"), "IBAN").text = statement.account_number
    SubElement(acct, "Ccy").text = statement.currency

    _add_balance(
        stmt, OPENING_BOOKED, statement.currency,
        statement.opening_balance, statement.opening_indicator, statement.opening_date
    )
    _add_balance(
        stmt, CLOSING_BOOKED, statement.currency,
        statement.closing_balance, statement.closing_indicator, statement.closing_date
    )

    for tx in statement.transactions:
        _add_entry(stmt, tx, statement.currency)

    return root


def _add_balance(
    stmt: Element,
    code: str,
    currency: str,
    amount: float,
    indicator: BalanceType,
    balance_date: date
) -> None:
    bal = SubElement(stmt, "Bal")
    SubElement(SubElement(SubElement(bal, "Tp"), "CdOrPrtry"), "Cd").text = code
    SubElement(bal, "Amt", Ccy=currency).text = format_amount(amount)
    SubElement(bal, "CdtDbtInd").text = _indicator(indicator)
    SubElement(SubElement(bal, "Dt"), "Dt").text = balance_date.strftime(ISO_DATE_FORMAT)


def _add_entry(stmt: Element, tx: Transaction, currency: str) -> None:
    ntry = SubElement(stmt, "Ntry")
    if tx.reference:
        SubElement(ntry, "NtryRef").text = tx.reference
    SubElement(ntry, "Amt", Ccy=currency).text = format_amount(tx.amount)
    SubElement(ntry, "CdtDbtInd").text = _indicator(tx.transaction_type)
    SubElement(SubElement(ntry, "BookgDt"), "Dt").text = tx.booking_date.strftime(ISO_DATE_FORMAT)
    if tx.value_date:
        SubElement(SubElement(ntry, "ValDt"), "Dt").text = _format_value_date(tx.value_date)

    tx_dtls = SubElement(SubElement(ntry, "NtryDtls"), "TxDtls")
    if tx.reference:
        SubElement(SubElement(tx_dtls, "Refs"), "TxId").text = tx.reference

    if tx.counterparty_name or tx.counterparty_account:
        _add_related_party(tx_dtls, tx)

    if tx.description:
        SubElement(SubElement(tx_dtls, "RmtInf"), "Ustrd").text = tx.description


def _add_related_party(tx_dtls: Element, tx: Transaction) -> None:
    """Counterparty is the debtor of a credit and the creditor of a debit."""
    if tx.transaction_type is TransactionType.CREDIT:
        party, party_account = "Dbtr", "DbtrAcct"
    else:
        party, party_account = "Cdtr", "CdtrAcct"

    parties = SubElement(tx_dtls, "RltdPties")
    if tx.counterparty_name:
        SubElement(SubElement(parties, party), "Nm").text = tx.counterparty_name
    if tx.counterparty_account:
        SubElement(SubElement(SubElement(parties, party_account), "Id"), "IBAN").text = tx.counterparty_account


def render_document(statement: Statement, indent_space: Optional[str] = "  ") -> str:
    """Render a statement as CAMT.053 XML text."""
    root = build_document(statement)
    if indent_space:
        indent(root, space=indent_space)
    return XML_DECLARATION + "\n" + tostring(root, encoding="unicode") + "\n"
