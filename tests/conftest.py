"""Pytest configuration and fixtures."""
import csv
import io
import pytest
from datetime import date

from ledger_bridge.models import (
    BalanceType,
    Camt053Statement,
    CsvStatement,
    Mt940Statement,
    Transaction,
    TransactionType,
)


def heuristic_row(cells, width=21):
    """Build a positional CSV row with each text at its column index."""
    row = [""] * width
    for column, text in cells.items():
        row[column] = text
    return row


def to_csv_text(rows):
    """Write rows as CSV text, quoting decimal-comma amounts."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


@pytest.fixture
def sample_transactions():
    """Create a list of sample transactions."""
    return (
        Transaction(
            booking_date=date(2024, 1, 15),
            value_date="2024-01-15",
            amount=200.00,
            transaction_type=TransactionType.CREDIT,
            description="Payment received",
            reference="REF123",
            counterparty_name="John Doe",
            counterparty_account="GB29NWBK60161331926819"
        ),
        Transaction(
            booking_date=date(2024, 1, 20),
            amount=49.50,
            transaction_type=TransactionType.DEBIT,
            description="Card payment",
            counterparty_name="Shop GmbH"
        ),
    )


@pytest.fixture
def csv_statement(sample_transactions):
    """Create a sample CSV statement (plain dates)."""
    return CsvStatement(
        account_number="DE89370400440532013000",
        currency="EUR",
        opening_balance=1000.00,
        opening_date=date(2024, 1, 1),
        opening_indicator=BalanceType.CREDIT,
        closing_balance=1150.50,
        closing_date=date(2024, 1, 31),
        closing_indicator=BalanceType.CREDIT,
        transactions=sample_transactions
    )


@pytest.fixture
def camt_statement(csv_statement):
    """Same statement as a CAMT.053 model (UTC datetimes)."""
    return Camt053Statement.from_statement(csv_statement)


@pytest.fixture
def mt940_statement(csv_statement):
    """Same statement as an MT940 model (UTC datetimes)."""
    return Mt940Statement.from_statement(csv_statement)


@pytest.fixture
def simple_csv_text():
    """Simple-layout CSV document."""
    return (
        "account_number,currency,opening_balance,opening_date,opening_indicator,"
        "closing_balance,closing_date,closing_indicator\n"
        "ACC123,USD,1000.00,2024-01-01,Credit,1200.00,2024-01-31,Credit\n"
        "booking_date,value_date,amount,transaction_type,description,reference,"
        "counterparty_name,counterparty_account\n"
        "2024-01-15,2024-01-15,200.00,Credit,Payment received,REF123,John Doe,IBAN123\n"
    )


@pytest.fixture
def heuristic_csv_text():
    """Sberbank-style positional export with two valid entries."""
    rows = [
        heuristic_row({1: "СберБизнес"}),
        heuristic_row({1: "ПАО СБЕРБАНК"}),
        heuristic_row({}),
        heuristic_row({1: "ВЫПИСКА ОПЕРАЦИЙ ПО ЛИЦЕВОМУ СЧЕТУ", 11: "40702810938000012345"}),
        heuristic_row({1: "за период с 01 января 2024 г. по 31 января 2024 г."}),
        heuristic_row({}),
        heuristic_row({}),
        heuristic_row({}),
        heuristic_row({1: "Валюта", 2: "Российский рубль"}),
        heuristic_row({}),
        heuristic_row({1: "Дата проводки", 9: "Сумма по дебету", 13: "Сумма по кредиту",
                       14: "№ документа", 20: "Назначение платежа"}),
        heuristic_row({4: "Дебет", 8: "Кредит"}),
        heuristic_row({1: "10.01.2024", 9: "1 500,00", 14: "101", 20: "Оплата по счету 15"}),
        heuristic_row({1: "15.01.2024", 13: "25 000,00", 14: "102", 19: "Поступление выручки"}),
        heuristic_row({1: "16.01.2024", 14: "103"}),
        heuristic_row({1: "20.01.2024", 9: "abc", 20: "Битая строка"}),
        heuristic_row({}),
        heuristic_row({1: "б/с"}),
        heuristic_row({1: "Входящий остаток", 6: "10 000,00", 18: "01 января 2024 г."}),
        heuristic_row({1: "Исходящий остаток", 6: "33 500,00", 18: "31.01.2024"}),
    ]
    return to_csv_text(rows)


@pytest.fixture
def mt940_text():
    """MT940 message with envelope, a multi-line :86: and two entries."""
    return (
        "{1:F01INGBNL2ABXXX0000000000}{2:I940INGBNL2AXXXXN}{4:\n"
        ":20:P140220000000001\n"
        ":25:NL69INGB0123456789EUR\n"
        ":28C:00000\n"
        ":60F:C200101EUR444,29\n"
        ":61:2001010101D65,00NOVBNL47INGB9999999999\n"
        ":86:/EREF/ref1\n"
        "/REMI/rent\n"
        ":61:200102C100,00NTRFNONREF\n"
        ":86:Salary\n"
        ":62F:C200102EUR479,29\n"
        "-}"
    )


@pytest.fixture
def camt_xml():
    """CAMT.053 document with booked and available balances and two entries."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<Document xmlns="urn:iso:std:iso:20022:tech:xsd:camt.053.001.02">
  <BkToCstmrStmt>
    <GrpHdr><MsgId>MSG-1</MsgId></GrpHdr>
    <Stmt>
      <Id>STMT-1</Id>
      <Acct>
        <Id><IBAN>NL69INGB0123456789</IBAN></Id>
        <Ccy>EUR</Ccy>
      </Acct>
      <Bal>
        <Tp><CdOrPrtry><Cd>OPBD</Cd></CdOrPrtry></Tp>
        <Amt Ccy="EUR">100.00</Amt>
        <CdtDbtInd>CRDT</CdtDbtInd>
        <Dt><Dt>2024-01-01</Dt></Dt>
      </Bal>
      <Bal>
        <Tp><CdOrPrtry><Cd>OPAV</Cd></CdOrPrtry></Tp>
        <Amt Ccy="EUR">999.99</Amt>
        <CdtDbtInd>CRDT</CdtDbtInd>
        <Dt><Dt>2024-01-01</Dt></Dt>
      </Bal>
      <Bal>
        <Tp><CdOrPrtry><Cd>CLBD</Cd></CdOrPrtry></Tp>
        <Amt Ccy="EUR">200.00</Amt>
        <CdtDbtInd>CRDT</CdtDbtInd>
        <Dt><DtTm>2024-01-31T23:59:59</DtTm></Dt>
      </Bal>
      <Bal>
        <Tp><CdOrPrtry><Cd>CLAV</Cd></CdOrPrtry></Tp>
        <Amt Ccy="EUR">888.88</Amt>
        <CdtDbtInd>CRDT</CdtDbtInd>
        <Dt><Dt>2024-01-31</Dt></Dt>
      </Bal>
      <Ntry>
        <NtryRef>1</NtryRef>
        <Amt Ccy="EUR">150.00</Amt>
        <CdtDbtInd>CRDT</CdtDbtInd>
        <BookgDt><Dt>2024-01-10</Dt></BookgDt>
        <ValDt><Dt>2024-01-11</Dt></ValDt>
        <NtryDtls>
          <TxDtls>
            <Refs><TxId>3825-0123456789</TxId></Refs>
            <RltdPties>
              <Dbtr><Nm>ACME Corp</Nm></Dbtr>
              <DbtrAcct><Id><IBAN>DE89370400440532013000</IBAN></Id></DbtrAcct>
              <Cdtr><Nm>Ourselves BV</Nm></Cdtr>
            </RltdPties>
            <RmtInf><Ustrd>Invoice 42</Ustrd></RmtInf>
          </TxDtls>
        </NtryDtls>
        <AddtlNtryInf>SEPA credit</AddtlNtryInf>
      </Ntry>
      <Ntry>
        <Amt Ccy="EUR">50.00</Amt>
        <CdtDbtInd>DBIT</CdtDbtInd>
        <BookgDt><Dt>2024-01-12</Dt></BookgDt>
        <NtryDtls>
          <TxDtls>
            <RltdPties>
              <Cdtr><Pty><Nm>Landlord</Nm></Pty></Cdtr>
              <CdtrAcct><Id><Othr><Id>ACC-99</Id></Othr></Id></CdtrAcct>
            </RltdPties>
            <RmtInf><Strd><CdtrRefInf><Ref>RF18539007547034</Ref></CdtrRefInf></Strd></RmtInf>
          </TxDtls>
        </NtryDtls>
      </Ntry>
    </Stmt>
  </BkToCstmrStmt>
</Document>
"""
