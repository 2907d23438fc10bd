"""Tests for the MT940 codec."""
import dataclasses
import pytest
from datetime import datetime, timezone

from ledger_bridge.errors import Mt940FormatError
from ledger_bridge.formats import Mt940Codec, Mt940Tag
from ledger_bridge.formats.mt940_format import (
    extract_block4,
    parse_balance,
    parse_statement_line,
    tokenize,
)
from ledger_bridge.models import BalanceType, Mt940Statement, TransactionType


def utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


@pytest.fixture
def codec():
    """Create an MT940 codec with the default envelope."""
    return Mt940Codec()


class TestTokenizer:
    """Test block 4 extraction and tag tokenization."""

    def test_extract_block4(self, mt940_text):
        """Test that the envelope is removed."""
        payload = extract_block4(mt940_text)

        assert payload.startswith("\n:20:")
        assert "{1:" not in payload
        assert "-}" not in payload

    def test_no_envelope(self):
        """Test that input without block markers is the payload."""
        assert extract_block4(":25:ACC\n") == ":25:ACC\n"

    def test_unclosed_block(self):
        """Test that an opened but unclosed block 4 is fatal."""
        with pytest.raises(Mt940FormatError):
            extract_block4("{4:\n:25:ACC\n:60F:C200101EUR1,00\n")

    def test_continuation_lines(self, mt940_text):
        """Test that lines without a leading ':' continue the previous tag."""
        fields = tokenize(extract_block4(mt940_text))
        information = [value for tag, value in fields if tag is Mt940Tag.INFORMATION]

        assert information[0] == "/EREF/ref1\n/REMI/rent"

    def test_unrecognized_tag(self):
        """Test that unknown tags are kept as UNRECOGNIZED."""
        fields = tokenize(":99X:whatever\n:25:ACC")

        assert fields[0] == (Mt940Tag.UNRECOGNIZED, "whatever")
        assert fields[1] == (Mt940Tag.ACCOUNT, "ACC")

    def test_colon_line_without_tag_continues(self):
        """Test that a ':' line which is not a tag continues the open field."""
        fields = tokenize(":86:Invoice 1\n:ref 77 paid\n::note\n:62F:C200101EUR1,00")

        assert fields[0] == (Mt940Tag.INFORMATION, "Invoice 1\n:ref 77 paid\n::note")
        assert fields[1] == (Mt940Tag.CLOSING_BALANCE, "C200101EUR1,00")

    def test_lines_before_first_tag_ignored(self):
        """Test that text ahead of the first tag opens no field."""
        assert tokenize("\npreamble\n:25:ACC") == [(Mt940Tag.ACCOUNT, "ACC")]

    def test_from_code(self):
        """Test tag lookup."""
        assert Mt940Tag.from_code("60f") is Mt940Tag.OPENING_BALANCE
        assert Mt940Tag.from_code("28C") is Mt940Tag.STATEMENT_NUMBER
        assert Mt940Tag.from_code("13D") is Mt940Tag.UNRECOGNIZED


class TestBalanceLine:
    """Test balance field parsing."""

    def test_parse_balance(self):
        """Test C200101EUR444,29."""
        amount, balance_date, indicator, currency = parse_balance("C200101EUR444,29")

        assert amount == 444.29
        assert balance_date == utc(2020, 1, 1)
        assert indicator is BalanceType.CREDIT
        assert currency == "EUR"

    def test_parse_debit_balance(self):
        """Test a Debit balance with a trailing comma."""
        amount, _, indicator, _ = parse_balance("D950315USD100,")

        assert amount == 100.00
        assert indicator is BalanceType.DEBIT

    def test_century_pivot(self):
        """Test two-digit year inference."""
        assert parse_balance("C250218EUR1,00")[1] == utc(2025, 2, 18)
        assert parse_balance("C950315EUR1,00")[1] == utc(1995, 3, 15)

    def test_invalid_date(self):
        """Test that an impossible balance date is fatal."""
        with pytest.raises(Mt940FormatError):
            parse_balance("C201301EUR1,00")

    def test_invalid_grammar(self):
        """Test that a malformed balance line is fatal."""
        with pytest.raises(Mt940FormatError):
            parse_balance("X200101EUR1,00")


class TestStatementLine:
    """Test :61: statement line parsing."""

    def test_with_entry_date(self):
        """Test that the optional MMDD entry date is skipped."""
        tx = parse_statement_line("2001010101D65,00NOVBNL47INGB9999999999", "rent")

        assert tx.booking_date == utc(2020, 1, 1)
        assert tx.amount == 65.00
        assert tx.transaction_type is TransactionType.DEBIT
        assert tx.reference == "NOVBNL47INGB9999999999"
        assert tx.description == "rent"

    def test_without_entry_date(self):
        """Test a line without entry date."""
        tx = parse_statement_line("200102C100,00NTRFNONREF")

        assert tx.booking_date == utc(2020, 1, 2)
        assert tx.transaction_type is TransactionType.CREDIT
        assert tx.reference == "NTRFNONREF"

    def test_reversal_marks(self):
        """Test that RC is a Debit and RD a Credit."""
        assert parse_statement_line("200102RC5,00NTRF").transaction_type is TransactionType.DEBIT
        assert parse_statement_line("200102RD5,00NTRF").transaction_type is TransactionType.CREDIT

    def test_funds_code(self):
        """Test that a one-letter funds code is skipped."""
        tx = parse_statement_line("200102CR12,50NMSCREF")

        assert tx.amount == 12.50
        assert tx.reference == "NMSCREF"

    def test_empty_reference(self):
        """Test that missing trailing text means no reference."""
        assert parse_statement_line("200102C1,00").reference is None

    def test_invalid_date(self):
        """Test that an impossible date raises a format error."""
        with pytest.raises(Mt940FormatError):
            parse_statement_line("201345C10,00NONREF")


class TestMt940Decode:
    """Test decoding whole messages."""

    def test_decode(self, codec, mt940_text):
        """Test statement fields."""
        statement = codec.decode(mt940_text.encode('utf-8'))

        assert isinstance(statement, Mt940Statement)
        assert statement.account_number == "NL69INGB0123456789EUR"
        assert statement.currency == "EUR"
        assert statement.opening_balance == 444.29
        assert statement.opening_date == utc(2020, 1, 1)
        assert statement.closing_balance == 479.29
        assert statement.closing_date == utc(2020, 1, 2)
        assert statement.closing_indicator is BalanceType.CREDIT

    def test_transactions(self, codec, mt940_text):
        """Test that each :61: is described by the following :86:."""
        statement = codec.decode(mt940_text.encode('utf-8'))

        assert statement.transaction_count == 2
        first, second = statement.transactions
        assert first.description == "/EREF/ref1\n/REMI/rent"
        assert first.transaction_type is TransactionType.DEBIT
        assert second.description == "Salary"
        assert second.amount == 100.00

    def test_bare_tag_stream(self, codec):
        """Test input without an envelope."""
        text = ":25:ACC1\n:60M:D240101EUR10,00\n:61:240102C5,00\n:62M:D240102EUR5,00\n"
        statement = codec.decode(text.encode('utf-8'))

        assert statement.opening_indicator is BalanceType.DEBIT
        assert statement.transactions[0].description == ""

    def test_bad_statement_line_dropped(self, codec, mt940_text):
        """Test that one bad :61: does not abort the decode."""
        text = mt940_text.replace(":61:200102C100,00NTRFNONREF", ":61:201345C100,00NTRFNONREF")
        statement = codec.decode(text.encode('utf-8'))

        assert statement.transaction_count == 1

    def test_bad_balance_date_fatal(self, codec, mt940_text):
        """Test that an invalid opening balance date aborts the decode."""
        text = mt940_text.replace(":60F:C200101", ":60F:C201301")
        with pytest.raises(Mt940FormatError):
            codec.decode(text.encode('utf-8'))

    @pytest.mark.parametrize("tag", [":25:", ":60F:", ":62F:"])
    def test_missing_required_tag(self, codec, mt940_text, tag):
        """Test that each required tag is mandatory."""
        text = "\n".join(line for line in mt940_text.splitlines() if not line.startswith(tag))
        with pytest.raises(Mt940FormatError):
            codec.decode(text.encode('utf-8'))

    @pytest.mark.parametrize("data", [b"", b"  \n\t"])
    def test_empty_input(self, codec, data):
        """Test that empty input is rejected."""
        with pytest.raises(Mt940FormatError):
            codec.decode(data)

    def test_amounts_never_negative(self, codec, mt940_text):
        """Test that amounts are magnitudes after decode."""
        statement = codec.decode(mt940_text.encode('utf-8'))
        assert all(t.amount >= 0 for t in statement.transactions)


class TestMt940Encode:
    """Test rendering MT940 messages."""

    def test_render(self, codec, mt940_statement):
        """Test the synthesized envelope and field order."""
        lines = codec.encode(mt940_statement).decode('utf-8').splitlines()

        assert lines == [
            "{1:F01BANKXXXXXX0000000000}{2:I940BANKXXXXXXN}{4:",
            ":20:STATEMENT",
            ":25:DE89370400440532013000",
            ":28C:1/1",
            ":60F:C240101EUR1000,00",
            ":61:240115C200,00NTRFREF123",
            ":86:Payment received",
            ":61:240120D49,50NTRFNONREF",
            ":86:Card payment",
            ":62F:C240131EUR1150,50",
            "-}",
        ]

    def test_type_code_reference_kept(self, codec, mt940_statement):
        """Test that references with a SWIFT type code are written verbatim."""
        tx = dataclasses.replace(mt940_statement.transactions[0], reference="NMSC12345")
        statement = dataclasses.replace(mt940_statement, transactions=(tx,))

        assert ":61:240115C200,00NMSC12345\n" in codec.render(statement)

    def test_custom_bics(self, mt940_statement):
        """Test envelope BICs."""
        codec = Mt940Codec(sender_bic="INGBNL2AXXX", receiver_bic="ABNANL2AXXX")
        first_line = codec.render(mt940_statement).splitlines()[0]

        assert first_line == "{1:F01INGBNL2AXXX0000000000}{2:I940ABNANL2AXXXN}{4:"

    def test_round_trip(self, codec, mt940_statement):
        """Test that balances, dates, amounts and descriptions survive."""
        decoded = codec.decode(codec.encode(mt940_statement))

        assert decoded.account_number == mt940_statement.account_number
        assert decoded.opening_balance == mt940_statement.opening_balance
        assert decoded.closing_date == mt940_statement.closing_date
        assert [t.amount for t in decoded.transactions] == [200.00, 49.50]
        assert [t.booking_date for t in decoded.transactions] == [utc(2024, 1, 15), utc(2024, 1, 20)]
        assert [t.description for t in decoded.transactions] == ["Payment received", "Card payment"]
        assert decoded.transactions[0].reference == "NTRFREF123"

    def test_multiline_description(self, codec, mt940_statement):
        """Test that multi-line descriptions become continuation lines."""
        tx = dataclasses.replace(mt940_statement.transactions[0], description="line one\nline two")
        statement = dataclasses.replace(mt940_statement, transactions=(tx,))

        decoded = codec.decode(codec.encode(statement))
        assert decoded.transactions[0].description == "line one\nline two"

    def test_description_line_starting_with_colon(self, codec, mt940_statement):
        """Test that description lines starting with ':' survive encoding."""
        tx = dataclasses.replace(mt940_statement.transactions[0], description="Invoice 1\n:ref 77 paid")
        statement = dataclasses.replace(mt940_statement, transactions=(tx,))

        decoded = codec.decode(codec.encode(statement))
        assert decoded.transactions[0].description == "Invoice 1\n:ref 77 paid"
