"""
CSV statement codec.

Two layouts are supported and detected automatically on decode:

Simple layout, keyed by column name::

    account_number,currency,opening_balance,opening_date,opening_indicator,closing_balance,closing_date,closing_indicator
    ACC123,USD,1000.00,2024-01-01,Credit,1200.00,2024-01-31,Credit
    booking_date,value_date,amount,transaction_type,description,reference,counterparty_name,counterparty_account
    2024-01-15,2024-01-15,200.00,Credit,Payment received,REF123,John Doe,IBAN123

Heuristic layout: a positional bank export (Sberbank business account by
default) with a metadata header, a transaction section introduced by a
"Дата проводки" header and a footer introduced by a "б/с" row that carries
the opening and closing balances. Offsets and markers come from a
``HeuristicLayout`` profile.
"""
import csv
import io
import logging
import re
from datetime import date
from typing import Dict, List, Optional, Tuple

from ..config.csv_layout import DEFAULT_LAYOUT, HeuristicLayout
from ..errors import CsvFormatError, InvalidFieldValueError, MissingFieldError
from ..models import BalanceType, CsvStatement, Statement, Transaction, TransactionType
from ..utils.amount_parser import DECIMAL_SEPARATOR_COMMA, format_amount, parse_amount
from ..utils.date_parser import RUSSIAN_MONTHS, parse_date
from .base import BaseStatementCodec, Source

logger = logging.getLogger(__name__)

LAYOUT_SIMPLE = "simple"
LAYOUT_HEURISTIC = "heuristic"

STATEMENT_COLUMNS = [
    'account_number',
    'currency',
    'opening_balance',
    'opening_date',
    'opening_indicator',
    'closing_balance',
    'closing_date',
    'closing_indicator',
]

TRANSACTION_COLUMNS = [
    'booking_date',
    'value_date',
    'amount',
    'transaction_type',
    'description',
    'reference',
    'counterparty_name',
    'counterparty_account',
]

ISO_DATE_FORMAT = "%Y-%m-%d"
RUSSIAN_DATE_FORMAT = "%d.%m.%Y"

_CURRENCY_CODE = re.compile(r"[A-Z]{3}")
_DATE_LIKE = re.compile(
    r"\d{2}\.\d{2}\.\d{4}"
    r"|\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}\s+(?:" + "|".join(RUSSIAN_MONTHS) + r")\s+\d{4}(?:\s*г\.?)?",
    re.IGNORECASE
)


def _is_blank(record: List[str]) -> bool:
    return all(not field.strip() for field in record)


def _cell(record: List[str], index: int) -> str:
    """Trimmed field at index, empty when the row is shorter."""
    if index < len(record):
        return record[index].strip()
    return ""


def _parse_calendar_date(value: str, field: str) -> date:
    """Parse a dd.mm.yyyy / ISO / Russian long date into a plain date."""
    parsed = parse_date(value) if value else None
    if parsed is None:
        raise InvalidFieldValueError(field, value)
    return parsed.date()


def _parse_indicator(value: str, field: str) -> BalanceType:
    try:
        return BalanceType(value)
    except ValueError:
        raise InvalidFieldValueError(field, value) from None


def _parse_transaction_type(value: str) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise InvalidFieldValueError('transaction_type', value) from None


class CsvCodec(BaseStatementCodec):
    """
    Codec for CSV statements.

    Args:
        output_layout: Layout used by ``encode`` ("simple" or "heuristic")
        heuristic_layout: Profile used to read and write the heuristic layout
    """

    format_name = "csv"
    statement_class = CsvStatement
    error_class = CsvFormatError

    def __init__(
        self,
        output_layout: str = LAYOUT_SIMPLE,
        heuristic_layout: HeuristicLayout = DEFAULT_LAYOUT
    ):
        if output_layout not in (LAYOUT_SIMPLE, LAYOUT_HEURISTIC):
            raise ValueError(f"Unknown CSV layout: {output_layout}")
        self.output_layout = output_layout
        self.heuristic_layout = heuristic_layout

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, data: Source) -> CsvStatement:
        """
        Decode a CSV statement in either layout.

        Raises:
            CsvFormatError: Empty input or broken document structure
            MissingFieldError: A mandatory statement field is absent
            InvalidFieldValueError: A mandatory statement field is unparseable
        """
        text = self._read_text(data)
        if not text.strip():
            raise CsvFormatError("Empty input")

        records = self._read_records(text)
        first = next((r for r in records if not _is_blank(r)), None)
        if first is None:
            raise CsvFormatError("Empty input")

        if first[0].strip().lower() == STATEMENT_COLUMNS[0]:
            logger.debug("Detected simple CSV layout")
            return self._decode_simple(records)

        logger.debug(f"Detected heuristic CSV layout ({self.heuristic_layout.name})")
        return self._decode_heuristic(records)

    def _read_records(self, text: str) -> List[List[str]]:
        """Split text into records; quoted cells may span lines."""
        try:
            return list(csv.reader(io.StringIO(text, newline='')))
        except csv.Error as err:
            raise CsvFormatError(f"Malformed CSV: {err}") from err

    def _decode_simple(self, records: List[List[str]]) -> CsvStatement:
        """Decode the column-named layout."""
        rows = [r for r in records if not _is_blank(r)]

        header = [name.strip().lower() for name in rows[0]]
        tx_header_index = next(
            (i for i, r in enumerate(rows) if r[0].strip().lower() == TRANSACTION_COLUMNS[0]),
            None
        )
        if tx_header_index is None:
            raise CsvFormatError("Missing transaction header row (must start with 'booking_date')")
        if tx_header_index < 2:
            raise CsvFormatError("Missing statement metadata row")

        metadata = dict(zip(header, (f.strip() for f in rows[1])))
        statement_fields = self._parse_simple_metadata(metadata)

        tx_header = [name.strip().lower() for name in rows[tx_header_index]]
        transactions = []
        for line_no, row in enumerate(rows[tx_header_index + 1:], start=1):
            values = dict(zip(tx_header, row))
            try:
                transactions.append(self._parse_simple_transaction(values))
            except (MissingFieldError, InvalidFieldValueError) as err:
                logger.warning(f"Skipping CSV transaction row {line_no}: {err}")

        logger.info(f"Decoded CSV statement with {len(transactions)} transactions")
        return CsvStatement(transactions=tuple(transactions), **statement_fields)

    def _parse_simple_metadata(self, metadata: Dict[str, str]) -> dict:
        def required(name: str) -> str:
            value = metadata.get(name, "")
            if not value:
                raise MissingFieldError(name)
            return value

        return {
            'account_number': required('account_number'),
            'currency': required('currency'),
            'opening_balance': parse_amount(required('opening_balance'), 'opening_balance'),
            'opening_date': _parse_calendar_date(required('opening_date'), 'opening_date'),
            'opening_indicator': _parse_indicator(required('opening_indicator'), 'opening_indicator'),
            'closing_balance': parse_amount(required('closing_balance'), 'closing_balance'),
            'closing_date': _parse_calendar_date(required('closing_date'), 'closing_date'),
            'closing_indicator': _parse_indicator(required('closing_indicator'), 'closing_indicator'),
        }

    def _parse_simple_transaction(self, values: Dict[str, str]) -> Transaction:
        """Free-text columns are kept verbatim; the others are trimmed."""
        def trimmed(name: str) -> str:
            return (values.get(name) or "").strip()

        for name in ('booking_date', 'amount', 'transaction_type'):
            if not trimmed(name):
                raise MissingFieldError(name)

        def optional(name: str) -> Optional[str]:
            return trimmed(name) or None

        return Transaction(
            booking_date=_parse_calendar_date(trimmed('booking_date'), 'booking_date'),
            value_date=optional('value_date'),
            amount=parse_amount(trimmed('amount')),
            transaction_type=_parse_transaction_type(trimmed('transaction_type')),
            description=values.get('description') or "",
            reference=optional('reference'),
            counterparty_name=values.get('counterparty_name') or None,
            counterparty_account=optional('counterparty_account'),
        )

    def _decode_heuristic(self, records: List[List[str]]) -> CsvStatement:
        """Decode the positional bank export."""
        layout = self.heuristic_layout

        if len(records) < layout.min_records:
            raise CsvFormatError(
                f"CSV too short - expected at least {layout.min_records} records, "
                f"found {len(records)}"
            )

        account_number = self._find_account_number(records)
        currency = self._find_currency(records)
        transaction_start, footer_start = self._find_sections(records)

        transactions = self._parse_heuristic_transactions(records[transaction_start:footer_start])

        footer = records[footer_start:]
        opening_balance, opening_indicator, opening_date = self._find_balance(
            footer, layout.opening_label, 'opening'
        )
        closing_balance, closing_indicator, closing_date = self._find_balance(
            footer, layout.closing_label, 'closing'
        )

        logger.info(f"Decoded heuristic CSV statement with {len(transactions)} transactions")
        return CsvStatement(
            account_number=account_number,
            currency=currency,
            opening_balance=opening_balance,
            opening_date=opening_date,
            opening_indicator=opening_indicator,
            closing_balance=closing_balance,
            closing_date=closing_date,
            closing_indicator=closing_indicator,
            transactions=tuple(transactions),
        )

    def _find_account_number(self, records: List[List[str]]) -> str:
        layout = self.heuristic_layout
        for record in records[:layout.account_search_rows]:
            for field in record:
                value = field.strip()
                if len(value) == layout.account_number_length and value.isascii() and value.isdigit():
                    return value
        raise MissingFieldError('account_number')

    def _find_currency(self, records: List[List[str]]) -> str:
        layout = self.heuristic_layout
        if layout.currency_row >= len(records):
            raise MissingFieldError('currency')

        for field in records[layout.currency_row]:
            value = field.strip()
            lowered = value.lower()
            for keyword, code in layout.currency_keywords:
                if keyword in lowered:
                    return code
            if _CURRENCY_CODE.fullmatch(value):
                return value

        return layout.default_currency

    def _find_sections(self, records: List[List[str]]) -> Tuple[int, int]:
        """Return (first transaction row, first footer row)."""
        layout = self.heuristic_layout

        transaction_start = None
        for i, record in enumerate(records):
            if any(layout.transaction_marker in field.lower() for field in record):
                transaction_start = i + layout.header_skip_rows
                break

        if transaction_start is None:
            raise CsvFormatError(
                f"Transaction section not found (missing '{layout.transaction_marker}')"
            )

        footer_start = len(records)
        for i in range(transaction_start, len(records)):
            if any(layout.footer_marker in field.lower() for field in records[i]):
                footer_start = i
                break

        return transaction_start, footer_start

    def _parse_heuristic_transactions(self, rows: List[List[str]]) -> List[Transaction]:
        transactions = []
        for row in rows:
            if _is_blank(row):
                continue
            try:
                transaction = self._parse_heuristic_row(row)
            except InvalidFieldValueError as err:
                logger.debug(f"Skipping CSV row: {err}")
                continue
            if transaction is not None:
                transactions.append(transaction)
        return transactions

    def _parse_heuristic_row(self, row: List[str]) -> Optional[Transaction]:
        """Parse one transaction row; None for rows that are not entries."""
        layout = self.heuristic_layout

        date_value = _cell(row, layout.date_column)
        if not date_value:
            return None
        booking_date = _parse_calendar_date(date_value, 'booking_date')

        debit = parse_amount(_cell(row, layout.debit_column), 'debit_amount')
        credit = parse_amount(_cell(row, layout.credit_column), 'credit_amount')

        if debit > 0:
            amount, transaction_type = debit, TransactionType.DEBIT
        elif credit > 0:
            amount, transaction_type = credit, TransactionType.CREDIT
        else:
            logger.debug(f"Skipping CSV row dated {date_value}: no amount")
            return None

        description = ""
        for index in range(layout.description_search_start, len(row)):
            value = _cell(row, index)
            if value:
                description = value
                break

        return Transaction(
            booking_date=booking_date,
            amount=amount,
            transaction_type=transaction_type,
            description=description,
            reference=_cell(row, layout.reference_column) or None,
        )

    def _find_balance(
        self,
        footer: List[List[str]],
        label: str,
        kind: str
    ) -> Tuple[float, BalanceType, date]:
        """
        Locate a labelled balance in the footer.

        The balance is the first non-zero amount after the label; its sign
        gives the indicator. The date is the right-most date in the row.
        """
        layout = self.heuristic_layout

        for record in footer:
            for i, field in enumerate(record):
                if label not in field.lower():
                    continue

                for offset in range(1, layout.balance_search_offset + 1):
                    value = _cell(record, i + offset)
                    if not value:
                        continue
                    try:
                        amount = parse_amount(value)
                    except InvalidFieldValueError:
                        continue
                    if abs(amount) < layout.min_balance_amount:
                        continue

                    indicator = BalanceType.CREDIT if amount >= 0 else BalanceType.DEBIT
                    return abs(amount), indicator, self._find_row_date(record, f'{kind}_date')

        raise MissingFieldError(f'{kind}_balance')

    def _find_row_date(self, record: List[str], field: str) -> date:
        for value in reversed(record):
            value = value.strip()
            if not _DATE_LIKE.fullmatch(value):
                continue
            parsed = parse_date(value)
            if parsed is not None:
                return parsed.date()
        raise MissingFieldError(field)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, statement: Statement, sink=None, layout: Optional[str] = None) -> bytes:
        """
        Encode a statement as CSV.

        Args:
            statement: Statement in any format model
            sink: Writable binary stream (optional)
            layout: "simple" or "heuristic" (defaults to the codec's layout)

        Returns:
            Encoded CSV bytes
        """
        chosen = layout or self.output_layout
        if chosen not in (LAYOUT_SIMPLE, LAYOUT_HEURISTIC):
            raise ValueError(f"Unknown CSV layout: {chosen}")

        statement = CsvStatement.from_statement(statement)
        if chosen == LAYOUT_HEURISTIC:
            text = self._render_heuristic(statement)
        else:
            text = self.render(statement)

        payload = text.encode('utf-8')
        self._write(payload, sink)
        return payload

    def render(self, statement: Statement) -> str:
        """Render the simple layout."""
        statement = CsvStatement.from_statement(statement)
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')

        writer.writerow(STATEMENT_COLUMNS)
        writer.writerow([
            statement.account_number,
            statement.currency,
            format_amount(statement.opening_balance),
            statement.opening_date.strftime(ISO_DATE_FORMAT),
            statement.opening_indicator.value,
            format_amount(statement.closing_balance),
            statement.closing_date.strftime(ISO_DATE_FORMAT),
            statement.closing_indicator.value,
        ])

        writer.writerow(TRANSACTION_COLUMNS)
        for tx in statement.transactions:
            writer.writerow([
                tx.booking_date.strftime(ISO_DATE_FORMAT),
                tx.value_date or "",
                format_amount(tx.amount),
                tx.transaction_type.value,
                tx.description,
                tx.reference or "",
                tx.counterparty_name or "",
                tx.counterparty_account or "",
            ])

        return buffer.getvalue()

    def _render_heuristic(self, statement: CsvStatement) -> str:
        """Render the positional bank export with fixed column positions."""
        layout = self.heuristic_layout
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')

        for row in self._heuristic_header(statement):
            writer.writerow(row)

        for tx in statement.transactions:
            row = [""] * layout.transaction_row_width
            row[layout.date_column] = tx.booking_date.strftime(RUSSIAN_DATE_FORMAT)
            column = layout.debit_column if tx.transaction_type is TransactionType.DEBIT else layout.credit_column
            row[column] = format_amount(tx.amount, DECIMAL_SEPARATOR_COMMA)
            if tx.reference:
                row[layout.reference_column] = tx.reference
            row[layout.description_column] = tx.description
            writer.writerow(row)

        for row in self._heuristic_footer(statement):
            writer.writerow(row)

        return buffer.getvalue()

    def _heuristic_header(self, statement: CsvStatement) -> List[List[str]]:
        layout = self.heuristic_layout
        rows: List[List[str]] = [[""] for _ in range(layout.currency_row + 2)]

        rows[0] = ["", layout.bank_name]
        rows[1] = ["", layout.bank_name_full]

        title = [""] * (layout.title_account_column + 1)
        title[1] = layout.statement_title
        title[layout.title_account_column] = statement.account_number
        rows[3] = title

        currency_label = layout.currency_labels.get(statement.currency, statement.currency)
        rows[layout.currency_row] = ["", layout.currency_caption, currency_label]

        rows.append(self._positioned(layout.column_headers))
        rows.append(self._positioned(layout.sub_headers))
        return rows

    def _heuristic_footer(self, statement: CsvStatement) -> List[List[str]]:
        layout = self.heuristic_layout

        counts = self._positioned({
            1: layout.operation_count_label,
            layout.footer_debit_count_column: str(sum(
                1 for t in statement.transactions if t.transaction_type is TransactionType.DEBIT
            )),
            layout.footer_credit_count_column: str(sum(
                1 for t in statement.transactions if t.transaction_type is TransactionType.CREDIT
            )),
        })

        return [
            [""],
            ["", layout.footer_marker],
            counts,
            self._balance_row(
                layout.opening_caption,
                statement.opening_balance,
                statement.opening_indicator,
                statement.opening_date
            ),
            self._balance_row(
                layout.closing_caption,
                statement.closing_balance,
                statement.closing_indicator,
                statement.closing_date
            ),
        ]

    def _balance_row(
        self,
        caption: str,
        amount: float,
        indicator: BalanceType,
        balance_date: date
    ) -> List[str]:
        layout = self.heuristic_layout
        sign = "-" if indicator is BalanceType.DEBIT else ""
        return self._positioned({
            1: caption,
            layout.footer_amount_column: sign + format_amount(amount, DECIMAL_SEPARATOR_COMMA),
            layout.footer_date_column: balance_date.strftime(RUSSIAN_DATE_FORMAT),
        })

    @staticmethod
    def _positioned(cells: Dict[int, str]) -> List[str]:
        """Build a row with each text at its column index."""
        row = [""] * (max(cells) + 1)
        for column, text in cells.items():
            row[column] = text
        return row
