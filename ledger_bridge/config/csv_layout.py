"""
Positional profile for the heuristic CSV layout.

The heuristic layout is a bank export without reliable headers: row indexes,
column offsets and marker strings locate every field. The defaults describe
the Sberbank business account export. Other banks are described by YAML
profiles overriding individual fields (see ``layout_loader``).
"""
from dataclasses import dataclass, field, fields
from typing import Dict, Tuple

# Structure
MIN_RECORDS = 12
ACCOUNT_SEARCH_ROWS = 10
ACCOUNT_NUMBER_LENGTH = 20
CURRENCY_ROW = 8
HEADER_SKIP_ROWS = 2

# Transaction columns (0-based)
DATE_COLUMN = 1
DEBIT_COLUMN = 9
CREDIT_COLUMN = 13
REFERENCE_COLUMN = 14
DESCRIPTION_SEARCH_START = 18
DESCRIPTION_COLUMN = 20
ROW_WIDTH = 21

# Footer
BALANCE_SEARCH_OFFSET = 14
MIN_BALANCE_AMOUNT = 0.01
FOOTER_AMOUNT_COLUMN = 6
FOOTER_DATE_COLUMN = 18
FOOTER_DEBIT_COUNT_COLUMN = 6
FOOTER_CREDIT_COUNT_COLUMN = 9

# Markers (matched case-insensitively)
TRANSACTION_MARKER = "дата проводки"
FOOTER_MARKER = "б/с"
OPENING_LABEL = "входящий остаток"
CLOSING_LABEL = "исходящий остаток"

DEFAULT_CURRENCY = "RUB"

# Checked in order, the long form before its substring
CURRENCY_KEYWORDS = (
    ("российский рубль", "RUB"),
    ("рубль", "RUB"),
    ("доллар", "USD"),
    ("usd", "USD"),
    ("евро", "EUR"),
    ("eur", "EUR"),
)

CURRENCY_LABELS = {
    "RUB": "Российский рубль",
    "USD": "Доллар США",
    "EUR": "Евро",
}

# Rendered header text
BANK_NAME = "СберБизнес"
BANK_NAME_FULL = "ПАО СБЕРБАНК"
STATEMENT_TITLE = "ВЫПИСКА ОПЕРАЦИЙ ПО ЛИЦЕВОМУ СЧЕТУ"
TITLE_ACCOUNT_COLUMN = 11
CURRENCY_CAPTION = "Валюта"

COLUMN_HEADERS = {
    1: "Дата проводки",
    4: "Счет",
    9: "Сумма по дебету",
    13: "Сумма по кредиту",
    14: "№ документа",
    16: "ВО",
    17: "Банк",
    20: "Назначение платежа",
}
SUB_HEADERS = {
    4: "Дебет",
    8: "Кредит",
}

OPERATION_COUNT_LABEL = "Количество операций"
OPENING_CAPTION = "Входящий остаток"
CLOSING_CAPTION = "Исходящий остаток"


@dataclass(frozen=True)
class HeuristicLayout:
    """Row indexes, column offsets and markers of one heuristic CSV export."""
    name: str = "sberbank"
    min_records: int = MIN_RECORDS
    account_search_rows: int = ACCOUNT_SEARCH_ROWS
    account_number_length: int = ACCOUNT_NUMBER_LENGTH
    currency_row: int = CURRENCY_ROW
    header_skip_rows: int = HEADER_SKIP_ROWS
    date_column: int = DATE_COLUMN
    debit_column: int = DEBIT_COLUMN
    credit_column: int = CREDIT_COLUMN
    reference_column: int = REFERENCE_COLUMN
    description_search_start: int = DESCRIPTION_SEARCH_START
    description_column: int = DESCRIPTION_COLUMN
    row_width: int = ROW_WIDTH
    balance_search_offset: int = BALANCE_SEARCH_OFFSET
    min_balance_amount: float = MIN_BALANCE_AMOUNT
    footer_amount_column: int = FOOTER_AMOUNT_COLUMN
    footer_date_column: int = FOOTER_DATE_COLUMN
    footer_debit_count_column: int = FOOTER_DEBIT_COUNT_COLUMN
    footer_credit_count_column: int = FOOTER_CREDIT_COUNT_COLUMN
    transaction_marker: str = TRANSACTION_MARKER
    footer_marker: str = FOOTER_MARKER
    opening_label: str = OPENING_LABEL
    closing_label: str = CLOSING_LABEL
    default_currency: str = DEFAULT_CURRENCY
    currency_keywords: Tuple[Tuple[str, str], ...] = CURRENCY_KEYWORDS
    currency_labels: Dict[str, str] = field(default_factory=lambda: dict(CURRENCY_LABELS))
    bank_name: str = BANK_NAME
    bank_name_full: str = BANK_NAME_FULL
    statement_title: str = STATEMENT_TITLE
    title_account_column: int = TITLE_ACCOUNT_COLUMN
    currency_caption: str = CURRENCY_CAPTION
    column_headers: Dict[int, str] = field(default_factory=lambda: dict(COLUMN_HEADERS))
    sub_headers: Dict[int, str] = field(default_factory=lambda: dict(SUB_HEADERS))
    operation_count_label: str = OPERATION_COUNT_LABEL
    opening_caption: str = OPENING_CAPTION
    closing_caption: str = CLOSING_CAPTION

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        """Names accepted as profile overrides."""
        return tuple(f.name for f in fields(cls))

    @property
    def transaction_row_width(self) -> int:
        """Cells in a rendered transaction row, wide enough for every used column."""
        return max(
            self.row_width,
            self.date_column + 1,
            self.debit_column + 1,
            self.credit_column + 1,
            self.reference_column + 1,
            self.description_column + 1,
        )


DEFAULT_LAYOUT = HeuristicLayout()
