"""
Streaming CAMT.053 parser.

``XMLPullParser`` delivers start/end events; ``CamtParser`` keeps the open
element path as a stack of ``ElementName`` tokens and routes each text
value by the suffix of that path. Balances and entries are buffered in
scratch records and committed when their element closes.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
import xml.etree.ElementTree as ET

from ...errors import Camt053FormatError, MissingFieldError
from ...models import BalanceType, Camt053Statement, Transaction
from ...utils.amount_parser import parse_amount
from .elements import CLOSING_BOOKED, OPENING_BOOKED, ElementName
from .scratch import BalanceScratch, EntryScratch, parse_indicator, parse_xml_date

logger = logging.getLogger(__name__)

E = ElementName

CHUNK_SIZE = 64 * 1024

# Account identifier suffixes below an account element
_ACCOUNT_ID_PATHS = ((E.ID, E.IBAN), (E.ID, E.OTHR, E.ID))
_DATE_LEAVES = (E.DT, E.DT_TM)


class CamtParser:
    """
    Path-tracking state machine fed by pull parser events.

    Usage:
        parser = CamtParser()
        parser.handle_start(elem)
        parser.handle_end(elem)
        statement = parser.build_statement()
    """

    def __init__(self):
        self.path: List[ElementName] = []
        self.account_number: Optional[str] = None
        self.currency: Optional[str] = None
        self.balances: Dict[str, Tuple[float, BalanceType, datetime]] = {}
        self.transactions: List[Transaction] = []
        self.balance_scratch = BalanceScratch()
        self.entry_scratch: Optional[EntryScratch] = None

    def handle_start(self, elem: ET.Element) -> None:
        name = ElementName.from_tag(elem.tag)
        self.path.append(name)

        if name is E.BAL:
            self.balance_scratch.clear()
        elif name is E.NTRY:
            self.entry_scratch = EntryScratch()
        elif name is E.AMT:
            self._capture_currency(elem.attrib)

    def handle_end(self, elem: ET.Element) -> None:
        text = elem.text or ""
        if text.strip():
            self.handle_text(text)

        if not self.path:
            return
        ended = self.path.pop()

        if ended is E.BAL:
            self._finish_balance()
            elem.clear()
        elif ended is E.NTRY:
            self._finish_entry()
            elem.clear()

    def handle_text(self, raw: str) -> None:
        """
        Route one text value by the current element path.

        Free text (remittance information, party names) is kept verbatim;
        codes, amounts, dates and identifiers are trimmed.
        """
        text = raw.strip()
        if self._ends_with_any(tuple((E.ACCT,) + p for p in _ACCOUNT_ID_PATHS)):
            if not self.account_number:
                self.account_number = text
        elif self._ends_with(E.ACCT, E.CCY):
            if self.currency is None:
                self.currency = text
        elif self._ends_with(E.BAL, E.TP, E.CD_OR_PRTRY, E.CD):
            self.balance_scratch.balance_type = text
        elif self._ends_with(E.BAL, E.AMT):
            self.balance_scratch.amount = text
        elif self._ends_with(E.BAL, E.CDT_DBT_IND):
            self.balance_scratch.indicator = text
        elif self._ends_with_any(tuple((E.BAL, E.DT, leaf) for leaf in _DATE_LEAVES)):
            self.balance_scratch.date = text
        elif self.entry_scratch is not None:
            self._handle_entry_text(text, raw, self.entry_scratch)

    def _handle_entry_text(self, text: str, raw: str, entry: EntryScratch) -> None:
        if self._ends_with(E.NTRY, E.AMT):
            entry.amount = text
        elif self._ends_with(E.NTRY, E.CDT_DBT_IND):
            entry.indicator = text
        elif self._ends_with_any(tuple((E.NTRY, E.BOOKG_DT, leaf) for leaf in _DATE_LEAVES)):
            entry.booking_date = text
        elif self._ends_with_any(tuple((E.NTRY, E.VAL_DT, leaf) for leaf in _DATE_LEAVES)):
            entry.value_date = text
        elif self._ends_with(E.NTRY, E.NTRY_REF):
            entry.ntry_ref = text
        elif self._ends_with(E.NTRY, E.ADDTL_NTRY_INF):
            entry.push_description(raw)
        elif E.TX_DTLS in self.path:
            self._handle_details_text(text, raw, entry)

    def _handle_details_text(self, text: str, raw: str, entry: EntryScratch) -> None:
        if self._ends_with(E.TX_DTLS, E.REFS, E.TX_ID):
            if entry.tx_id is None:
                entry.tx_id = text
        elif self._ends_with(E.RMT_INF, E.USTRD):
            entry.push_description(raw)
        elif self._ends_with(E.TX_DTLS, E.ADDTL_TX_INF):
            entry.push_description(raw)
        elif self._ends_with(E.RMT_INF, E.STRD, E.CDTR_REF_INF, E.REF):
            if entry.structured_reference is None:
                entry.structured_reference = text
        elif self._ends_with_any(((E.RLTD_PTIES, E.DBTR, E.NM), (E.RLTD_PTIES, E.DBTR, E.PTY, E.NM))):
            entry.debtor_name = raw
        elif self._ends_with_any(((E.RLTD_PTIES, E.CDTR, E.NM), (E.RLTD_PTIES, E.CDTR, E.PTY, E.NM))):
            entry.creditor_name = raw
        elif self._ends_with_any(tuple((E.RLTD_PTIES, E.DBTR_ACCT) + p for p in _ACCOUNT_ID_PATHS)):
            entry.debtor_account = text
        elif self._ends_with_any(tuple((E.RLTD_PTIES, E.CDTR_ACCT) + p for p in _ACCOUNT_ID_PATHS)):
            entry.creditor_account = text

    def _ends_with(self, *suffix: ElementName) -> bool:
        return len(self.path) >= len(suffix) and tuple(self.path[-len(suffix):]) == suffix

    def _ends_with_any(self, suffixes: Sequence[Tuple[ElementName, ...]]) -> bool:
        return any(self._ends_with(*suffix) for suffix in suffixes)

    def _capture_currency(self, attrib: Dict[str, str]) -> None:
        if self.currency is not None:
            return
        for key, value in attrib.items():
            if key.rsplit("}", 1)[-1].lower() == "ccy" and value.strip():
                self.currency = value.strip()
                return

    def _finish_balance(self) -> None:
        """Commit OPBD/CLBD balances; other balance types are discarded."""
        scratch = self.balance_scratch
        code = (scratch.balance_type or "").strip().upper()

        if code in (OPENING_BOOKED, CLOSING_BOOKED):
            kind = 'opening' if code == OPENING_BOOKED else 'closing'
            if scratch.amount is None:
                raise MissingFieldError(f'{kind}_balance')
            if scratch.indicator is None:
                raise MissingFieldError(f'{kind}_indicator')
            if scratch.date is None:
                raise MissingFieldError(f'{kind}_date')

            self.balances[code] = (
                parse_amount(scratch.amount, f'{kind}_balance'),
                parse_indicator(scratch.indicator, f'{kind}_indicator'),
                parse_xml_date(scratch.date, f'{kind}_date'),
            )
        elif code:
            logger.debug(f"Ignoring balance of type {code}")

        scratch.clear()

    def _finish_entry(self) -> None:
        entry = self.entry_scratch
        self.entry_scratch = None
        if entry is None:
            return

        transaction = entry.finish()
        if transaction is not None:
            self.transactions.append(transaction)

    def build_statement(self) -> Camt053Statement:
        """
        Assemble the statement once the document has been consumed.

        Raises:
            MissingFieldError: If account, currency or a booked balance is absent
        """
        if not self.account_number:
            raise MissingFieldError('account_number')
        if not self.currency:
            raise MissingFieldError('currency')
        if OPENING_BOOKED not in self.balances:
            raise MissingFieldError('opening_balance')
        if CLOSING_BOOKED not in self.balances:
            raise MissingFieldError('closing_balance')

        opening_balance, opening_indicator, opening_date = self.balances[OPENING_BOOKED]
        closing_balance, closing_indicator, closing_date = self.balances[CLOSING_BOOKED]

        return Camt053Statement(
            account_number=self.account_number,
            currency=self.currency,
            opening_balance=opening_balance,
            opening_date=opening_date,
            opening_indicator=opening_indicator,
            closing_balance=closing_balance,
            closing_date=closing_date,
            closing_indicator=closing_indicator,
            transactions=tuple(self.transactions),
        )


def parse_document(raw: bytes) -> Camt053Statement:
    """
    Run the pull parser over a whole document.

    Raises:
        Camt053FormatError: If the input is empty or not well-formed XML
    """
    if not raw.strip():
        raise Camt053FormatError("Empty input")

    pull_parser = ET.XMLPullParser(events=("start", "end"))
    camt_parser = CamtParser()

    try:
        for offset in range(0, len(raw), CHUNK_SIZE):
            pull_parser.feed(raw[offset:offset + CHUNK_SIZE])
            _drain(pull_parser, camt_parser)
        pull_parser.close()
        _drain(pull_parser, camt_parser)
    except ET.ParseError as err:
        raise Camt053FormatError(f"Malformed XML: {err}") from err

    return camt_parser.build_statement()


def _drain(pull_parser: ET.XMLPullParser, camt_parser: CamtParser) -> None:
    for event, elem in pull_parser.read_events():
        if event == "start":
            camt_parser.handle_start(elem)
        else:
            camt_parser.handle_end(elem)
