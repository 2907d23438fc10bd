"""CAMT.053 element names and document constants."""
from enum import Enum

CAMT053_NAMESPACE = "urn:iso:std:iso:20022:tech:xsd:camt.053.001.02"

OPENING_BOOKED = "OPBD"
CLOSING_BOOKED = "CLBD"

CREDIT_INDICATOR = "CRDT"
DEBIT_INDICATOR = "DBIT"


class ElementName(Enum):
    """
    Element names the parser routes on.

    Lookup is namespace-stripped and case-insensitive; any other element
    maps to ``OTHER`` so it still occupies a slot in the path.
    """
    DOCUMENT = "DOCUMENT"
    BK_TO_CSTMR_STMT = "BKTOCSTMRSTMT"
    STMT = "STMT"
    ACCT = "ACCT"
    ID = "ID"
    IBAN = "IBAN"
    OTHR = "OTHR"
    CCY = "CCY"
    BAL = "BAL"
    TP = "TP"
    CD_OR_PRTRY = "CDORPRTRY"
    CD = "CD"
    AMT = "AMT"
    CDT_DBT_IND = "CDTDBTIND"
    DT = "DT"
    DT_TM = "DTTM"
    NTRY = "NTRY"
    NTRY_REF = "NTRYREF"
    BOOKG_DT = "BOOKGDT"
    VAL_DT = "VALDT"
    NTRY_DTLS = "NTRYDTLS"
    TX_DTLS = "TXDTLS"
    REFS = "REFS"
    TX_ID = "TXID"
    RMT_INF = "RMTINF"
    USTRD = "USTRD"
    STRD = "STRD"
    CDTR_REF_INF = "CDTRREFINF"
    REF = "REF"
    RLTD_PTIES = "RLTDPTIES"
    DBTR = "DBTR"
    CDTR = "CDTR"
    DBTR_ACCT = "DBTRACCT"
    CDTR_ACCT = "CDTRACCT"
    PTY = "PTY"
    NM = "NM"
    ADDTL_TX_INF = "ADDTLTXINF"
    ADDTL_NTRY_INF = "ADDTLNTRYINF"
    OTHER = "*"

    @classmethod
    def from_tag(cls, tag: str) -> "ElementName":
        """Map an ElementTree tag ('{namespace}Name' or 'prefix:Name') to a member."""
        local = tag.rsplit("}", 1)[-1].rsplit(":", 1)[-1]
        try:
            return cls(local.upper())
        except ValueError:
            return cls.OTHER
