"""Statement format codecs."""
from .base import BaseStatementCodec
from .csv_format import CsvCodec, LAYOUT_HEURISTIC, LAYOUT_SIMPLE
from .mt940_format import Mt940Codec, Mt940Tag
from .camt053 import Camt053Codec, ElementName
from .registry import StatementFormat, create_csv_codec, get_codec

__all__ = [
    'BaseStatementCodec',
    'CsvCodec',
    'LAYOUT_HEURISTIC',
    'LAYOUT_SIMPLE',
    'Mt940Codec',
    'Mt940Tag',
    'Camt053Codec',
    'ElementName',
    'StatementFormat',
    'create_csv_codec',
    'get_codec',
]
