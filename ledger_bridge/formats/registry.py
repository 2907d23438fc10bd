"""Format selection and codec factory."""
import logging
from enum import Enum
from typing import Optional, Union

from ..config import get_layout_loader
from ..config.settings import DEFAULT_CSV_LAYOUT
from ..errors import InvalidFormatError
from .base import BaseStatementCodec
from .camt053 import Camt053Codec
from .csv_format import LAYOUT_HEURISTIC, LAYOUT_SIMPLE, CsvCodec
from .mt940_format import Mt940Codec

logger = logging.getLogger(__name__)


class StatementFormat(Enum):
    """Supported wire formats."""
    CSV = "csv"
    MT940 = "mt940"
    CAMT053 = "camt053"

    @classmethod
    def parse(cls, name: Union[str, "StatementFormat"]) -> "StatementFormat":
        """
        Parse a format name case-insensitively.

        Raises:
            InvalidFormatError: If the name is not a supported format
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            supported = ', '.join(f.value for f in cls)
            raise InvalidFormatError(
                f"Unknown format '{name}'. Supported formats: {supported}"
            ) from None


def create_csv_codec(csv_layout: Optional[str] = None) -> CsvCodec:
    """
    Create a CSV codec for a layout name.

    Args:
        csv_layout: "simple", "heuristic" or a heuristic profile name

    Raises:
        InvalidFormatError: If the profile is not known
    """
    name = (csv_layout or DEFAULT_CSV_LAYOUT).strip().lower()

    if name == LAYOUT_SIMPLE:
        return CsvCodec(output_layout=LAYOUT_SIMPLE)
    if name == LAYOUT_HEURISTIC:
        return CsvCodec(output_layout=LAYOUT_HEURISTIC)

    loader = get_layout_loader()
    layout = loader.get_layout(name)
    if layout is None:
        available = ', '.join([LAYOUT_SIMPLE, LAYOUT_HEURISTIC] + loader.get_all_layouts())
        raise InvalidFormatError(f"Unknown CSV layout '{name}'. Available layouts: {available}")

    return CsvCodec(output_layout=LAYOUT_HEURISTIC, heuristic_layout=layout)


def get_codec(
    fmt: Union[str, StatementFormat],
    csv_layout: Optional[str] = None
) -> BaseStatementCodec:
    """
    Create the codec for a format.

    Args:
        fmt: Format name or StatementFormat
        csv_layout: CSV layout name (ignored for other formats)

    Returns:
        Codec instance
    """
    statement_format = StatementFormat.parse(fmt)

    if statement_format is StatementFormat.CSV:
        codec = create_csv_codec(csv_layout)
    elif statement_format is StatementFormat.MT940:
        codec = Mt940Codec()
    else:
        codec = Camt053Codec()

    logger.debug(f"Created {type(codec).__name__} for {statement_format.value}")
    return codec
