"""Date parsing for statement files."""
import logging
import re
from datetime import date, datetime, timezone
from typing import List, Optional

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMATS = [
    "%d.%m.%Y",      # 26.10.2023
    "%Y-%m-%d",      # 2023-10-26 (ISO)
    "%d %B %Y",      # 26 October 2023
]

# Two-digit years below the pivot belong to 20xx, the rest to 19xx
CENTURY_PIVOT = 50

RUSSIAN_MONTHS = {
    'января': 'January',
    'февраля': 'February',
    'марта': 'March',
    'апреля': 'April',
    'мая': 'May',
    'июня': 'June',
    'июля': 'July',
    'августа': 'August',
    'сентября': 'September',
    'октября': 'October',
    'ноября': 'November',
    'декабря': 'December',
}

_ISO_DATETIME = re.compile(r"\d{4}-\d{2}-\d{2}T")


def parse_date(
    date_string: str,
    date_formats: Optional[List[str]] = None
) -> Optional[datetime]:
    """
    Parse date string using multiple strategies.

    Args:
        date_string: String containing date
        date_formats: List of strptime formats to try

    Returns:
        datetime object (naive unless the source carried an offset) or None
    """
    if not date_string or not isinstance(date_string, str):
        return None

    date_string = normalize_date_string(date_string)

    if not date_string:
        return None

    # ISO 8601 datetimes (CAMT.053 DtTm), keeps any UTC offset
    if _ISO_DATETIME.match(date_string):
        try:
            return dateutil_parser.isoparse(date_string)
        except ValueError:
            logger.warning(f"Could not parse ISO datetime: {date_string}")
            return None

    for fmt in date_formats or DEFAULT_DATE_FORMATS:
        try:
            return datetime.strptime(date_string, fmt)
        except ValueError:
            continue

    logger.debug(f"Could not parse date: {date_string}")
    return None


def parse_swift_date(date_string: str) -> datetime:
    """
    Parse a SWIFT YYMMDD date with fixed century inference.

    00-49 -> 2000-2049, 50-99 -> 1950-1999.

    Raises:
        ValueError: If the value is not six digits or not a calendar date
    """
    if len(date_string) != 6 or not date_string.isdigit():
        raise ValueError(f"Expected YYMMDD date, found '{date_string}'")

    yy = int(date_string[:2])
    month = int(date_string[2:4])
    day = int(date_string[4:])
    year = 2000 + yy if yy < CENTURY_PIVOT else 1900 + yy

    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        raise ValueError(
            f"Invalid calendar date derived from '{date_string}': "
            f"{year:04d}-{month:02d}-{day:02d}"
        ) from None


def format_swift_date(value: date) -> str:
    """Format a date as YYMMDD."""
    return value.strftime("%y%m%d")


def to_utc_datetime(value: date) -> datetime:
    """Lift a date (or naive datetime) to a timezone-aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def to_plain_date(value: date) -> date:
    """Drop the time and timezone part of a datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def normalize_date_string(date_str: str) -> str:
    """
    Normalize date string for consistent parsing.

    Translates Russian genitive month names and drops the trailing year
    suffix, e.g. "01 января 2024 г." -> "01 January 2024".

    Args:
        date_str: Raw date string

    Returns:
        Normalized date string
    """
    normalized = ' '.join(date_str.split())

    # Russian long dates end with "г." (year)
    normalized = re.sub(r'\s*г\.?$', '', normalized)

    lowered = normalized.lower()
    for russian, english in RUSSIAN_MONTHS.items():
        if russian in lowered:
            normalized = re.sub(
                r'\b' + re.escape(russian) + r'\b',
                english,
                normalized,
                flags=re.IGNORECASE
            )
            break

    return normalized
