"""Parsing and escaping helpers for search condition values.

Every parser here returns None for input it cannot use. Callers turn
None into "no predicate" instead of raising.
"""

import math
import re
import uuid
from datetime import UTC, datetime, time
from typing import Final

from dateutil import parser as date_parser
from django.utils import timezone

_LIKE_ESCAPE: Final = '\\'
_LIKE_ANY: Final = '%'
_LIKE_ONE: Final = '_'

_BYTES_PER_UNIT: Final = {
    'bytes': 1,
    'kb': 1024,
    'mb': 1024 ** 2,
    'gb': 1024 ** 3,
}

_DECIMAL_RE: Final = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
_DATE_ONLY_RE: Final = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so the value matches literally.

    Args:
        value: User-entered text.

    Returns:
        Text with backslash, '%' and '_' prefixed by a backslash.
    """
    return (
        value
        .replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace(_LIKE_ANY, _LIKE_ESCAPE + _LIKE_ANY)
        .replace(_LIKE_ONE, _LIKE_ESCAPE + _LIKE_ONE)
    )


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a LIKE pattern for in-memory matching.

    Follows the database semantics of the ``ilike`` lookup: the whole
    value must match, matching ignores case, backslash escapes.

    Args:
        pattern: LIKE pattern with '%', '_' and backslash escapes.

    Returns:
        Compiled regular expression, to be used with ``fullmatch``.
    """
    parts: list[str] = []
    chars = iter(pattern)
    for char in chars:
        if char == _LIKE_ESCAPE:
            parts.append(re.escape(next(chars, _LIKE_ESCAPE)))
        elif char == _LIKE_ANY:
            parts.append('.*')
        elif char == _LIKE_ONE:
            parts.append('.')
        else:
            parts.append(re.escape(char))
    return re.compile(''.join(parts), re.IGNORECASE | re.DOTALL)


def like_matches(pattern: str, text: str) -> bool:
    """Whether ``text`` matches a LIKE pattern the way the database does.

    Both sides are upper-cased with Unicode rules first, like the
    ``ilike`` lookup.
    """
    return like_to_regex(pattern.upper()).fullmatch(text.upper()) is not None



def parse_identifier(value: object) -> uuid.UUID | None:
    """Parse an asset, tag or folder identifier.

    Args:
        value: Raw identifier, usually a string.

    Returns:
        UUID, or None if the value is not an identifier.
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None


def convert_to_bytes(value: str | None, unit: str | None) -> int | None:
    """Convert a size in the given unit to a byte count.

    Args:
        value: Decimal number as text, e.g. '1.5'.
        unit: 'bytes', 'kb', 'mb' or 'gb' in any case; others mean bytes.

    Returns:
        Rounded byte count, or None for blank, malformed or negative input.
    """
    if value is None:
        return None
    text = value.strip()
    if not _DECIMAL_RE.match(text):
        return None

    multiplier = _BYTES_PER_UNIT.get((unit or 'bytes').strip().lower(), 1)
    size = float(text) * multiplier
    if not math.isfinite(size) or size < 0:
        return None
    return round(size)


def parse_datetime_value(value: str | None) -> datetime | None:
    """Parse a date or datetime into an aware UTC datetime.

    'YYYY-MM-DD' is a calendar date at UTC midnight. Anything else goes
    through dateutil: values with an offset are converted to UTC, naive
    values are read in the current Django time zone first.

    Args:
        value: Date text from the client.

    Returns:
        Aware datetime in UTC, or None if unparseable.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    if _DATE_ONLY_RE.match(text):
        try:
            day = datetime.strptime(text, '%Y-%m-%d')  # noqa: DTZ007
        except ValueError:
            return None
        return day.replace(tzinfo=UTC)

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, timezone.get_current_timezone())
    return parsed.astimezone(UTC)


def start_of_day(moment: datetime) -> datetime:
    """First instant of the UTC calendar day containing ``moment``."""
    return datetime.combine(moment.astimezone(UTC).date(), time.min, tzinfo=UTC)


def end_of_day(moment: datetime) -> datetime:
    """Last representable instant of the UTC day containing ``moment``."""
    return datetime.combine(moment.astimezone(UTC).date(), time.max, tzinfo=UTC)


def day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Inclusive UTC day interval around ``moment``."""
    return start_of_day(moment), end_of_day(moment)
