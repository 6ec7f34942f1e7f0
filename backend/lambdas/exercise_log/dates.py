"""
Date handling for exercise logs: parsing filter bounds, the inclusive
range predicate, and the human-readable output format.
"""

from datetime import date, datetime
from typing import Callable, Optional

# Output format, e.g. "Mon Jan 01 2024"
DISPLAY_FORMAT = '%a %b %d %Y'
STORAGE_FORMAT = '%Y-%m-%d'
# Echoed in place of a bound that could not be parsed
INVALID_DATE = 'Invalid Date'

# Tried in order after ISO parsing fails
BOUND_FORMATS = (
    '%Y-%m-%d',
    '%Y/%m/%d',
    '%Y-%m',
    '%Y',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M:%S.%f',
    '%Y-%m-%d %H:%M:%S',
    '%Y/%m/%d %H:%M:%S',
    DISPLAY_FORMAT,
    '%b %d %Y',
    '%B %d %Y',
    '%b %d, %Y',
    '%B %d, %Y',
    '%d %b %Y',
    '%d %B %Y',
)


def parse_date(token: str) -> Optional[date]:
    """
    Parse a date token leniently.

    Accepts ISO dates and datetimes (including a trailing Z), dates with
    unpadded months and days, year-month and bare years (first day of the
    period), slash-separated dates, month-name dates, and the display format
    this service emits. Time components are dropped.

    Returns:
        The calendar date, or None when the token cannot be parsed
    """
    text = token.strip()
    if not text:
        return None
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in BOUND_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_stored_date(value: str) -> Optional[date]:
    """Parse a date as written by the store, None if it is malformed."""
    try:
        return datetime.strptime(value, STORAGE_FORMAT).date()
    except (TypeError, ValueError):
        return None


def format_date(value: date) -> str:
    """Render a date the way API responses show it."""
    return value.strftime(DISPLAY_FORMAT)


def to_storage(value: date) -> str:
    return value.strftime(STORAGE_FORMAT)


def today() -> date:
    return datetime.now().date()


class DateBound:
    """
    One side of a date range filter.

    A bound is absent (no token supplied), valid (token parsed to a date),
    or invalid (token supplied but unparseable).
    """

    def __init__(self, token: Optional[str] = None):
        if token is not None and not str(token).strip():
            token = None
        self.token = str(token) if token is not None else None
        self.value = parse_date(self.token) if self.token is not None else None

    @property
    def is_present(self) -> bool:
        return self.token is not None

    @property
    def is_invalid(self) -> bool:
        return self.is_present and self.value is None

    def echo(self) -> Optional[str]:
        """
        The bound as echoed back in a log response.

        Valid bounds are reformatted to the display format, invalid ones are
        echoed as ``Invalid Date``, absent ones yield None.
        """
        if self.value is not None:
            return format_date(self.value)
        if self.is_invalid:
            return INVALID_DATE
        return None

    def __repr__(self) -> str:
        return f"DateBound(token={self.token!r}, value={self.value!r})"


def parse_bounds(from_token: Optional[str],
                 to_token: Optional[str]) -> tuple:
    """Build the (from, to) bounds for a log query."""
    return DateBound(from_token), DateBound(to_token)


def build_range_predicate(from_bound: DateBound,
                          to_bound: DateBound) -> Callable[[date], bool]:
    """
    Build an inclusive date range test.

    A record date passes when it is on or after the lower bound and on or
    before the upper bound; an absent bound does not constrain its side.
    An invalid bound on either side rejects every date.
    """
    if from_bound.is_invalid or to_bound.is_invalid:
        return lambda _: False

    lower = from_bound.value
    upper = to_bound.value

    def in_range(value: date) -> bool:
        if lower is not None and value < lower:
            return False
        if upper is not None and value > upper:
            return False
        return True

    return in_range
