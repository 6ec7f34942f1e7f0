"""
Log query engine.

Turns a user's log of exercise ids into the filtered, limited and formatted
entries returned by the logs endpoint:

1. resolve each id to its stored record (unresolvable ids are dropped)
2. project records to {description, duration, date}
3. keep records inside the inclusive from/to range, in log order
4. apply the head limit
5. format dates for display

Each entry carries a status tag (match, no_match or unresolved) so dropped
data is visible to callers and tests instead of vanishing in a null check.
"""

import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from exercise_log.dates import (
    DateBound,
    build_range_predicate,
    format_date,
    parse_bounds,
    parse_stored_date,
)

logger = logging.getLogger(__name__)


class EntryStatus(Enum):
    """Outcome of a log entry at each filtering step."""
    MATCH = 'match'
    NO_MATCH = 'no_match'
    UNRESOLVED = 'unresolved'


class LogEntry:
    """A single log reference and, once resolved, its projected fields."""

    def __init__(self, reference: str, status: EntryStatus,
                 description: Optional[str] = None,
                 duration: Optional[int] = None,
                 entry_date: Optional[date] = None):
        self.reference = reference
        self.status = status
        self.description = description
        self.duration = duration
        self.date = entry_date

    @classmethod
    def unresolved(cls, reference: str) -> 'LogEntry':
        return cls(reference, EntryStatus.UNRESOLVED)

    @classmethod
    def from_record(cls, reference: str, record: Optional[Dict[str, Any]]) -> 'LogEntry':
        """
        Project a stored record, keeping only description, duration and date.

        A missing record, or one whose date cannot be read, is unresolved.
        """
        if not record:
            return cls.unresolved(reference)
        entry_date = parse_stored_date(record.get('date'))
        if entry_date is None:
            return cls.unresolved(reference)
        return cls(
            reference,
            EntryStatus.MATCH,
            description=record.get('description'),
            duration=int(record.get('duration', 0)),
            entry_date=entry_date,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Response shape of the entry, date in display format."""
        return {
            'description': self.description,
            'duration': self.duration,
            'date': format_date(self.date),
        }

    def __repr__(self) -> str:
        return f"LogEntry({self.reference!r}, {self.status.value}, {self.date})"


class LogQueryResult:
    """Final log plus the echoed date bounds that were requested."""

    def __init__(self, log: List[Dict[str, Any]],
                 from_bound: DateBound, to_bound: DateBound):
        self.log = log
        self.from_bound = from_bound
        self.to_bound = to_bound

    @property
    def count(self) -> int:
        return len(self.log)

    @property
    def from_date(self) -> Optional[str]:
        return self.from_bound.echo()

    @property
    def to_date(self) -> Optional[str]:
        return self.to_bound.echo()


def parse_limit(limit: Any) -> Optional[int]:
    """
    Interpret the limit query parameter.

    Only non-negative whole numbers are usable; anything else (empty,
    non-numeric, negative) means no limit.
    """
    if limit is None or isinstance(limit, bool):
        return None
    if isinstance(limit, int):
        value = limit
    else:
        text = str(limit).strip()
        if not text.isdecimal():
            if text:
                logger.warning("Ignoring unusable limit %r", limit)
            return None
        value = int(text)
    if value < 0:
        logger.warning("Ignoring negative limit %s", value)
        return None
    return value


def resolve_log(store: Any, log_ids: Sequence[str]) -> List[LogEntry]:
    """
    Resolve log references through the store, preserving log order.

    Args:
        store: record store exposing get_exercises(ids) -> {id: record}
        log_ids: the user's log, in store order
    """
    records = store.get_exercises(log_ids) if log_ids else {}
    entries = [LogEntry.from_record(ref, records.get(ref)) for ref in log_ids]

    dropped = [e.reference for e in entries if e.status is EntryStatus.UNRESOLVED]
    if dropped:
        logger.warning("Dropping %s unresolved log references: %s", len(dropped), dropped)
    return entries


def apply_range(entries: Iterable[LogEntry], from_bound: DateBound,
                to_bound: DateBound) -> List[LogEntry]:
    """Tag resolved entries MATCH or NO_MATCH against the date range."""
    entries = list(entries)
    in_range = build_range_predicate(from_bound, to_bound)
    for entry in entries:
        if entry.status is EntryStatus.UNRESOLVED:
            continue
        entry.status = EntryStatus.MATCH if in_range(entry.date) else EntryStatus.NO_MATCH
    return entries


def head_limit(entries: List[LogEntry], limit: Optional[int]) -> List[LogEntry]:
    """Keep the first `limit` entries; None keeps everything."""
    if limit is None:
        return entries
    return entries[:limit]


def filter_log(entries: Iterable[LogEntry], from_token: Optional[str] = None,
               to_token: Optional[str] = None, limit: Any = None) -> LogQueryResult:
    """
    Filter, limit and format already-resolved log entries.

    Entries keep their input order; the result is never sorted by date.
    """
    from_bound, to_bound = parse_bounds(from_token, to_token)
    if from_bound.is_invalid or to_bound.is_invalid:
        logger.info("Unparseable date bound (from=%r, to=%r), log will be empty",
                    from_bound.token, to_bound.token)

    tagged = apply_range(entries, from_bound, to_bound)
    matches = [e for e in tagged if e.status is EntryStatus.MATCH]
    limited = head_limit(matches, parse_limit(limit))

    return LogQueryResult([e.to_dict() for e in limited], from_bound, to_bound)


def query_log(store: Any, user: Dict[str, Any], from_token: Optional[str] = None,
              to_token: Optional[str] = None, limit: Any = None) -> LogQueryResult:
    """
    Run a log query for a user fetched from the store.

    Args:
        store: record store used to resolve the user's log references
        user: user item with its `log` list of exercise ids
        from_token: optional lower date bound, inclusive
        to_token: optional upper date bound, inclusive
        limit: optional head limit

    Returns:
        LogQueryResult with count, log and echoed bounds
    """
    entries = resolve_log(store, list(user.get('log') or []))
    result = filter_log(entries, from_token, to_token, limit)
    logger.info("Log query for user %s returned %s of %s entries",
                user.get('_id'), result.count, len(entries))
    return result
