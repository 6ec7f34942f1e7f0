"""
Validation for user registration and new exercise records.
"""

import re
from datetime import date
from typing import Any, Dict, Optional, Tuple

from exercise_log.dates import parse_stored_date

MAX_DESCRIPTION_LENGTH = 16
DATE_PATTERN = re.compile(r'^[0-9]{4}[-/][0-9]{2}[-/][0-9]{2}$')


def coerce_duration(value: Any) -> Optional[int]:
    """
    Coerce a duration to an integer count.

    Accepts ints, integral floats and digit strings (form bodies carry
    everything as strings). Returns None when the value is not a whole number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
            return int(number) if number.is_integer() else None
    return None


def parse_date_token(token: str) -> Optional[date]:
    """
    Parse the date of a new exercise.

    Only YYYY-MM-DD and YYYY/MM/DD are accepted, and the date must exist.
    """
    if not DATE_PATTERN.match(token):
        return None
    return parse_stored_date(token.replace('/', '-'))


def _utf16_length(text: str) -> int:
    """Length in UTF-16 code units, so astral characters count twice."""
    return len(text.encode('utf-16-le')) // 2


def _has_date(exercise: Dict[str, Any]) -> bool:
    return exercise.get('date') not in (None, '')


def validate_exercise(exercise: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate the fields of a new exercise record.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(exercise, dict):
        return False, "Exercise must be a dictionary"

    description = exercise.get('description')
    duration = exercise.get('duration')

    # Define validation rules as (condition, error_message) pairs
    validation_rules = [
        (lambda: description is None or description == '',
         "description is required"),
        (lambda: not isinstance(description, str),
         "description must be a string"),
        (lambda: _utf16_length(description) > MAX_DESCRIPTION_LENGTH,
         f"description must be at most {MAX_DESCRIPTION_LENGTH} characters"),
        (lambda: duration is None or duration == '',
         "duration is required"),
        (lambda: coerce_duration(duration) is None,
         "duration must be a number"),
        (lambda: coerce_duration(duration) <= 0,
         "duration must be positive"),
        (lambda: _has_date(exercise) and not isinstance(exercise['date'], str),
         "Invalid date format"),
        (lambda: _has_date(exercise) and parse_date_token(exercise['date']) is None,
         "Invalid date format"),
    ]

    for check_condition, error_message in validation_rules:
        if check_condition():
            return False, error_message

    return True, None


def normalize_exercise(exercise: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a validated exercise into store-ready values.

    The date is None when the request did not supply one; the store stamps
    the current date in that case.
    """
    return {
        'description': exercise['description'],
        'duration': coerce_duration(exercise['duration']),
        'date': parse_date_token(exercise['date']) if _has_date(exercise) else None,
    }


def validate_username(username: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate a username for registration.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(username, str) or not username.strip():
        return False, "username is required"
    return True, None
