"""
API Gateway response helpers.
"""

import json
from decimal import Decimal
from typing import Any, Dict, Optional

from exercise_log.errors import (
    DuplicateUsernameError,
    StoreError,
    UserNotFoundError,
    ValidationError,
)

CORS_HEADERS = {
    'Content-Type': 'application/json',
    'Access-Control-Allow-Origin': '*'
}

ERROR_STATUS_CODES = (
    (ValidationError, 400),
    (DuplicateUsernameError, 400),
    (UserNotFoundError, 404),
    (StoreError, 500),
)


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles the Decimal numbers DynamoDB returns."""

    def default(self, o):
        if isinstance(o, Decimal):
            return int(o) if o == o.to_integral_value() else float(o)
        return super().default(o)


class EnvelopeBuilder:
    """
    Builds a response body from a fixed set of required fields, appending
    optional fields only when they have a value.
    """

    def __init__(self, **required: Any):
        self._fields = dict(required)

    def add(self, key: str, value: Any) -> 'EnvelopeBuilder':
        self._fields[key] = value
        return self

    def add_optional(self, key: str, value: Optional[Any]) -> 'EnvelopeBuilder':
        if value is not None:
            self._fields[key] = value
        return self

    def build(self) -> Dict[str, Any]:
        return dict(self._fields)


def user_envelope(user: Dict[str, Any]) -> EnvelopeBuilder:
    return EnvelopeBuilder(_id=user['_id'], username=user['username'])


def log_envelope(user: Dict[str, Any], result: Any) -> Dict[str, Any]:
    """{_id, username, [from], [to], count, log} for a log query result."""
    return (user_envelope(user)
            .add_optional('from', result.from_date)
            .add_optional('to', result.to_date)
            .add('count', result.count)
            .add('log', result.log)
            .build())


def json_response(status_code: int, body: Any) -> Dict[str, Any]:
    """Wrap a body in an API Gateway proxy response."""
    return {
        'statusCode': status_code,
        'headers': dict(CORS_HEADERS),
        'body': json.dumps(body, cls=DecimalEncoder)
    }


def error_response(status_code: int, message: str) -> Dict[str, Any]:
    return json_response(status_code, {'error': message})


def status_for_error(error: Exception) -> int:
    """HTTP status for an exception raised while handling a request."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500
