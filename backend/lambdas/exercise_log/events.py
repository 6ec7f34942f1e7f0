"""
Extraction of bodies and parameters from API Gateway proxy events.
"""

import base64
import json
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

from exercise_log.errors import ValidationError

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'


def _content_type(event: Dict[str, Any]) -> str:
    headers = event.get('headers') or {}
    for name, value in headers.items():
        if name.lower() == 'content-type':
            return (value or '').lower()
    return ''


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode the request body.

    Handles already-decoded dicts, JSON strings and form-encoded strings
    (selected by the Content-Type header). Base64 bodies are decoded first.

    Raises:
        ValidationError: if a base64 body does not decode to UTF-8 text
        json.JSONDecodeError: if a JSON body is malformed
    """
    body = event.get('body')
    if body is None or body == '':
        return {}
    if isinstance(body, dict):
        return body

    if event.get('isBase64Encoded'):
        try:
            body = base64.b64decode(body).decode('utf-8')
        except ValueError as e:  # includes binascii.Error and UnicodeDecodeError
            raise ValidationError('Invalid base64 request body') from e

    if FORM_CONTENT_TYPE in _content_type(event):
        return {k: v[-1] for k, v in parse_qs(body, keep_blank_values=True).items()}

    parsed = json.loads(body)
    if not isinstance(parsed, dict):
        raise json.JSONDecodeError("Expected a JSON object", body, 0)
    return parsed


def get_path_parameter(event: Dict[str, Any], *names: str) -> Optional[str]:
    """First non-empty path parameter among `names`."""
    path_params = event.get('pathParameters') or {}
    for name in names:
        if path_params.get(name):
            return path_params[name]
    return None


def get_query_parameters(event: Dict[str, Any]) -> Dict[str, str]:
    return event.get('queryStringParameters') or {}
