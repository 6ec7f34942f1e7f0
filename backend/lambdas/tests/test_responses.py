"""
Tests for response building and event parsing.
"""

import base64
import json
from decimal import Decimal

import pytest

from exercise_log.dates import DateBound
from exercise_log.errors import (
    DuplicateUsernameError,
    StoreError,
    UserNotFoundError,
    ValidationError,
)
from exercise_log.events import get_path_parameter, get_query_parameters, parse_body
from exercise_log.log_filter import LogQueryResult
from exercise_log.responses import (
    DecimalEncoder,
    EnvelopeBuilder,
    error_response,
    json_response,
    log_envelope,
    status_for_error,
)

pytestmark = pytest.mark.unit

USER = {"_id": "u1", "username": "alice", "log": ["e1"]}


class TestDecimalEncoder:
    """Test cases for the DecimalEncoder class."""

    def test_encode_integral_decimal(self):
        result = DecimalEncoder().default(Decimal('30'))
        assert result == 30
        assert isinstance(result, int)

    def test_encode_fractional_decimal(self):
        result = DecimalEncoder().default(Decimal('12.345'))
        assert result == 12.345
        assert isinstance(result, float)

    def test_encode_other_types(self):
        with pytest.raises(TypeError):
            DecimalEncoder().default(object())


class TestEnvelopeBuilder:
    """Test cases for response envelopes."""

    def test_optional_fields_omitted_when_none(self):
        body = EnvelopeBuilder(a=1).add_optional("b", None).add("c", 3).build()
        assert body == {"a": 1, "c": 3}

    def test_log_envelope_without_bounds(self):
        result = LogQueryResult([], DateBound(), DateBound())
        body = log_envelope(USER, result)
        assert list(body) == ["_id", "username", "count", "log"]

    def test_log_envelope_from_only(self):
        result = LogQueryResult([], DateBound("2024-01-01"), DateBound())
        body = log_envelope(USER, result)
        assert body["from"] == "Mon Jan 01 2024"
        assert "to" not in body

    def test_log_envelope_both_bounds(self):
        result = LogQueryResult([{"description": "run"}], DateBound("2024-01-01"),
                                DateBound("2024-01-31"))
        body = log_envelope(USER, result)
        assert list(body) == ["_id", "username", "from", "to", "count", "log"]
        assert body["to"] == "Wed Jan 31 2024"
        assert body["count"] == 1


class TestResponses:
    """Test cases for API Gateway responses."""

    def test_json_response(self):
        response = json_response(200, {"duration": Decimal("30")})
        assert response["statusCode"] == 200
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"
        assert json.loads(response["body"]) == {"duration": 30}

    def test_error_response(self):
        response = error_response(404, "ID not found")
        assert response["statusCode"] == 404
        assert json.loads(response["body"]) == {"error": "ID not found"}

    @pytest.mark.parametrize("error, status", [
        (ValidationError("bad"), 400),
        (DuplicateUsernameError("alice"), 400),
        (UserNotFoundError("u1"), 404),
        (StoreError("boom"), 500),
        (RuntimeError("other"), 500),
    ])
    def test_status_for_error(self, error, status):
        assert status_for_error(error) == status


class TestParseBody:
    """Test cases for request body decoding."""

    def test_dict_body(self):
        assert parse_body({"body": {"username": "alice"}}) == {"username": "alice"}

    def test_json_string_body(self):
        assert parse_body({"body": '{"username": "alice"}'}) == {"username": "alice"}

    def test_missing_body(self):
        assert parse_body({}) == {}
        assert parse_body({"body": ""}) == {}

    def test_form_body(self):
        event = {
            "headers": {"content-type": "application/x-www-form-urlencoded"},
            "body": "description=morning+run&duration=30&date="
        }
        assert parse_body(event) == {"description": "morning run", "duration": "30", "date": ""}

    def test_base64_form_body(self):
        event = {
            "headers": {"Content-Type": "application/x-www-form-urlencoded; charset=UTF-8"},
            "isBase64Encoded": True,
            "body": base64.b64encode(b"username=alice").decode("ascii")
        }
        assert parse_body(event) == {"username": "alice"}

    @pytest.mark.parametrize("body", [
        "not base64!",
        "dXNlcm5hbWU",
        "caf\u00e9",
        base64.b64encode(b"\xff\xfe\x00").decode("ascii"),
    ])
    def test_undecodable_base64_body(self, body):
        with pytest.raises(ValidationError, match="Invalid base64 request body"):
            parse_body({"isBase64Encoded": True, "body": body})

    def test_invalid_json(self):
        with pytest.raises(json.JSONDecodeError):
            parse_body({"body": "this is not valid JSON"})

    def test_non_object_json(self):
        with pytest.raises(json.JSONDecodeError):
            parse_body({"body": "[1, 2]"})


class TestParameters:
    """Test cases for path and query parameters."""

    def test_path_parameter(self):
        assert get_path_parameter({"pathParameters": {"id": "u1"}}, "_id", "id") == "u1"
        assert get_path_parameter({"pathParameters": None}, "_id") is None

    def test_query_parameters(self):
        assert get_query_parameters({"queryStringParameters": None}) == {}
        assert get_query_parameters({"queryStringParameters": {"limit": "1"}}) == {"limit": "1"}
