"""
AWS Lambda function for logging an exercise against a user.
Validates the exercise, stores it in DynamoDB and appends it to the user's log.

Route: POST /api/users/{_id}/exercises

Input Format:
------------
{
    "pathParameters": {"_id": "string"},  # Required: User's unique identifier
    "body": {
        "description": "string",          # Required: 1-16 characters
        "duration": integer,              # Required: positive count
        "date": "YYYY-MM-DD"              # Optional: also YYYY/MM/DD, defaults to today
    }
}
The body may be JSON or form-encoded (Content-Type: application/x-www-form-urlencoded).

Output Format:
-------------
Success (200):
{
    "statusCode": 200,
    "headers": {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*"
    },
    "body": {
        "_id": "string",
        "username": "string",
        "description": "string",
        "duration": integer,
        "date": "Mon Jan 01 2024"
    }
}

Error (400, 404, 500):
{
    "statusCode": 400/404/500,
    "headers": {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*"
    },
    "body": {
        "error": "Error message"
    }
}
"""

import json
import logging
from typing import Dict, Any

from exercise_log import config
from exercise_log.dates import format_date, parse_stored_date
from exercise_log.errors import ExerciseLogError, ValidationError
from exercise_log.events import get_path_parameter, parse_body
from exercise_log.responses import (
    error_response,
    json_response,
    status_for_error,
    user_envelope,
)
from exercise_log.store import ExerciseLogStore
from exercise_log.validation import normalize_exercise, validate_exercise

# Set up logging
logger = logging.getLogger()
logger.setLevel(config.get_log_level())


class RequestHandler:
    """Validates add-exercise requests and writes them through the store."""

    def __init__(self, store: ExerciseLogStore):
        self.store = store

    def extract_parameters(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """Pull the user id and exercise fields out of the event."""
        body = parse_body(event)
        return {
            'user_id': get_path_parameter(event, '_id', 'id') or body.get('_id') or body.get('userId'),
            'description': body.get('description'),
            'duration': body.get('duration'),
            'date': body.get('date'),
        }

    def add_exercise(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and store one exercise.

        Returns:
            Response body with the user and the stored exercise
        """
        if not params.get('user_id'):
            raise ValidationError('user id is required')

        is_valid, error_message = validate_exercise(params)
        if not is_valid:
            raise ValidationError(error_message)

        exercise = normalize_exercise(params)
        user, record = self.store.add_exercise(
            params['user_id'],
            exercise['description'],
            exercise['duration'],
            exercise['date'],
        )

        return (user_envelope(user)
                .add('description', record['description'])
                .add('duration', int(record['duration']))
                .add('date', format_date(parse_stored_date(record['date'])))
                .build())

    def handle(self, event: Dict[str, Any]) -> Dict[str, Any]:
        try:
            params = self.extract_parameters(event)
            logger.info("Received exercise for user %s: description=%r, duration=%r, date=%r",
                        params['user_id'], params['description'],
                        params['duration'], params['date'])
            return json_response(200, self.add_exercise(params))

        except json.JSONDecodeError:
            logger.error("Invalid JSON format in request body")
            return error_response(400, 'Invalid JSON format in request body')
        except ExerciseLogError as e:
            logger.error("Error adding exercise: %s", str(e))
            return error_response(status_for_error(e), str(e))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error in lambda_handler: %s", str(e), exc_info=True)
            return error_response(500, 'Internal server error')


def lambda_handler(event: Dict[str, Any], _: Any) -> Dict[str, Any]:
    """Handle a request to log an exercise for a user."""
    try:
        store = ExerciseLogStore.from_env()
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Error connecting to DynamoDB: %s", str(e), exc_info=True)
        return error_response(500, 'Internal server error')
    return RequestHandler(store).handle(event)
