"""
AWS Lambda function for registering a user.

Route: POST /api/users

Input Format:
------------
{
    "body": {
        "username": "string"    # Required: must not already be registered
    }
}

Output Format:
-------------
Success (200):
{
    "statusCode": 200,
    "body": {
        "_id": "string",
        "username": "string"
    }
}

Error (400, 500):
{
    "statusCode": 400/500,
    "body": {
        "error": "Error message"
    }
}
"""

import json
import logging
from typing import Dict, Any

from exercise_log import config
from exercise_log.errors import ExerciseLogError, ValidationError
from exercise_log.events import parse_body
from exercise_log.responses import error_response, json_response, status_for_error
from exercise_log.store import ExerciseLogStore
from exercise_log.validation import validate_username

# Set up logging
logger = logging.getLogger()
logger.setLevel(config.get_log_level())


class RequestHandler:
    """Registers users through the store."""

    def __init__(self, store: ExerciseLogStore):
        self.store = store

    def handle(self, event: Dict[str, Any]) -> Dict[str, Any]:
        try:
            username = parse_body(event).get('username')
            logger.info("Received registration for username %r", username)

            is_valid, error_message = validate_username(username)
            if not is_valid:
                raise ValidationError(error_message)

            return json_response(200, self.store.create_user(username.strip()))

        except json.JSONDecodeError:
            logger.error("Invalid JSON format in request body")
            return error_response(400, 'Invalid JSON format in request body')
        except ExerciseLogError as e:
            logger.error("Error creating user: %s", str(e))
            return error_response(status_for_error(e), str(e))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error in lambda_handler: %s", str(e), exc_info=True)
            return error_response(500, 'Internal server error')


def lambda_handler(event: Dict[str, Any], _: Any) -> Dict[str, Any]:
    """Handle a user registration request."""
    try:
        store = ExerciseLogStore.from_env()
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Error connecting to DynamoDB: %s", str(e), exc_info=True)
        return error_response(500, 'Internal server error')
    return RequestHandler(store).handle(event)
