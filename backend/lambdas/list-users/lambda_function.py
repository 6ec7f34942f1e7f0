"""
AWS Lambda function for listing registered users.

Route: GET /api/users

Output Format:
-------------
Success (200):
{
    "statusCode": 200,
    "body": [
        {"_id": "string", "username": "string"},
        ...
    ]
}

Error (500):
{
    "statusCode": 500,
    "body": {"error": "Error message"}
}
"""

import logging
from typing import Dict, Any

from exercise_log import config
from exercise_log.errors import ExerciseLogError
from exercise_log.responses import error_response, json_response, status_for_error
from exercise_log.store import ExerciseLogStore

# Set up logging
logger = logging.getLogger()
logger.setLevel(config.get_log_level())


def list_users(store: ExerciseLogStore, _event: Dict[str, Any]) -> Dict[str, Any]:
    try:
        users = store.list_users()
        logger.info("Listed %s users", len(users))
        return json_response(200, users)
    except ExerciseLogError as e:
        logger.error("Error listing users: %s", str(e))
        return error_response(status_for_error(e), str(e))
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Error in lambda_handler: %s", str(e), exc_info=True)
        return error_response(500, 'Internal server error')


def lambda_handler(event: Dict[str, Any], _: Any) -> Dict[str, Any]:
    """Handle a request for all users."""
    try:
        store = ExerciseLogStore.from_env()
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Error connecting to DynamoDB: %s", str(e), exc_info=True)
        return error_response(500, 'Internal server error')
    return list_users(store, event)
