"""
AWS Lambda function for retrieving a user's exercise log from DynamoDB.
Supports inclusive date range filtering and a head limit on the number of entries.

Route: GET /api/users/{_id}/logs?from=&to=&limit=

Input Format:
------------
{
    "pathParameters": {"_id": "string"},   # Required: User's unique identifier
    "queryStringParameters": {
        "from": "YYYY-MM-DD",              # Optional: lower bound, inclusive
        "to": "YYYY-MM-DD",                # Optional: upper bound, inclusive
        "limit": "integer"                 # Optional: return at most this many entries
    }
}

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
        "from": "Mon Jan 01 2024",         # Only when requested
        "to": "Wed Jan 31 2024",           # Only when requested
        "count": integer,
        "log": [
            {
                "description": "string",
                "duration": integer,
                "date": "Mon Jan 01 2024"
            },
            ...
        ]
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

Entries are returned in the order they were logged, not sorted by date.
An unparseable from/to produces an empty log; an unusable limit is ignored.
"""

import logging
from typing import Dict, Any

from exercise_log import config
from exercise_log.errors import ExerciseLogError, ValidationError
from exercise_log.events import get_path_parameter, get_query_parameters
from exercise_log.log_filter import query_log
from exercise_log.responses import error_response, json_response, log_envelope, status_for_error
from exercise_log.store import ExerciseLogStore

# Set up logging
logger = logging.getLogger()
logger.setLevel(config.get_log_level())


class LogService:
    """Fetches a user and runs the log query against its records."""

    def __init__(self, store: ExerciseLogStore):
        self.store = store

    def get_user_log(self, user_id: str, from_date: str = None,
                     to_date: str = None, limit: str = None) -> Dict[str, Any]:
        """
        Get a user's filtered exercise log.

        Args:
            user_id: The user's unique identifier
            from_date: Optional inclusive lower bound
            to_date: Optional inclusive upper bound
            limit: Optional maximum number of entries

        Returns:
            Response body with user fields, requested bounds, count and log
        """
        user = self.store.get_user(user_id)
        result = query_log(self.store, user, from_date, to_date, limit)
        return log_envelope(user, result)


class RequestHandler:
    """Handles API Gateway requests for a user's log."""

    def __init__(self, store: ExerciseLogStore):
        self.log_service = LogService(store)

    def extract_parameters(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """Pull the user id and filter parameters out of the event."""
        query_params = get_query_parameters(event)
        return {
            'user_id': get_path_parameter(event, '_id', 'id') or query_params.get('userId'),
            'from': query_params.get('from'),
            'to': query_params.get('to'),
            'limit': query_params.get('limit'),
        }

    def handle(self, event: Dict[str, Any]) -> Dict[str, Any]:
        try:
            params = self.extract_parameters(event)
            logger.info("Received log request: user_id=%s, from=%s, to=%s, limit=%s",
                        params['user_id'], params['from'], params['to'], params['limit'])

            if not params['user_id']:
                raise ValidationError('user id is required')

            body = self.log_service.get_user_log(
                params['user_id'], params['from'], params['to'], params['limit']
            )
            return json_response(200, body)

        except ExerciseLogError as e:
            logger.error("Error retrieving log: %s", str(e))
            return error_response(status_for_error(e), str(e))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error in lambda_handler: %s", str(e), exc_info=True)
            return error_response(500, 'Internal server error')


def lambda_handler(event: Dict[str, Any], _: Any) -> Dict[str, Any]:
    """Handle a request for a user's exercise log."""
    try:
        store = ExerciseLogStore.from_env()
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Error connecting to DynamoDB: %s", str(e), exc_info=True)
        return error_response(500, 'Internal server error')
    return RequestHandler(store).handle(event)
