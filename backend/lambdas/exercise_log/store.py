"""
DynamoDB record store for users and their exercise records.

Users live in one table keyed by ``_id`` with a ``UsernameIndex`` GSI; each
user item holds ``log``, the ordered list of its exercise record ids.
Exercise records live in a second table keyed by ``_id``.
"""

import logging
import time
import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from exercise_log import config
from exercise_log.dates import to_storage, today
from exercise_log.errors import DuplicateUsernameError, StoreError, UserNotFoundError

logger = logging.getLogger(__name__)

USERNAME_INDEX = 'UsernameIndex'
# DynamoDB caps BatchGetItem at 100 keys per request
BATCH_GET_LIMIT = 100
MAX_UNPROCESSED_RETRIES = 5
# Doubled after each retry of unprocessed keys
RETRY_BASE_DELAY = 0.05


def new_id() -> str:
    """Generate an opaque 24 character hex identifier."""
    return uuid.uuid4().hex[:24]


class ExerciseLogStore:
    """Create and fetch users and exercise records in DynamoDB."""

    def __init__(self, users_table_name: str, exercises_table_name: str,
                 dynamodb: Any = None):
        self.dynamodb = dynamodb or boto3.resource(
            'dynamodb',
            region_name=config.get_region(),
            endpoint_url=config.get_endpoint_url(),
        )
        self.users_table_name = users_table_name
        self.exercises_table_name = exercises_table_name
        self.users = self.dynamodb.Table(users_table_name)
        self.exercises = self.dynamodb.Table(exercises_table_name)

    @classmethod
    def from_env(cls) -> 'ExerciseLogStore':
        """Build a store from the table names in the environment."""
        return cls(config.get_users_table_name(), config.get_exercises_table_name())

    # ===== Users =====

    def create_user(self, username: str) -> Dict[str, Any]:
        """
        Register a new user with an empty log.

        Raises:
            DuplicateUsernameError: if the username is already registered
            StoreError: on DynamoDB failures
        """
        try:
            response = self.users.query(
                IndexName=USERNAME_INDEX,
                KeyConditionExpression=Key('username').eq(username),
            )
            if response.get('Items'):
                raise DuplicateUsernameError(username)

            user = {'_id': new_id(), 'username': username, 'log': []}
            self.users.put_item(
                Item=user,
                ConditionExpression='attribute_not_exists(#id)',
                ExpressionAttributeNames={'#id': '_id'},
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Error creating user: {str(e)}") from e

        logger.info("Created user %s (%s)", user['_id'], username)
        return {'_id': user['_id'], 'username': user['username']}

    def list_users(self) -> List[Dict[str, Any]]:
        """Return every user as {_id, username}, ordered by username then id."""
        users = []
        scan_kwargs = {
            'ProjectionExpression': '#id, username',
            'ExpressionAttributeNames': {'#id': '_id'},
        }
        try:
            while True:
                response = self.users.scan(**scan_kwargs)
                users.extend(response.get('Items', []))
                if 'LastEvaluatedKey' not in response:
                    break
                scan_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Error listing users: {str(e)}") from e

        users.sort(key=lambda u: (u.get('username', ''), u.get('_id', '')))
        return [{'_id': u['_id'], 'username': u['username']} for u in users]

    def get_user(self, user_id: str) -> Dict[str, Any]:
        """
        Fetch a user item, including its log of exercise ids.

        Raises:
            UserNotFoundError: if no user has this id
            StoreError: on DynamoDB failures
        """
        try:
            response = self.users.get_item(Key={'_id': user_id}, ConsistentRead=True)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Error retrieving user: {str(e)}") from e

        user = response.get('Item')
        if not user:
            raise UserNotFoundError(user_id)
        user.setdefault('log', [])
        return user

    # ===== Exercise records =====

    def add_exercise(self, user_id: str, description: str, duration: int,
                     exercise_date: Optional[date] = None
                     ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Create an exercise record and append it to the user's log.

        The record is written before the log is updated so a user's log never
        references a record that was not persisted. A missing date is stamped
        with today's date.

        Returns:
            Tuple of (user, record)
        """
        user = self.get_user(user_id)
        record = {
            '_id': new_id(),
            'description': description,
            'duration': int(duration),
            'date': to_storage(exercise_date or today()),
        }

        try:
            self.exercises.put_item(Item=record)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Error saving exercise: {str(e)}") from e

        try:
            self.users.update_item(
                Key={'_id': user_id},
                UpdateExpression='SET #log = list_append(if_not_exists(#log, :empty), :ids)',
                ConditionExpression='attribute_exists(#id)',
                ExpressionAttributeNames={'#log': 'log', '#id': '_id'},
                ExpressionAttributeValues={':ids': [record['_id']], ':empty': []},
            )
        except ClientError as e:
            self._discard_exercise(record['_id'])
            if e.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException':
                raise UserNotFoundError(user_id) from e
            raise StoreError(f"Error updating user log: {str(e)}") from e
        except BotoCoreError as e:
            self._discard_exercise(record['_id'])
            raise StoreError(f"Error updating user log: {str(e)}") from e

        logger.info("Added exercise %s to user %s", record['_id'], user_id)
        return user, record

    def _discard_exercise(self, exercise_id: str) -> None:
        """Remove a record whose log append failed."""
        try:
            self.exercises.delete_item(Key={'_id': exercise_id})
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to remove orphaned exercise %s: %s", exercise_id, str(e))

    def get_exercises(self, exercise_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """
        Fetch exercise records by id.

        Ids with no stored record are simply absent from the result; the
        caller decides what to do with them. Keys DynamoDB leaves unprocessed
        are retried with exponential backoff.

        Raises:
            StoreError: on DynamoDB failures, or keys still unprocessed after retries

        Returns:
            Dict mapping record id to record item
        """
        unique_ids = list(dict.fromkeys(exercise_ids))
        records = {}
        for start in range(0, len(unique_ids), BATCH_GET_LIMIT):
            chunk = unique_ids[start:start + BATCH_GET_LIMIT]
            for item in self._batch_get(chunk):
                records[item['_id']] = item
        return records

    def _batch_get(self, exercise_ids: List[str]) -> List[Dict[str, Any]]:
        request = {
            self.exercises_table_name: {
                'Keys': [{'_id': exercise_id} for exercise_id in exercise_ids]
            }
        }
        items = []
        try:
            for attempt in range(MAX_UNPROCESSED_RETRIES + 1):
                if attempt:
                    time.sleep(RETRY_BASE_DELAY * 2 ** (attempt - 1))
                response = self.dynamodb.batch_get_item(RequestItems=request)
                items.extend(response.get('Responses', {}).get(self.exercises_table_name, []))
                request = response.get('UnprocessedKeys') or {}
                if not request:
                    return items
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Error retrieving exercises: {str(e)}") from e

        unprocessed = len(request.get(self.exercises_table_name, {}).get('Keys', []))
        logger.error("Gave up on %s unprocessed exercise keys", unprocessed)
        raise StoreError(f"Error retrieving exercises: {unprocessed} keys left unprocessed")
