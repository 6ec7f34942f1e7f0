"""Configuration read from the Lambda environment."""

import logging
import os
from typing import Optional

DEFAULT_USERS_TABLE = 'ExerciseLogUsers'
DEFAULT_EXERCISES_TABLE = 'ExerciseLogExercises'


def get_users_table_name() -> str:
    """Name of the DynamoDB table holding users."""
    return os.getenv('USERS_TABLE', DEFAULT_USERS_TABLE)


def get_exercises_table_name() -> str:
    """Name of the DynamoDB table holding exercise records."""
    return os.getenv('EXERCISES_TABLE', DEFAULT_EXERCISES_TABLE)


def get_region() -> Optional[str]:
    """
    AWS region for DynamoDB.

    Returns:
        AWS_REGION, falling back to AWS_DEFAULT_REGION, or None to let boto3 decide
    """
    return os.getenv('AWS_REGION') or os.getenv('AWS_DEFAULT_REGION')


def get_endpoint_url() -> Optional[str]:
    """Endpoint override for DynamoDB Local, None in AWS."""
    return os.getenv('DYNAMODB_ENDPOINT_URL') or None


def get_log_level() -> int:
    """Log level from LOG_LEVEL (name such as DEBUG), defaults to INFO."""
    level = logging.getLevelName(os.getenv('LOG_LEVEL', 'INFO').upper())
    return level if isinstance(level, int) else logging.INFO
