"""
Shared fixtures and configurations for Lambda function tests.
"""

import os
import importlib.util
import pytest
import boto3
from moto import mock_aws

from exercise_log.store import ExerciseLogStore

LAMBDAS_DIR = os.path.join(os.path.dirname(__file__), "..")

USERS_TABLE = "ExerciseLogUsers"
EXERCISES_TABLE = "ExerciseLogExercises"


# Helper to import modules from specific Lambda directories
def import_lambda_module(lambda_dir, module_name="lambda_function"):
    """Import a module from a specific Lambda directory."""
    module_path = os.path.join(LAMBDAS_DIR, lambda_dir, f"{module_name}.py")

    if not os.path.exists(module_path):
        return None

    spec = importlib.util.spec_from_file_location(f"{lambda_dir}.{module_name}", module_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def create_user_module():
    """Import the create-user Lambda module."""
    return import_lambda_module("create-user")


@pytest.fixture
def list_users_module():
    """Import the list-users Lambda module."""
    return import_lambda_module("list-users")


@pytest.fixture
def add_exercise_module():
    """Import the add-exercise Lambda module."""
    return import_lambda_module("add-exercise")


@pytest.fixture
def get_logs_module():
    """Import the get-logs Lambda module."""
    return import_lambda_module("get-logs")


# DynamoDB fixtures
@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for boto3."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("USERS_TABLE", USERS_TABLE)
    monkeypatch.setenv("EXERCISES_TABLE", EXERCISES_TABLE)
    monkeypatch.delenv("DYNAMODB_ENDPOINT_URL", raising=False)


@pytest.fixture
def dynamodb(aws_credentials):
    """Mock DynamoDB with the users and exercises tables."""
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name="us-east-1")

        resource.create_table(
            TableName=USERS_TABLE,
            KeySchema=[
                {"AttributeName": "_id", "KeyType": "HASH"}
            ],
            AttributeDefinitions=[
                {"AttributeName": "_id", "AttributeType": "S"},
                {"AttributeName": "username", "AttributeType": "S"}
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "UsernameIndex",
                    "KeySchema": [
                        {"AttributeName": "username", "KeyType": "HASH"}
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                    "ProvisionedThroughput": {
                        "ReadCapacityUnits": 5,
                        "WriteCapacityUnits": 5
                    }
                }
            ],
            ProvisionedThroughput={"ReadCapacityUnits": 5, "WriteCapacityUnits": 5}
        )

        resource.create_table(
            TableName=EXERCISES_TABLE,
            KeySchema=[
                {"AttributeName": "_id", "KeyType": "HASH"}
            ],
            AttributeDefinitions=[
                {"AttributeName": "_id", "AttributeType": "S"}
            ],
            ProvisionedThroughput={"ReadCapacityUnits": 5, "WriteCapacityUnits": 5}
        )

        yield resource


@pytest.fixture
def store(dynamodb):
    """Record store bound to the mock tables."""
    return ExerciseLogStore(USERS_TABLE, EXERCISES_TABLE, dynamodb=dynamodb)


@pytest.fixture
def sample_exercises():
    """Sample exercises, in the order they are logged."""
    return [
        {"description": "run", "duration": 30, "date": "2024-01-03"},
        {"description": "swim", "duration": 45, "date": "2024-01-01"},
        {"description": "bike", "duration": 60, "date": "2024-01-10"},
        {"description": "yoga", "duration": 20, "date": "2024-01-05"},
    ]


@pytest.fixture
def populated_user(store, sample_exercises):
    """A registered user with the sample exercises logged."""
    from datetime import datetime

    user = store.create_user("alice")
    for exercise in sample_exercises:
        store.add_exercise(
            user["_id"],
            exercise["description"],
            exercise["duration"],
            datetime.strptime(exercise["date"], "%Y-%m-%d").date(),
        )
    return user


def api_event(user_id=None, body=None, query=None, headers=None):
    """Build an API Gateway proxy event."""
    event = {}
    if user_id is not None:
        event["pathParameters"] = {"_id": user_id}
    if body is not None:
        event["body"] = body
    if query is not None:
        event["queryStringParameters"] = query
    if headers is not None:
        event["headers"] = headers
    return event
