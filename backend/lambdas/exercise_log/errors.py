"""Exception hierarchy for the exercise log service."""


class ExerciseLogError(Exception):
    """Base exception for all exercise log failures."""


class ValidationError(ExerciseLogError):
    """Raised when request data fails validation."""


class UserNotFoundError(ExerciseLogError):
    """Raised when a user id does not resolve to a stored user."""

    def __init__(self, user_id: str):
        super().__init__('ID not found')
        self.user_id = user_id


class DuplicateUsernameError(ExerciseLogError):
    """Raised when registering a username that is already taken."""

    def __init__(self, username: str):
        super().__init__('Username already taken')
        self.username = username


class StoreError(ExerciseLogError):
    """Raised for DynamoDB failures."""
