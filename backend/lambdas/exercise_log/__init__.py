"""
Shared code for the exercise log Lambda functions.

Each Lambda (create-user, list-users, add-exercise, get-logs) imports its
storage, validation and log filtering logic from here.
"""

__version__ = "1.0.0"
