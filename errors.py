"""
Error taxonomy shared by the services and the HTTP boundary.

Services raise these; the handlers registered in main.create_app turn them into
the response envelope with the status code carried by each class.
"""
from typing import Any, Optional

from fastapi import status


class TaskTrackerError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[Any] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(TaskTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class Unauthorized(TaskTrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class TokenInvalid(Unauthorized):
    default_message = "Invalid token"


class TokenExpired(Unauthorized):
    default_message = "Token has expired"


class Forbidden(TaskTrackerError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class Conflict(TaskTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists with this email"


class InvalidCredentials(TaskTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class AccountDeactivated(TaskTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Account is deactivated"


class NotFound(TaskTrackerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class InternalError(TaskTrackerError):
    pass
