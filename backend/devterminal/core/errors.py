"""Domain errors translated to HTTP responses at the API boundary."""
from __future__ import annotations

from fastapi import status


class AppError(Exception):
    """Base class for errors that map to a fixed status and message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class DuplicateUsername(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Username already exists"


class InvalidCredentials(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid credentials"


class SelfFollow(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Cannot follow yourself"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class UserNotFound(NotFound):
    message = "User not found"


class PostNotFound(NotFound):
    message = "Post not found"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Access denied. No token provided."


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Invalid token"
