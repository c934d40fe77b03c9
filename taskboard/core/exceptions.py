"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status it is rendered with by the
handlers registered in `taskboard.main`.
"""

from fastapi import status


class TaskBoardError(Exception):
    """Base exception for the Task Board API."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(TaskBoardError):
    """Raised when a field is missing or invalid."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(TaskBoardError):
    """Raised when the bearer token is missing, invalid, expired or revoked."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(TaskBoardError):
    """Raised when the caller is authenticated but lacks membership or role."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(TaskBoardError):
    """Raised when an id, code or user cannot be resolved."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(TaskBoardError):
    """Raised on uniqueness violations."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class CodeGenerationExhausted(ConflictError):
    """Raised when no unused team code was found within the retry bound."""
    default_message = "Could not generate a unique team code"


class InternalError(TaskBoardError):
    """Raised when the store fails."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class UnavailableError(TaskBoardError):
    """Raised when the store is locked or times out."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable"
