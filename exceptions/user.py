"""
Identity and authorization exceptions.
"""

from enums.error_code import ErrorCode
from .base import StorefrontException


class UserException(StorefrontException):
    """Base exception for user-related errors."""
    pass


class UnauthenticatedException(UserException):
    """Raised when no verified external identity accompanies the request."""

    error_code = ErrorCode.UNAUTHENTICATED

    def __init__(self, reason: str = "Login required"):
        super().__init__(reason, details={'reason': reason})
        self.reason = reason


class UserUnresolvableException(UserException):
    """Raised when the external identity cannot be mapped to an internal user."""

    error_code = ErrorCode.UNRESOLVABLE

    def __init__(self, external_id: str, reason: str):
        super().__init__(
            "Could not resolve user account, please sign in again",
            details={'external_id': external_id, 'reason': reason}
        )
        self.external_id = external_id
        self.reason = reason


class UserNotFoundException(UserException):
    """Raised when an internal user id does not exist."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, user_id: str):
        super().__init__(
            f"User {user_id} not found",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class AdminRequiredException(UserException):
    """Raised when a non-admin identity calls an admin operation."""

    error_code = ErrorCode.FORBIDDEN

    def __init__(self, subject: str | None = None):
        super().__init__(
            "Admin permission required",
            details={'subject': subject}
        )
        self.subject = subject
