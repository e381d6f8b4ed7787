# socialride/core/errors.py
from enum import IntEnum

from fastapi import status


class ErrorCode(IntEnum):
    """
    Numeric codes carried in the `error.error_code` field of every
    result envelope. Clients branch on these, never on messages.
    """

    NO_ERROR = 0
    USERNAME_AVAILABILITY = 10
    INVALID_AUTHENTICATION = 11
    AUTHENTICATION_GENERIC = 12
    REGISTRATION_GENERIC = 13
    USER_GET_ALL = 14
    USER_GET = 15
    USER_UPDATE = 16
    USER_DELETE = 17
    USER_STATS = 18
    REGISTRATION_BYPASS = 19


class AuthError(Exception):
    """
    Base class for every failure the identity-session module reports.

    Each subclass fixes a default HTTP status, envelope code and message.
    Callers may override the code (e.g. a store failure while deleting a
    user is reported with USER_DELETE).
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: ErrorCode = ErrorCode.AUTHENTICATION_GENERIC
    default_message: str = "Authentication error"

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: ErrorCode | None = None,
        status_code: int | None = None,
    ):
        self.message = message or self.default_message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    # Same message for unknown username and wrong password.
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = ErrorCode.INVALID_AUTHENTICATION
    default_message = "Username or password is incorrect"


class UsernameTaken(AuthError):
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.USERNAME_AVAILABILITY

    def __init__(self, username: str, **kwargs):
        self.username = username
        super().__init__(f"Username '{username}' already exists.", **kwargs)


class InvalidUsername(AuthError):
    status_code = 422
    error_code = ErrorCode.USERNAME_AVAILABILITY
    default_message = "Username cannot be empty"


class StoreFailure(AuthError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = ErrorCode.AUTHENTICATION_GENERIC
    default_message = "User store is unavailable"


class UnknownSubject(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = ErrorCode.INVALID_AUTHENTICATION
    default_message = "Token subject no longer exists"


class SigningFailure(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = ErrorCode.AUTHENTICATION_GENERIC
    default_message = "Token signing is misconfigured"


class PolicyDenied(AuthError):
    """
    Raised by the policy evaluator.

    401 when the token itself is missing, malformed, tampered with or
    expired; 403 when the token is valid but its claims do not satisfy
    the policy.
    """

    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.INVALID_AUTHENTICATION
    default_message = "Access denied"


class UserNotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.USER_GET
    default_message = "User not found"
