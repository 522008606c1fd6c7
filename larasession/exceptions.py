"""
Session Exception Classes
Session-specific exceptions with HTTP status codes
"""
from typing import Optional


class SessionException(Exception):
    """Base exception for all session exceptions"""
    status_code = 500
    message = "A session error occurred"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.__class__.message
        self.status_code = status_code or self.__class__.status_code
        super().__init__(self.message)


class StoreError(SessionException):
    """
    Session store failure

    Raised by stores when the backend cannot create, read, write or
    delete a record. A missing record is not a failure.

    Example:
        raise StoreError("Redis unavailable") from exc
    """
    status_code = 503
    message = "Session store unavailable"


class InvalidSessionError(SessionException):
    """
    Loaded session is no longer valid

    Only raised inside the session manager, which replaces the session
    with a fresh one.
    """
    status_code = 400
    message = "Session expired"


class SessionNotStartedError(SessionException):
    """
    No session on the current request

    Example:
        raise SessionNotStartedError("Make sure SessionMiddleware is registered.")
    """
    status_code = 500
    message = "Session not available"


class ConfigurationError(SessionException):
    """
    Invalid session configuration

    Example:
        raise ConfigurationError("SECRET_KEY is required for cookie session driver")
    """
    status_code = 500
    message = "Invalid session configuration"
