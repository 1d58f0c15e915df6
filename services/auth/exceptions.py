"""Authentication exceptions for the MT5 login exchange.

These never cross the session client boundary; each one is folded into a
``LoginResult`` carrying its ``failure`` kind.
"""

from core.utils.exceptions import (
    MonitorException,
    UpstreamConnectionError,
    UpstreamResponseError,
    UpstreamTimeoutError,
    ValidationError,
)
from .models import LoginFailure


class AuthenticationError(MonitorException):
    """Base authentication error."""
    failure = LoginFailure.UNKNOWN


class CredentialValidationError(AuthenticationError, ValidationError):
    """Credentials failed local checks; no request was sent."""
    failure = LoginFailure.VALIDATION


class TokenRejectedError(AuthenticationError, UpstreamResponseError):
    """HTTP 200 came back but the body does not look like a session token."""
    failure = LoginFailure.BAD_TOKEN


class LoginApiError(AuthenticationError, UpstreamResponseError):
    """The login endpoint answered with a non-200 status."""
    failure = LoginFailure.API


class LoginNetworkError(AuthenticationError, UpstreamConnectionError):
    """The login request never got an answer."""
    failure = LoginFailure.NETWORK


class LoginTimeoutError(AuthenticationError, UpstreamTimeoutError):
    """The login request timed out."""
    failure = LoginFailure.TIMEOUT
