"""MT5 credential login: validation, token exchange and session holding."""

from .service import AuthService
from .session_client import MT5SessionClient, login
from .validators import is_usable_token, validate_credentials
from .models import (
    AuthStatus,
    Credentials,
    LoginFailure,
    LoginResult,
)
from .exceptions import (
    AuthenticationError,
    CredentialValidationError,
    TokenRejectedError,
    LoginApiError,
    LoginNetworkError,
    LoginTimeoutError,
)

__all__ = [
    "AuthService",
    "MT5SessionClient",
    "login",
    "is_usable_token",
    "validate_credentials",
    "AuthStatus",
    "Credentials",
    "LoginFailure",
    "LoginResult",
    "AuthenticationError",
    "CredentialValidationError",
    "TokenRejectedError",
    "LoginApiError",
    "LoginNetworkError",
    "LoginTimeoutError",
]
