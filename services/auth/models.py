"""Authentication models for the MT5 credential login flow."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AuthStatus(Enum):
    """Authentication status enumeration."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    ERROR = "error"
    STOPPED = "stopped"


class LoginFailure(str, Enum):
    """Why a login attempt did not produce a session token."""
    VALIDATION = "validation"
    BAD_TOKEN = "bad_token"
    API = "api"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class Credentials(BaseModel):
    """One login attempt's input. Values are kept exactly as typed."""
    username: Optional[str] = ""
    password: Optional[str] = Field(default="", repr=False)
    server: Optional[str] = ""


class LoginResult(BaseModel):
    """Outcome of a login attempt; exactly one of ``token`` or ``error`` is set."""
    success: bool
    token: Optional[str] = Field(default=None, repr=False)
    error: Optional[str] = None
    failure: Optional[LoginFailure] = None

    @classmethod
    def ok(cls, token: str) -> "LoginResult":
        return cls(success=True, token=token)

    @classmethod
    def failed(cls, failure: LoginFailure, error: str) -> "LoginResult":
        return cls(success=False, error=error, failure=failure)
