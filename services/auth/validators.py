"""Pre-flight checks on login input and on the token the login endpoint returns."""

import re
from typing import Optional

from .models import Credentials

ACCOUNT_NUMBER_PATTERN = re.compile(r"^\d+$", re.ASCII)

# The MT5 web API reports some failures as HTTP 200 with a human-readable body.
# Scanning for these words keeps such bodies from being used as a token.
TOKEN_ERROR_KEYWORDS = ("error", "invalid", "failed", "denied", "unauthorized")
MIN_TOKEN_LENGTH = 10


def validate_credentials(credentials: Credentials) -> Optional[str]:
    """Return a message for the first problem found, or None if usable."""
    username = (credentials.username or "").strip()
    password = (credentials.password or "").strip()
    server = (credentials.server or "").strip()

    if not username:
        return "Username is required"
    if not password:
        return "Password is required"
    if not server:
        return "Server is required"

    if not ACCOUNT_NUMBER_PATTERN.match(username):
        return "Username must be a valid account number (numeric)"

    return None


def credential_error_field(message: str) -> str:
    """Map a validation message back to the field it is about."""
    for field in ("username", "password", "server"):
        if message.lower().startswith(field):
            return field
    return "credentials"


def is_usable_token(token: Optional[str]) -> bool:
    """Heuristic check that ``token`` is a session id rather than an error text."""
    if not token or len(token) < MIN_TOKEN_LENGTH:
        return False

    lowered = token.lower()
    return not any(keyword in lowered for keyword in TOKEN_ERROR_KEYWORDS)
