# services/auth/session_client.py

"""Login exchange against the MT5 web API."""

import json
from typing import Optional

import httpx

from core.config.settings import Settings
from core.logging import create_correlation_context, get_api_logger
from core.utils.exceptions import create_error_context
from .exceptions import (
    AuthenticationError,
    CredentialValidationError,
    LoginApiError,
    LoginNetworkError,
    LoginTimeoutError,
    TokenRejectedError,
)
from .models import Credentials, LoginFailure, LoginResult
from .validators import credential_error_field, is_usable_token, validate_credentials

logger = get_api_logger(__name__)

NETWORK_FAILURE_MESSAGE = "Network connection failed. Please check your internet connection."
TIMEOUT_MESSAGE = "Request timeout. Please try again."
BAD_TOKEN_MESSAGE = "Invalid authentication token received"
UNEXPECTED_MESSAGE = "An unexpected error occurred"


async def extract_error_message(response: httpx.Response) -> str:
    """Best human-readable message from a failed login response."""
    status = response.status_code
    try:
        await response.aread()
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            data = response.json()
            message = (data.get("message") or data.get("error")) if isinstance(data, dict) else None
            if not message:
                return f"API Error: {status}"
            # Some servers send numbers or objects here
            return message if isinstance(message, str) else json.dumps(message)
        return response.text or f"HTTP Error: {status}"
    except Exception:
        return f"Network Error: {status} {response.reason_phrase}".rstrip()


class MT5SessionClient:
    """Turns credentials into a session token, one request per attempt.

    The client owns an ``httpx.AsyncClient``; pass one in to share a pool or to
    mock the transport in tests.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.mt5_api.base_url,
            timeout=settings.mt5_api.request_timeout_seconds,
        )

    async def login(self, credentials: Credentials) -> LoginResult:
        """
        Run one login attempt.

        Never raises: every failure comes back as a ``LoginResult`` whose
        ``error`` is ready to show to a user.
        """
        create_correlation_context(service="session_client", operation="login")
        try:
            token = await self._exchange(credentials)
        except AuthenticationError as e:
            logger.warning(
                "Login failed",
                failure=e.failure.value,
                **create_error_context(e, "login"),
            )
            return LoginResult.failed(e.failure, e.message)
        except Exception as e:
            logger.error("Unexpected login failure", **create_error_context(e, "login"))
            return LoginResult.failed(LoginFailure.UNKNOWN, str(e) or UNEXPECTED_MESSAGE)

        logger.info("Login succeeded", account=credentials.username.strip())
        return LoginResult.ok(token)

    async def _exchange(self, credentials: Credentials) -> str:
        validation_error = validate_credentials(credentials)
        if validation_error:
            raise CredentialValidationError(
                validation_error,
                field=credential_error_field(validation_error),
            )

        params = {
            "user": credentials.username.strip(),
            "password": credentials.password,
            "server": credentials.server.strip(),
        }
        endpoint = self.settings.mt5_api.login_path

        try:
            response = await self._client.get(
                endpoint,
                params=params,
                headers={"Accept": "text/plain, application/json"},
            )
        # TimeoutException subclasses TransportError, so it must come first
        except httpx.TimeoutException as e:
            raise LoginTimeoutError(TIMEOUT_MESSAGE, endpoint=endpoint, details={"cause": str(e)}) from e
        except httpx.TransportError as e:
            raise LoginNetworkError(NETWORK_FAILURE_MESSAGE, endpoint=endpoint, details={"cause": str(e)}) from e

        logger.debug("Login response received", status_code=response.status_code)

        if response.status_code == 200:
            candidate = response.text
            if not is_usable_token(candidate):
                raise TokenRejectedError(BAD_TOKEN_MESSAGE, status_code=200, endpoint=endpoint)
            return candidate.strip()

        # The API signals domain errors (unknown server, bad password) with 201 and friends
        message = await extract_error_message(response)
        raise LoginApiError(message, status_code=response.status_code, endpoint=endpoint)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "MT5SessionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


async def login(credentials: Credentials, settings: Optional[Settings] = None) -> LoginResult:
    """One-shot login with a short-lived client."""
    async with MT5SessionClient(settings or Settings()) as client:
        return await client.login(credentials)
