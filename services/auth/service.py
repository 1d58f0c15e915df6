# services/auth/service.py

from typing import Optional

from core.config.settings import Settings
from core.logging import get_audit_logger
from .models import AuthStatus, Credentials, LoginResult
from .session_client import MT5SessionClient

logger = get_audit_logger(__name__)


class AuthService:
    """Holds the MT5 session token for the lifetime of an authenticated session.

    The token lives only in memory. It is dropped on logout and never written
    anywhere.
    """

    def __init__(self, settings: Settings, session_client: Optional[MT5SessionClient] = None):
        self.settings = settings
        self.session_client = session_client or MT5SessionClient(settings)
        self._status = AuthStatus.UNAUTHENTICATED
        self._token: Optional[str] = None
        self._account: Optional[str] = None
        self._last_error: Optional[str] = None

    @property
    def status(self) -> AuthStatus:
        return self._status

    @property
    def token(self) -> Optional[str]:
        """Current session token, or None when not authenticated."""
        return self._token if self.is_authenticated() else None

    @property
    def account(self) -> Optional[str]:
        return self._account

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def is_authenticated(self) -> bool:
        return self._status == AuthStatus.AUTHENTICATED and self._token is not None

    async def start(self) -> None:
        logger.info("AuthService started", status=self._status.value)

    async def login(self, credentials: Credentials) -> LoginResult:
        """Log in and keep the token on success. A failed attempt clears any old token."""
        self._status = AuthStatus.AUTHENTICATING
        self._last_error = None

        result = await self.session_client.login(credentials)

        if result.success and result.token:
            self._token = result.token
            self._account = (credentials.username or "").strip()
            self._status = AuthStatus.AUTHENTICATED
            logger.info("Session established", account=self._account)
        else:
            self._token = None
            self._account = None
            self._status = AuthStatus.ERROR
            self._last_error = result.error or "Login failed. Please check your credentials."
            logger.warning("Session not established", failure=result.failure, reason=self._last_error)

        return result

    def logout(self) -> bool:
        """Discard the session token. Returns False if there was no session."""
        had_session = self._token is not None
        if had_session:
            logger.info("Session discarded", account=self._account)
        self._token = None
        self._account = None
        self._last_error = None
        self._status = AuthStatus.UNAUTHENTICATED
        return had_session

    async def stop(self) -> None:
        """Drop the session and close the HTTP client."""
        self.logout()
        await self.session_client.aclose()
        self._status = AuthStatus.STOPPED
        logger.info("AuthService stopped")
