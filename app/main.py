# app/main.py

import asyncio
import functools
import signal
import sys
from typing import Callable, Optional

from core.logging import configure_logging, get_error_logger, get_logger, get_statistics
from core.config.validator import validate_startup_configuration
from app.containers import AppContainer
from app.rendering import format_update
from services.auth.models import Credentials
from services.account_monitor.models import AccountSnapshot, PollingState
from services.account_monitor.scheduler import PollingScheduler

Renderer = Callable[[str], None]


class ApplicationOrchestrator:
    """Logs in, polls the account and renders every update until shutdown."""

    def __init__(self, container: Optional[AppContainer] = None, renderer: Renderer = print):
        self.container = container or AppContainer()
        self.settings = self.container.settings()
        configure_logging(self.settings)
        self.logger = get_logger("account_monitor.main", component="application")
        self.error_logger = get_error_logger("account_monitor_errors")
        self.logger.debug("Logging configured", logging_stats=get_statistics())
        self.renderer = renderer

        self._shutdown_event: asyncio.Event = self.container.shutdown_event()
        self.scheduler: Optional[PollingScheduler] = None

    def _render(self, snapshot: Optional[AccountSnapshot], state: PollingState) -> None:
        self.renderer(format_update(snapshot, state))

    async def startup(self, credentials: Credentials) -> bool:
        """Validate configuration, log in and start polling. False if login failed."""
        if not validate_startup_configuration(self.settings):
            self.error_logger.error("Configuration validation failed - cannot proceed with startup")
            return False

        auth_service = self.container.auth_service()
        await auth_service.start()
        result = await auth_service.login(credentials)
        if not result.success:
            failure = result.failure.value if result.failure else None
            self.error_logger.error("Login failed - cannot start polling", failure=failure)
            self.renderer(f"Login failed: {result.error}")
            return False

        fetcher = self.container.snapshot_fetcher()
        self.scheduler = PollingScheduler(
            functools.partial(fetcher.fetch_snapshot, auth_service.token),
            interval_seconds=self.settings.polling.interval_seconds,
        )
        self.scheduler.add_listener(self._render)

        if self.settings.polling.start_active:
            self.scheduler.start()
        else:
            await self.scheduler.manual_refresh()

        self.logger.info("Account monitor running", account=auth_service.account)
        return True

    async def shutdown(self) -> None:
        """Tear down polling first so nothing renders after logout."""
        self.logger.info("Shutting down account monitor...")
        try:
            if self.scheduler is not None:
                await self.scheduler.aclose()
        finally:
            await self.container.auth_service().stop()
            await self.container.snapshot_fetcher().aclose()
            self.logger.info("Account monitor shutdown complete")

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        try:
            self.logger.info(f"Received shutdown signal: {signal.strsignal(signum)}")
        except Exception as e:
            print(f"Error in signal handler: {e}", file=sys.stderr)
        self._loop.call_soon_threadsafe(self._shutdown_event.set)

    async def run(self, credentials: Credentials) -> int:
        """Run until a shutdown signal arrives. Returns a process exit code."""
        self._loop = asyncio.get_running_loop()
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        try:
            if not await self.startup(credentials):
                return 1
            await self._shutdown_event.wait()
            return 0
        finally:
            await self.shutdown()


async def main(credentials: Credentials) -> int:
    """Application entry point"""
    app = ApplicationOrchestrator()
    return await app.run(credentials)
