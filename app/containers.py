# DI container for the account monitor
from dependency_injector import containers, providers
import asyncio
from core.config.settings import Settings
from services.auth.session_client import MT5SessionClient
from services.auth.service import AuthService
from services.account_monitor.fetcher import AccountSnapshotFetcher


class AppContainer(containers.DeclarativeContainer):
    """Application dependency injection container"""

    # Configuration
    settings = providers.Singleton(Settings)

    # Shutdown event for graceful shutdown
    shutdown_event = providers.Singleton(asyncio.Event)

    # MT5 login exchange
    session_client = providers.Singleton(
        MT5SessionClient,
        settings=settings,
    )

    # Auth service holds the session token once issued
    auth_service = providers.Singleton(
        AuthService,
        settings=settings,
        session_client=session_client,
    )

    # Snapshot fetcher shared by every scheduler in the process
    snapshot_fetcher = providers.Singleton(
        AccountSnapshotFetcher,
        settings=settings,
    )
