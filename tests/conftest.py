"""
Pytest configuration and shared fixtures for account monitor tests.
"""
import asyncio
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from core.config.settings import Settings, MT5ApiSettings, PollingSettings, LoggingSettings
from services.account_monitor.models import AccountSnapshot

TEST_BASE_URL = "https://mt5.test"


@pytest.fixture
def test_settings():
    """Test settings configuration."""
    return Settings(
        environment="testing",
        mt5_api=MT5ApiSettings(base_url=TEST_BASE_URL, request_timeout_seconds=2.0),
        polling=PollingSettings(interval_seconds=0.1),
        logging=LoggingSettings(file_enabled=False, console_enabled=False),
    )


class RecordingTransport:
    """httpx mock transport that records requests and answers via ``handler``."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if asyncio.iscoroutine(result):
            result = await result
        return result

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self), base_url=TEST_BASE_URL)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def recording_transport():
    """Factory for a RecordingTransport around a request handler."""
    return RecordingTransport


def _route(responses: Dict[str, httpx.Response]) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering by request path; unknown paths get a 404."""
    def _handler(request: httpx.Request) -> httpx.Response:
        template = responses.get(request.url.path)
        if template is None:
            return httpx.Response(404)
        # Fresh response per request; httpx binds a response to one request
        return httpx.Response(template.status_code, headers=template.headers, content=template.content)
    return _handler


@pytest.fixture
def route():
    return _route


class ControlledFetch:
    """Async fetch stand-in whose calls can be held open and resolved by the test."""

    def __init__(self, auto: bool = True):
        self.auto = auto
        self.calls = 0
        self.pending: List[asyncio.Future] = []
        self.snapshot = AccountSnapshot(balance=100.0, accountNumber="12345")
        self.error: Optional[Exception] = None

    async def __call__(self) -> AccountSnapshot:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.auto:
            return self.snapshot.model_copy(update={"balance": float(self.calls)})
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    def resolve(self, index: int, snapshot: AccountSnapshot) -> None:
        self.pending[index].set_result(snapshot)

    def fail(self, index: int, error: Exception) -> None:
        self.pending[index].set_exception(error)


@pytest.fixture
def controlled_fetch():
    return ControlledFetch
