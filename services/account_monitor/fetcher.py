"""Reads the two account endpoints concurrently and merges them into one snapshot."""

import asyncio
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from core.config.settings import Settings
from core.logging import get_api_logger
from core.utils.exceptions import (
    UpstreamConnectionError,
    UpstreamError,
    UpstreamResponseError,
    UpstreamTimeoutError,
    create_error_context,
)
from .models import AccountDetails, AccountSnapshot, AccountSummary

logger = get_api_logger(__name__)

SourceModel = TypeVar("SourceModel", bound=BaseModel)


class AccountSnapshotFetcher:
    """Fetches account snapshots for a session token.

    ``fetch_snapshot`` never raises. A source that fails in any way is treated
    as absent and its fields fall back to defaults; inside a readable source a
    single unreadable field falls back on its own.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.mt5_api.base_url,
            timeout=settings.mt5_api.request_timeout_seconds,
        )

    async def fetch_snapshot(self, token: Optional[str]) -> AccountSnapshot:
        if not token or not token.strip():
            logger.error("No authentication token provided")
            return AccountSnapshot.defaults()

        try:
            summary, details = await asyncio.gather(
                self._read_source(self.settings.mt5_api.summary_path, token, AccountSummary),
                self._read_source(self.settings.mt5_api.details_path, token, AccountDetails),
            )
            return AccountSnapshot.merge(summary, details)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Error fetching account information", **create_error_context(e, "fetch_snapshot"))
            return AccountSnapshot.defaults()

    async def _read_source(self, endpoint: str, token: str,
                           model: Type[SourceModel]) -> Optional[SourceModel]:
        """Read one endpoint; any failure is logged and yields None."""
        try:
            return await self._request(endpoint, token, model)
        except UpstreamError as e:
            logger.warning("Account source unavailable", **create_error_context(e, "read_source"))
            return None

    async def _request(self, endpoint: str, token: str,
                       model: Type[SourceModel]) -> SourceModel:
        try:
            response = await self._client.get(endpoint, params={"id": token})
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Request to {endpoint} timed out", endpoint=endpoint) from e
        except httpx.TransportError as e:
            raise UpstreamConnectionError(f"Request to {endpoint} failed: {e}", endpoint=endpoint) from e

        if not response.is_success:
            raise UpstreamResponseError(
                f"Account request failed: {response.status_code}",
                status_code=response.status_code,
                endpoint=endpoint,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamResponseError(
                f"Failed to parse response from {endpoint}",
                status_code=response.status_code,
                endpoint=endpoint,
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamResponseError(
                f"Expected a JSON object from {endpoint}, got {type(payload).__name__}",
                status_code=response.status_code,
                endpoint=endpoint,
            )

        return model.model_validate(payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AccountSnapshotFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


async def fetch_snapshot(token: Optional[str], settings: Optional[Settings] = None) -> AccountSnapshot:
    """One-shot fetch with a short-lived client."""
    async with AccountSnapshotFetcher(settings or Settings()) as fetcher:
        return await fetcher.fetch_snapshot(token)
