"""Account snapshot fetching and polling."""

from .fetcher import AccountSnapshotFetcher, fetch_snapshot
from .models import (
    AccountDetails,
    AccountSnapshot,
    AccountSummary,
    PollingState,
    SchedulerStatus,
)
from .scheduler import PollingScheduler

__all__ = [
    "AccountSnapshotFetcher",
    "fetch_snapshot",
    "AccountDetails",
    "AccountSnapshot",
    "AccountSummary",
    "PollingState",
    "SchedulerStatus",
    "PollingScheduler",
]
