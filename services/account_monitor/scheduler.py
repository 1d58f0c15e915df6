"""
Lifecycle of recurring account snapshot fetches.

The scheduler is the only writer of its ``PollingState``. All methods must be
called from the event loop that runs the fetches; ``start``, ``stop``,
``toggle``, ``set_visible`` and ``close`` are synchronous and take effect
immediately.

Staleness rules:
- every fetch takes a sequence number when it is launched, and a result is
  only published if its sequence is newer than the last published one;
- ``stop()`` advances the epoch, so results of fetches launched before the
  stop are dropped without touching any state;
- after ``close()`` nothing is mutated or published again.
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Set

from core.logging import create_correlation_context, get_error_logger, get_monitoring_logger
from core.utils.exceptions import create_error_context
from .models import AccountSnapshot, PollingState, SchedulerStatus

logger = get_monitoring_logger(__name__)
error_logger = get_error_logger("scheduler_errors")

SnapshotFetch = Callable[[], Awaitable[AccountSnapshot]]
Listener = Callable[[Optional[AccountSnapshot], PollingState], None]


class PollingScheduler:
    """Polls ``fetch`` on a fixed interval while running and visible."""

    def __init__(self, fetch: SnapshotFetch, interval_seconds: float = 1.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._fetch = fetch
        self.interval_seconds = interval_seconds

        self._status = SchedulerStatus.STOPPED
        self._active = False
        self._visible = True

        self._timer_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self._listeners: List[Listener] = []

        self._sequence = 0
        self._last_published_sequence = 0
        self._epoch = 0
        self._loading: Set[int] = set()

        self._snapshot: Optional[AccountSnapshot] = None
        self._state = PollingState()

    # --- read-only views ---

    @property
    def state(self) -> PollingState:
        return self._state

    @property
    def snapshot(self) -> Optional[AccountSnapshot]:
        """Most recently published snapshot."""
        return self._snapshot

    @property
    def status(self) -> SchedulerStatus:
        return self._status

    @property
    def active(self) -> bool:
        return self._active

    @property
    def is_closed(self) -> bool:
        return self._status is SchedulerStatus.CLOSED

    @property
    def timer_armed(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for every publication. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # --- transitions ---

    def start(self) -> None:
        """STOPPED -> RUNNING: fetch once now, then every ``interval_seconds``."""
        if self.is_closed:
            logger.warning("start() called on a closed scheduler")
            return
        if self._status is not SchedulerStatus.STOPPED:
            return

        self._active = True
        self._status = SchedulerStatus.RUNNING if self._visible else SchedulerStatus.PAUSED
        self._launch(show_loading=True)
        if self._status is SchedulerStatus.RUNNING:
            self._arm_timer()
        self._refresh_state()
        logger.info("Polling started", status=self._status.value, interval_seconds=self.interval_seconds)

    def stop(self) -> None:
        """RUNNING/PAUSED -> STOPPED. Fetches already in flight are ignored when they land."""
        if self._status not in (SchedulerStatus.RUNNING, SchedulerStatus.PAUSED):
            return

        self._active = False
        self._disarm_timer()
        self._epoch += 1
        self._loading.clear()
        self._status = SchedulerStatus.STOPPED
        self._refresh_state()
        logger.info("Polling stopped", inflight=len(self._inflight))

    def toggle(self) -> bool:
        """Flip the active flag; returns the new value."""
        if self._active:
            self.stop()
        else:
            self.start()
        return self._active

    def set_visible(self, visible: bool) -> None:
        """Pause the timer while hidden and re-arm it when shown again.

        The active flag is left alone, so a hidden scheduler still reports itself
        as active and resumes by itself.
        """
        if self.is_closed or visible == self._visible:
            return
        self._visible = visible

        if not visible and self._status is SchedulerStatus.RUNNING:
            self._disarm_timer()
            self._status = SchedulerStatus.PAUSED
            logger.debug("Polling paused while hidden")
        elif visible and self._status is SchedulerStatus.PAUSED and self._active:
            self._status = SchedulerStatus.RUNNING
            self._arm_timer()
            logger.debug("Polling resumed")

        self._refresh_state()

    async def manual_refresh(self) -> Optional[AccountSnapshot]:
        """Fetch once with loading indication, whatever the current status.

        Returns the snapshot if it was published, None if it failed or went stale.
        """
        if self.is_closed:
            return None
        return await self._launch(show_loading=True)

    def close(self) -> None:
        """Tear down. Nothing is published after this, not even fetches in flight."""
        if self.is_closed:
            return
        self._disarm_timer()
        self._active = False
        self._loading.clear()
        self._state = replace(self._state, active=False, loading=False, status=SchedulerStatus.CLOSED)
        self._status = SchedulerStatus.CLOSED
        self._listeners.clear()
        logger.info("Polling scheduler closed", inflight=len(self._inflight))

    async def wait_idle(self) -> None:
        """Wait for every fetch in flight to settle."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def aclose(self) -> None:
        self.close()
        await self.wait_idle()

    # --- internals ---

    def _arm_timer(self) -> None:
        if self.timer_armed:
            return
        self._timer_task = asyncio.create_task(self._timer_loop(), name="account-poll-timer")

    def _disarm_timer(self) -> None:
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None

    async def _timer_loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval_seconds
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            if self._status is not SchedulerStatus.RUNNING:
                return
            # Shielded: cancelling the timer must not abort a request in flight
            await asyncio.shield(self._launch(show_loading=False))
            next_tick += self.interval_seconds
            now = loop.time()
            if next_tick < now:
                # The fetch overran one or more periods; skip them instead of bursting
                next_tick = now

    def _launch(self, show_loading: bool) -> "asyncio.Task[Optional[AccountSnapshot]]":
        self._sequence += 1
        sequence = self._sequence
        if show_loading:
            self._loading.add(sequence)
            self._refresh_state()

        task = asyncio.create_task(self._run_fetch(sequence, self._epoch))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    def _is_current(self, epoch: int) -> bool:
        return not self.is_closed and epoch == self._epoch

    async def _run_fetch(self, sequence: int, epoch: int) -> Optional[AccountSnapshot]:
        create_correlation_context(service="scheduler", operation="fetch_snapshot", tick=sequence)
        try:
            snapshot = await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._settle(sequence, epoch):
                return None
            error_logger.error("Account fetch failed", **create_error_context(e, "fetch_snapshot"))
            self._state = replace(self._state, connected=False)
            self._refresh_state()
            self._publish(None)
            return None

        if not self._settle(sequence, epoch):
            return None

        self._snapshot = snapshot
        self._state = replace(
            self._state,
            connected=True,
            update_count=self._state.update_count + 1,
            last_updated=datetime.now(timezone.utc),
        )
        self._refresh_state()
        self._publish(snapshot)
        return snapshot

    def _settle(self, sequence: int, epoch: int) -> bool:
        """Bookkeeping for a finished fetch; True if its result may be published."""
        if not self._is_current(epoch):
            logger.debug("Dropped result of a stopped or closed poll", tick=sequence)
            return False

        self._loading.discard(sequence)
        if sequence <= self._last_published_sequence:
            logger.debug("Dropped stale result", tick=sequence,
                         last_published=self._last_published_sequence)
            self._refresh_state()
            return False

        self._last_published_sequence = sequence
        return True

    def _refresh_state(self) -> None:
        if self.is_closed:
            return
        self._state = replace(
            self._state,
            active=self._active,
            loading=bool(self._loading),
            status=self._status,
        )

    def _publish(self, snapshot: Optional[AccountSnapshot]) -> None:
        state = self._state
        for listener in list(self._listeners):
            if self.is_closed:
                break
            try:
                listener(snapshot, state)
            except Exception as e:
                error_logger.error("Polling listener failed", **create_error_context(e, "publish"))
