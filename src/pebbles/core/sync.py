"""Periodic fetch of progress data with a race-safe cancellable loop.

A PollingLoop fetches once on start and then on every tick of a repeating
timer. Ticks are scheduled from start, not from fetch completion, and a tick
that fires while a fetch is still outstanding is coalesced (skipped), so one
loop never has two fetches in flight and results are applied in order.

``cancel()`` is synchronous: it stops the timer, cancels the in-flight fetch
and invalidates its generation. Once it returns, ``on_result`` is never called
again, even if a fetch was about to resolve.

SyncState is the snapshot store fed by a loop: a success replaces the
snapshot wholesale, a failure keeps the last good snapshot and records the
error.

The timer is injectable the same way ThreadJobRunner takes a
``ui_timer_factory``: NiceGUI pages pass ``ui.timer``; tests pass a manual
timer; the default is an asyncio ``call_at`` timer.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from pebbles.core.errors import FetchErrorKind, ProgressFetchError
from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Fetcher = Callable[[], Awaitable[T]]
TimerFactory = Callable[[float, Callable[[], None]], Any]


@dataclass(frozen=True)
class PollOutcome(Generic[T]):
    """Result of one settled fetch: either data or an error."""

    data: Optional[T] = None
    error: Optional[ProgressFetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


OnResult = Callable[[PollOutcome[T]], None]


class AsyncioTimer:
    """Repeating timer on the running asyncio loop.

    Fires every ``interval_s`` measured from creation (no drift from slow
    callbacks). Must be created from inside a running event loop.
    """

    def __init__(self, interval_s: float, callback: Callable[[], None]) -> None:
        self._loop = asyncio.get_running_loop()
        self._interval_s = interval_s
        self._callback = callback
        self._cancelled = False
        self._next_at = self._loop.time() + interval_s
        self._handle: Optional[asyncio.TimerHandle] = self._loop.call_at(self._next_at, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._next_at += self._interval_s
        now = self._loop.time()
        if self._next_at <= now:
            # Skip missed ticks instead of firing a burst.
            missed = int((now - self._next_at) // self._interval_s) + 1
            self._next_at += missed * self._interval_s
        self._handle = self._loop.call_at(self._next_at, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def asyncio_timer_factory(interval_s: float, callback: Callable[[], None]) -> AsyncioTimer:
    return AsyncioTimer(interval_s, callback)


class PollingLoop(Generic[T]):
    """A cancellable poll loop for one view (collection or detail).

    Attributes:
        name: Label used in log messages.
        interval_s: Seconds between scheduled ticks.
    """

    def __init__(
        self,
        fetcher: Fetcher[T],
        interval_s: float,
        on_result: OnResult[T],
        *,
        timer_factory: Optional[TimerFactory] = None,
        name: str = "poll",
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        self.name: str = name
        self.interval_s: float = float(interval_s)
        self._fetcher = fetcher
        self._on_result = on_result
        self._timer_factory: TimerFactory = timer_factory or asyncio_timer_factory

        self._running: bool = False
        self._generation: int = 0
        self._timer: Any = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "PollingLoop[T]":
        """Fetch immediately, then on every tick until cancelled.

        Must be called from inside a running event loop. Calling start() on a
        running loop is a no-op.
        """
        if self._running:
            return self
        self._running = True
        self._generation += 1
        logger.info(f"[{self.name}] polling started (interval={self.interval_s}s)")
        self._launch()
        self._timer = self._timer_factory(self.interval_s, self._on_tick)
        return self

    def cancel(self) -> None:
        """Stop polling. No result is delivered after this returns."""
        if not self._running and self._timer is None and self._task is None:
            return
        self._running = False
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        logger.info(f"[{self.name}] polling cancelled")

    def refresh_now(self) -> bool:
        """Fetch now, outside the schedule (manual refresh).

        Returns False if the loop is not running or a fetch is in flight.
        """
        if not self._running or self.in_flight:
            return False
        self._launch()
        return True

    def _on_tick(self) -> None:
        if not self._running:
            return
        if self.in_flight:
            logger.debug(f"[{self.name}] previous fetch still in flight, skipping tick")
            return
        self._launch()

    def _launch(self) -> None:
        self._task = asyncio.create_task(self._run_once(self._generation))

    async def _run_once(self, generation: int) -> None:
        try:
            data = await self._fetcher()
        except ProgressFetchError as e:
            logger.warning(f"[{self.name}] fetch failed: {e.kind.value}: {e.message}")
            outcome: PollOutcome[T] = PollOutcome(error=e)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"[{self.name}] unexpected error in fetcher")
            outcome = PollOutcome(
                error=ProgressFetchError(FetchErrorKind.TRANSPORT_FAILURE, str(e) or type(e).__name__)
            )
        else:
            outcome = PollOutcome(data=data)

        if generation != self._generation or not self._running:
            logger.debug(f"[{self.name}] dropping result from superseded fetch")
            return

        try:
            self._on_result(outcome)
        except Exception:
            logger.exception(f"[{self.name}] exception in on_result handler")


def start_polling(
    fetcher: Fetcher[T],
    interval_s: float,
    on_result: OnResult[T],
    *,
    timer_factory: Optional[TimerFactory] = None,
    name: str = "poll",
) -> PollingLoop[T]:
    """Create and start a PollingLoop. Call ``.cancel()`` on the result to stop."""
    loop: PollingLoop[T] = PollingLoop(
        fetcher, interval_s, on_result, timer_factory=timer_factory, name=name
    )
    return loop.start()


@dataclass(frozen=True)
class SyncUpdate:
    """What changed when an outcome was applied to SyncState.

    Attributes:
        changed_data: The snapshot was replaced with different data.
        notify: A new failure that should be surfaced as a notification.
        error: The failure, if the outcome was one.
    """

    changed_data: bool
    notify: bool
    error: Optional[ProgressFetchError] = None


class SyncState(Generic[T]):
    """Last-known-good snapshot plus the current error slot.

    A failure is notified once per distinct error: a persistent outage that
    keeps failing with the same error does not re-notify on every tick. A
    dismissed error stays hidden until a different error or a success.
    """

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self.snapshot: Optional[T] = None
        self.error: Optional[ProgressFetchError] = None
        self.last_updated: Optional[datetime] = None
        self.loading: bool = True
        self._last_failure: Optional[ProgressFetchError] = None
        self._dismissed: Optional[ProgressFetchError] = None
        self._not_found: bool = False

    @property
    def has_data(self) -> bool:
        return self.snapshot is not None

    @property
    def not_found(self) -> bool:
        """True from a not-found failure until the next success or reset.

        Other failures in between (e.g. a transient transport error) do not
        clear it.
        """
        return self._not_found

    def apply(self, outcome: PollOutcome[T]) -> SyncUpdate:
        self.loading = False

        if outcome.ok:
            changed = outcome.data != self.snapshot or self.snapshot is None
            self.snapshot = outcome.data
            self.error = None
            self._last_failure = None
            self._dismissed = None
            self._not_found = False
            self.last_updated = self._clock()
            return SyncUpdate(changed_data=changed, notify=False)

        err = outcome.error
        notify = err != self._last_failure
        self._last_failure = err
        if err is not None and err.is_not_found:
            self._not_found = True
        if err != self._dismissed:
            self.error = err
            self._dismissed = None
        return SyncUpdate(changed_data=False, notify=notify, error=err)

    def dismiss_error(self) -> None:
        if self.error is not None:
            self._dismissed = self.error
        self.error = None

    def reset(self) -> None:
        self.snapshot = None
        self.error = None
        self.last_updated = None
        self.loading = True
        self._last_failure = None
        self._dismissed = None
        self._not_found = False
