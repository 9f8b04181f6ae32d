"""Controllers that own a PollingLoop and its SyncState.

Each controller turns settled fetches into bus events:

- a changed snapshot -> CollectionUpdated / RecordUpdated
- every outcome -> SyncStatusChanged (error banner, last-updated label)
- a new failure -> SyncFailed (one toast per distinct error)

and applies the RefreshRequested / ErrorDismissed intents.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from pebbles.core.records import DetailKey, ProgressRecord
from pebbles.core.sync import Fetcher, PollingLoop, PollOutcome, SyncState, TimerFactory
from pebbles.core.utils.logging import get_logger
from pebbles.gui.bus import EventBus
from pebbles.gui.events import (
    CollectionUpdated,
    ErrorDismissed,
    RecordUpdated,
    RefreshRequested,
    SyncFailed,
    SyncStatusChanged,
)

logger = get_logger(__name__)


class _SyncController(ABC):
    """Shared lifecycle for the collection and detail controllers."""

    def __init__(
        self,
        bus: EventBus,
        *,
        interval_s: float,
        timer_factory: Optional[TimerFactory] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._bus = bus
        self._interval_s = interval_s
        self._timer_factory = timer_factory
        self.state: SyncState = SyncState(clock=clock)
        self._loop: Optional[PollingLoop] = None
        bus.subscribe(RefreshRequested, self._on_refresh)
        bus.subscribe(ErrorDismissed, self._on_error_dismissed)

    @property
    def is_running(self) -> bool:
        return self._loop is not None and self._loop.is_running

    def stop(self) -> None:
        """Cancel polling and detach from the bus. Safe to call twice."""
        if self._loop is not None:
            self._loop.cancel()
        self._bus.unsubscribe(RefreshRequested, self._on_refresh)
        self._bus.unsubscribe(ErrorDismissed, self._on_error_dismissed)

    def _new_loop(self, fetcher: Fetcher, name: str) -> PollingLoop:
        return PollingLoop(
            fetcher,
            self._interval_s,
            self._on_outcome,
            timer_factory=self._timer_factory,
            name=name,
        )

    def _on_outcome(self, outcome: PollOutcome) -> None:
        update = self.state.apply(outcome)
        if update.changed_data:
            self._emit_data()
        self._emit_status()
        if update.notify and update.error is not None:
            self._bus.emit(SyncFailed(error=update.error))

    @abstractmethod
    def _emit_data(self) -> None:
        """Emit the data event for the current snapshot."""
        raise NotImplementedError

    def _emit_status(self) -> None:
        s = self.state
        self._bus.emit(
            SyncStatusChanged(
                error=s.error,
                not_found=s.not_found,
                loading=s.loading,
                has_data=s.has_data,
                last_updated=s.last_updated,
            )
        )

    def _on_refresh(self, e: RefreshRequested) -> None:
        if self._loop is None or not self._loop.refresh_now():
            logger.debug("refresh ignored (not running or fetch in flight)")

    def _on_error_dismissed(self, e: ErrorDismissed) -> None:
        self.state.dismiss_error()
        self._emit_status()


class CollectionSyncController(_SyncController):
    """Poll the full record collection for one client key.

    Args:
        fetcher: Zero-argument coroutine factory, e.g.
            ``ProgressClient.collection_fetcher(client_key)``.
        bus: Per-client EventBus.
        interval_s: Seconds between polls.
        timer_factory: Passed through to PollingLoop.
    """

    def __init__(
        self,
        fetcher: Fetcher[list[ProgressRecord]],
        bus: EventBus,
        *,
        interval_s: float,
        timer_factory: Optional[TimerFactory] = None,
        clock: Callable[[], datetime] = datetime.now,
        name: str = "collection",
    ) -> None:
        super().__init__(bus, interval_s=interval_s, timer_factory=timer_factory, clock=clock)
        self._loop = self._new_loop(fetcher, name)

    def start(self) -> None:
        self._loop.start()

    def _emit_data(self) -> None:
        self._bus.emit(
            CollectionUpdated(records=tuple(self.state.snapshot or ()), last_updated=self.state.last_updated)
        )


class RecordSyncController(_SyncController):
    """Poll a single record identified by a DetailKey.

    Switching to another key cancels the current loop, resets the snapshot
    store (the old record is never shown for the new key) and starts a new
    loop if the controller was running.

    Args:
        fetcher_factory: Builds a fetcher for a key, e.g.
            ``ProgressClient.record_fetcher``.
        key: Initial detail identity.
        bus: Per-client EventBus.
        interval_s: Seconds between polls.
    """

    def __init__(
        self,
        fetcher_factory: Callable[[DetailKey], Fetcher[ProgressRecord]],
        key: DetailKey,
        bus: EventBus,
        *,
        interval_s: float,
        timer_factory: Optional[TimerFactory] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(bus, interval_s=interval_s, timer_factory=timer_factory, clock=clock)
        self._fetcher_factory = fetcher_factory
        self.key: DetailKey = key
        self._loop = self._new_loop(fetcher_factory(key), f"detail:{key}")

    def start(self) -> None:
        self._loop.start()

    def bind(self, key: DetailKey) -> bool:
        """Follow a new detail identity. Returns False if ``key`` is unchanged."""
        if key == self.key:
            return False
        was_running = self.is_running
        self._loop.cancel()
        self.state.reset()
        self.key = key
        self._loop = self._new_loop(self._fetcher_factory(key), f"detail:{key}")
        logger.info(f"detail identity changed to {key}")
        self._emit_status()
        if was_running:
            self._loop.start()
        return True

    def _emit_data(self) -> None:
        record = self.state.snapshot
        if record is None:
            return
        self._bus.emit(RecordUpdated(key=self.key, record=record, last_updated=self.state.last_updated))
