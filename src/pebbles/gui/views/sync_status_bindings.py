"""Bindings for sync status: error banner, toasts and the refresh bar."""

from __future__ import annotations

from pebbles.gui.bus import EventBus
from pebbles.gui.client_utils import safe_call
from pebbles.gui.events import SyncFailed, SyncStatusChanged
from pebbles.gui.views.error_banner_view import ErrorBannerView
from pebbles.gui.views.refresh_bar_view import RefreshBarView


class SyncStatusBindings:
    """Show the current error and toast each new failure once.

    SyncFailed is emitted only for a failure that differs from the previous
    one, so a persistent outage produces a single toast.
    """

    def __init__(self, bus: EventBus, banner: ErrorBannerView, refresh_bar: RefreshBarView) -> None:
        self._bus = bus
        self._banner = banner
        self._refresh_bar = refresh_bar
        self._subscribed: bool = False
        bus.subscribe(SyncStatusChanged, self._on_sync_status_changed)
        bus.subscribe(SyncFailed, self._on_sync_failed)
        self._subscribed = True

    def teardown(self) -> None:
        if not self._subscribed:
            return
        self._bus.unsubscribe(SyncStatusChanged, self._on_sync_status_changed)
        self._bus.unsubscribe(SyncFailed, self._on_sync_failed)
        self._subscribed = False

    def _on_sync_status_changed(self, e: SyncStatusChanged) -> None:
        safe_call(self._banner.set_error, e.error, not_found=e.not_found)
        safe_call(self._refresh_bar.set_status, last_updated=e.last_updated, loading=e.loading)

    def _on_sync_failed(self, e: SyncFailed) -> None:
        safe_call(self._banner.notify, e.error.message)
