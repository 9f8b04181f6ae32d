"""Bindings between the dashboard views and the event bus."""

from __future__ import annotations

from pebbles.core.derivation import aggregate, recent
from pebbles.gui.bus import EventBus
from pebbles.gui.client_utils import safe_call
from pebbles.gui.config import RECENT_ACTIVITY_LIMIT
from pebbles.gui.events import CollectionUpdated
from pebbles.gui.views.progress_table_view import ProgressTableView
from pebbles.gui.views.stats_view import StatsView


class StatsBindings:
    """Derive statistics and recent activity from each collection snapshot."""

    def __init__(
        self,
        bus: EventBus,
        stats: StatsView,
        recent_table: ProgressTableView,
        *,
        recent_limit: int = RECENT_ACTIVITY_LIMIT,
    ) -> None:
        self._bus = bus
        self._stats = stats
        self._recent_table = recent_table
        self._recent_limit = recent_limit
        self._subscribed: bool = False
        bus.subscribe(CollectionUpdated, self._on_collection_updated)
        self._subscribed = True

    def teardown(self) -> None:
        if not self._subscribed:
            return
        self._bus.unsubscribe(CollectionUpdated, self._on_collection_updated)
        self._subscribed = False

    def _on_collection_updated(self, e: CollectionUpdated) -> None:
        safe_call(self._stats.set_stats, aggregate(e.records))
        safe_call(self._recent_table.set_records, recent(e.records, self._recent_limit))
