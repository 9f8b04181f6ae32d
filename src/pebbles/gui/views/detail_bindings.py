"""Bindings between the detail views and the event bus."""

from __future__ import annotations

from pebbles.gui.bus import EventBus
from pebbles.gui.client_utils import safe_call
from pebbles.gui.events import PatternRowsChanged, RecordUpdated, SyncStatusChanged
from pebbles.gui.views.pattern_table_view import PatternTableView
from pebbles.gui.views.progress_detail_view import ProgressDetailView


class DetailBindings:
    """Route record snapshots and pattern rows to the detail views."""

    def __init__(
        self,
        bus: EventBus,
        detail: ProgressDetailView,
        errors_table: PatternTableView,
        warnings_table: PatternTableView,
    ) -> None:
        self._bus = bus
        self._detail = detail
        self._tables = {"errors": errors_table, "warnings": warnings_table}
        self._subscribed: bool = False
        bus.subscribe(RecordUpdated, self._on_record_updated)
        bus.subscribe(PatternRowsChanged, self._on_pattern_rows_changed)
        bus.subscribe(SyncStatusChanged, self._on_sync_status_changed)
        self._subscribed = True

    def teardown(self) -> None:
        if not self._subscribed:
            return
        self._bus.unsubscribe(RecordUpdated, self._on_record_updated)
        self._bus.unsubscribe(PatternRowsChanged, self._on_pattern_rows_changed)
        self._bus.unsubscribe(SyncStatusChanged, self._on_sync_status_changed)
        self._subscribed = False

    def _on_record_updated(self, e: RecordUpdated) -> None:
        safe_call(self._detail.set_record, e.record)

    def _on_pattern_rows_changed(self, e: PatternRowsChanged) -> None:
        safe_call(self._tables[e.namespace].set_rows, e.rows, e.group_count)

    def _on_sync_status_changed(self, e: SyncStatusChanged) -> None:
        safe_call(self._detail.set_placeholder, loading=e.loading, has_data=e.has_data)
