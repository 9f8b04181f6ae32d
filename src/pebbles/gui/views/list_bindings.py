"""Bindings between the list views and the event bus (state -> view updates)."""

from __future__ import annotations

from pebbles.gui.bus import EventBus
from pebbles.gui.client_utils import safe_call
from pebbles.gui.events import ListViewChanged
from pebbles.gui.views.list_controls_view import ListControlsView
from pebbles.gui.views.progress_table_view import ProgressTableView


class ListBindings:
    """Push each ListViewChanged into the table and the pagination controls."""

    def __init__(self, bus: EventBus, table: ProgressTableView, controls: ListControlsView) -> None:
        self._bus = bus
        self._table = table
        self._controls = controls
        self._subscribed: bool = False
        bus.subscribe(ListViewChanged, self._on_list_view_changed)
        self._subscribed = True

    def teardown(self) -> None:
        if not self._subscribed:
            return
        self._bus.unsubscribe(ListViewChanged, self._on_list_view_changed)
        self._subscribed = False

    def _on_list_view_changed(self, e: ListViewChanged) -> None:
        safe_call(self._table.set_records, e.view.visible)
        safe_call(self._controls.set_view, e.view)
