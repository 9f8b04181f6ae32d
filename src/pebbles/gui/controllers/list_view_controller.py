"""Apply search/filter/page intents and collection refreshes to ListViewState."""

from __future__ import annotations

from typing import Sequence

from pebbles.core.records import ProgressRecord
from pebbles.core.utils.logging import get_logger
from pebbles.core.view_composer import PAGE_SIZE, ListViewState
from pebbles.gui.bus import EventBus
from pebbles.gui.events import (
    CollectionUpdated,
    ListViewChanged,
    PageChanged,
    SearchChanged,
    StatusFilterChanged,
)

logger = get_logger(__name__)


class ListViewController:
    """Own the list view inputs and re-derive the visible page.

    The state is created with the page and lives as long as it does, so a
    poll refresh (CollectionUpdated) keeps the user's search, filter and page.

    Attributes:
        state: ListViewState holding search text, status filter and page.
    """

    def __init__(self, bus: EventBus, *, page_size: int = PAGE_SIZE) -> None:
        self._bus = bus
        self.state = ListViewState(page_size=page_size)
        self._records: Sequence[ProgressRecord] = ()
        bus.subscribe(CollectionUpdated, self._on_collection_updated)
        bus.subscribe(SearchChanged, self._on_search_changed)
        bus.subscribe(StatusFilterChanged, self._on_status_filter_changed)
        bus.subscribe(PageChanged, self._on_page_changed)

    def stop(self) -> None:
        self._bus.unsubscribe(CollectionUpdated, self._on_collection_updated)
        self._bus.unsubscribe(SearchChanged, self._on_search_changed)
        self._bus.unsubscribe(StatusFilterChanged, self._on_status_filter_changed)
        self._bus.unsubscribe(PageChanged, self._on_page_changed)

    def _recompose(self) -> None:
        view = self.state.compose(self._records)
        self._bus.emit(ListViewChanged(view=view, query=self.state.query))

    def _on_collection_updated(self, e: CollectionUpdated) -> None:
        self._records = e.records
        self._recompose()

    def _on_search_changed(self, e: SearchChanged) -> None:
        if self.state.set_search(e.text):
            self._recompose()

    def _on_status_filter_changed(self, e: StatusFilterChanged) -> None:
        try:
            changed = self.state.set_status_filter(e.value)
        except ValueError:
            logger.warning(f"ignoring unknown status filter {e.value!r}")
            return
        if changed:
            self._recompose()

    def _on_page_changed(self, e: PageChanged) -> None:
        if self.state.set_page(e.page):
            self._recompose()
