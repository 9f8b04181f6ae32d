"""Search box, status filter and pagination for the progress list."""

from __future__ import annotations

from typing import Callable, Optional

from nicegui import ui

from pebbles.core.view_composer import ComposedView, StatusFilter
from pebbles.gui.events import PageChanged, SearchChanged, StatusFilterChanged

OnSearch = Callable[[SearchChanged], None]
OnStatusFilter = Callable[[StatusFilterChanged], None]
OnPage = Callable[[PageChanged], None]


class ListControlsView:
    """Controls that emit list intents.

    Search and filter are rendered above the table (render()); pagination and
    the match count below it (render_pagination()). set_view() keeps the
    pagination in sync with the composed view without re-emitting a PageChanged.
    """

    def __init__(self, *, on_search: OnSearch, on_status_filter: OnStatusFilter, on_page: OnPage) -> None:
        self._on_search = on_search
        self._on_status_filter = on_status_filter
        self._on_page = on_page

        self._search: Optional[ui.input] = None
        self._status: Optional[ui.select] = None
        self._pagination: Optional[ui.pagination] = None
        self._summary: Optional[ui.label] = None
        self._suppress_emit: bool = False

    def render(self) -> None:
        with ui.row().classes("w-full items-end gap-4"):
            self._search = (
                ui.input(placeholder="Search by filename or email...", on_change=self._on_search_input)
                .props("clearable debounce=300")
                .classes("grow")
            )
            with self._search.add_slot("prepend"):
                ui.icon("search")
            self._status = ui.select(
                {f.value: f.label for f in StatusFilter},
                value=StatusFilter.ALL.value,
                on_change=self._on_status_select,
            ).classes("w-48")

    def render_pagination(self) -> None:
        with ui.row().classes("w-full items-center justify-between"):
            self._summary = ui.label("").classes("text-sm text-gray-500")
            self._pagination = ui.pagination(1, 1, direction_links=True, on_change=self._on_page_select)

    def set_view(self, view: ComposedView) -> None:
        if self._summary is not None:
            shown = len(view.visible)
            self._summary.set_text(f"Showing {shown} of {view.total_matched} files")
        if self._pagination is None:
            return
        self._suppress_emit = True
        try:
            self._pagination.max = view.page_count
            self._pagination.value = view.page
            self._pagination.set_visibility(view.page_count > 1)
        finally:
            self._suppress_emit = False

    def _on_search_input(self, e) -> None:
        self._on_search(SearchChanged(text=e.value or ""))

    def _on_status_select(self, e) -> None:
        self._on_status_filter(StatusFilterChanged(value=e.value or StatusFilter.ALL.value))

    def _on_page_select(self, e) -> None:
        if self._suppress_emit or e.value is None:
            return
        self._on_page(PageChanged(page=int(e.value)))
