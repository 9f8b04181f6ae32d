"""Search + status filter + pagination over a record collection.

``compose`` is a pure function of (records, query). ``ListViewState`` holds
the query inputs for the lifetime of a list view so they survive poll
refreshes, and applies the page-reset rules when search or filter change.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

from pebbles.core.records import ProgressRecord
from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)

PAGE_SIZE: int = 20


class StatusFilter(str, Enum):
    """Status filter options for the list view."""

    ALL = "all"
    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"
    WITH_ERRORS = "with-errors"
    WITH_WARNINGS = "with-warnings"

    @property
    def label(self) -> str:
        return _FILTER_LABELS[self]


_FILTER_LABELS: dict[StatusFilter, str] = {
    StatusFilter.ALL: "All Status",
    StatusFilter.COMPLETED: "Completed",
    StatusFilter.IN_PROGRESS: "In Progress",
    StatusFilter.WITH_ERRORS: "With Errors",
    StatusFilter.WITH_WARNINGS: "With Warnings",
}


@dataclass(frozen=True, slots=True)
class ViewQuery:
    search_text: str = ""
    status_filter: StatusFilter = StatusFilter.ALL
    page: int = 1
    page_size: int = PAGE_SIZE


@dataclass(frozen=True, slots=True)
class ComposedView:
    """Result of composing a query over a collection.

    Attributes:
        visible: Records on the requested page.
        total_matched: Number of records matching search + filter.
        page: Page that was requested.
        page_size: Page size used for slicing.
    """

    visible: tuple[ProgressRecord, ...]
    total_matched: int
    page: int
    page_size: int

    @property
    def page_count(self) -> int:
        """Total number of pages, at least 1 even when nothing matches."""
        return page_count(self.total_matched, self.page_size)


def page_count(total_matched: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(total_matched / page_size))


def matches_search(record: ProgressRecord, search_text: str) -> bool:
    """Case-insensitive substring match on filename or email."""
    if not search_text:
        return True
    needle = search_text.lower()
    return needle in (record.filename or "").lower() or needle in (record.email or "").lower()


def matches_status(record: ProgressRecord, status_filter: StatusFilter) -> bool:
    if status_filter is StatusFilter.COMPLETED:
        return record.is_completed
    if status_filter is StatusFilter.IN_PROGRESS:
        return not record.is_completed
    if status_filter is StatusFilter.WITH_ERRORS:
        return record.counts.failed > 0
    if status_filter is StatusFilter.WITH_WARNINGS:
        return record.counts.warn > 0
    return True


def compose(records: Sequence[ProgressRecord], query: ViewQuery) -> ComposedView:
    """Filter by search text, then status, then slice out the requested page.

    Does not mutate ``records``. A page past the end yields an empty
    ``visible`` tuple with the correct ``total_matched``.
    """
    if query.page_size <= 0:
        raise ValueError(f"page_size must be positive, got {query.page_size}")

    matched = [
        r
        for r in records
        if matches_search(r, query.search_text) and matches_status(r, query.status_filter)
    ]
    page = max(1, query.page)
    start = (page - 1) * query.page_size
    visible = tuple(matched[start : start + query.page_size])
    return ComposedView(
        visible=visible,
        total_matched=len(matched),
        page=page,
        page_size=query.page_size,
    )


class ListViewState:
    """Search/filter/page inputs owned by one list view.

    Created when the view mounts and discarded when it unmounts; poll
    refreshes go through ``compose`` and keep these inputs.

    Rules:
        - Changing search text or status filter resets the page to 1.
        - Search text and status filter never reset each other.
        - Changing only the page keeps the filtered set.
        - If a refreshed collection no longer reaches the current page, the
          page is clamped to the last page.
    """

    def __init__(self, *, page_size: int = PAGE_SIZE) -> None:
        self._query = ViewQuery(page_size=page_size)

    @property
    def query(self) -> ViewQuery:
        return self._query

    @property
    def search_text(self) -> str:
        return self._query.search_text

    @property
    def status_filter(self) -> StatusFilter:
        return self._query.status_filter

    @property
    def page(self) -> int:
        return self._query.page

    def set_search(self, text: str | None) -> bool:
        """Set search text. Returns True if it changed (page reset to 1)."""
        text = text or ""
        if text == self._query.search_text:
            return False
        self._query = replace(self._query, search_text=text, page=1)
        return True

    def set_status_filter(self, status_filter: StatusFilter | str) -> bool:
        """Set status filter. Returns True if it changed (page reset to 1).

        Raises:
            ValueError: If ``status_filter`` is not a known filter value.
        """
        status_filter = StatusFilter(status_filter)
        if status_filter is self._query.status_filter:
            return False
        self._query = replace(self._query, status_filter=status_filter, page=1)
        return True

    def set_page(self, page: int) -> bool:
        page = max(1, int(page))
        if page == self._query.page:
            return False
        self._query = replace(self._query, page=page)
        return True

    def compose(self, records: Sequence[ProgressRecord]) -> ComposedView:
        view = compose(records, self._query)
        if self._query.page > view.page_count:
            logger.debug(f"page {self._query.page} beyond page_count {view.page_count}, clamping")
            self._query = replace(self._query, page=view.page_count)
            view = compose(records, self._query)
        return view
