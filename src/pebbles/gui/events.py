"""Event definitions for the progress GUI.

Intent events are emitted by views when the user does something (types in the
search box, clicks a row). State events are emitted by controllers after the
core state changed, and bindings push them into views.

Flow on the list page::

    ListControlsView --SearchChanged--> ListViewController
    CollectionSyncController --CollectionUpdated--> ListViewController
    ListViewController --ListViewChanged--> ListBindings --> ProgressTableView
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from pebbles.core.errors import ProgressFetchError
from pebbles.core.expansion import PatternRow
from pebbles.core.records import DetailKey, ProgressRecord
from pebbles.core.view_composer import ComposedView, ViewQuery

Namespace = Literal["errors", "warnings"]


# -----------------------------
# Intent events (views -> controllers)
# -----------------------------
@dataclass(frozen=True, slots=True)
class SearchChanged:
    """User edited the search box."""

    text: str


@dataclass(frozen=True, slots=True)
class StatusFilterChanged:
    """User picked a status filter (a StatusFilter value)."""

    value: str


@dataclass(frozen=True, slots=True)
class PageChanged:
    page: int


@dataclass(frozen=True, slots=True)
class RefreshRequested:
    """User clicked Refresh; fetch now instead of waiting for the next tick."""


@dataclass(frozen=True, slots=True)
class ErrorDismissed:
    """User closed the error banner."""


@dataclass(frozen=True, slots=True)
class PatternToggled:
    """User clicked an expandable row (or its collapse row).

    Attributes:
        namespace: "errors" or "warnings".
        index: Group index within that namespace.
    """

    namespace: Namespace
    index: int


# -----------------------------
# State events (controllers -> bindings)
# -----------------------------
@dataclass(frozen=True, slots=True)
class CollectionUpdated:
    """A new collection snapshot replaced the previous one."""

    records: tuple[ProgressRecord, ...]
    last_updated: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class RecordUpdated:
    """A new detail snapshot for ``key`` replaced the previous one."""

    key: DetailKey
    record: ProgressRecord
    last_updated: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class SyncStatusChanged:
    """Error/loading state of a sync controller after an outcome was applied.

    Attributes:
        error: Error to display, or None (cleared or dismissed).
        not_found: The current failure streak is a not-found.
        loading: No fetch has settled yet.
        has_data: A snapshot is available to render.
        last_updated: Time of the last successful fetch.
    """

    error: Optional[ProgressFetchError]
    not_found: bool = False
    loading: bool = False
    has_data: bool = False
    last_updated: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class SyncFailed:
    """A new failure worth one user notification."""

    error: ProgressFetchError


@dataclass(frozen=True, slots=True)
class ListViewChanged:
    """The visible page of the list was re-derived."""

    view: ComposedView
    query: ViewQuery


@dataclass(frozen=True, slots=True)
class PatternRowsChanged:
    """Rendered rows of one error/warning table."""

    namespace: Namespace
    rows: tuple[PatternRow, ...]
    group_count: int = 0
