"""Progress table view component using ui.table.

Displays one row per progress record with a status badge and a progress bar.
Clicking a row emits an open callback with the record's DetailKey; the view
does not subscribe to events (that's handled by ListBindings/StatsBindings).
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from nicegui import ui

from pebbles.core.derivation import (
    completion_label,
    format_timestamp,
    percentage,
    processed_summary,
    status_color,
)
from pebbles.core.records import DetailKey, ProgressRecord
from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)

Rows = list[dict[str, object]]
OnOpen = Callable[[DetailKey], None]

_COLUMNS: list[dict[str, object]] = [
    {"name": "filename", "label": "File", "field": "filename", "align": "left"},
    {"name": "email", "label": "User", "field": "email", "align": "left"},
    {"name": "status", "label": "Status", "field": "status", "align": "left"},
    {"name": "progress", "label": "Progress", "field": "pct", "align": "left"},
    {"name": "processed", "label": "Processed", "field": "processed", "align": "left"},
    {"name": "warn", "label": "Warnings", "field": "warn", "align": "right"},
    {"name": "failed", "label": "Errors", "field": "failed", "align": "right"},
    {"name": "updated", "label": "Last Update", "field": "updated", "align": "left"},
]

_STATUS_SLOT = r"""
<q-td :props="props">
  <q-badge :color="props.row.completed ? 'green' : 'orange'" outline>{{ props.value }}</q-badge>
</q-td>
"""

_PROGRESS_SLOT = r"""
<q-td :props="props">
  <div class="row items-center no-wrap q-gutter-sm" style="min-width: 140px">
    <q-linear-progress :value="Math.min(props.row.pct, 100) / 100" :color="props.row.color"
                       size="10px" rounded class="col" />
    <span class="text-caption">{{ props.row.pct }}%</span>
  </div>
</q-td>
"""


def record_to_row(record: ProgressRecord) -> dict[str, object]:
    """Flatten a record into a ui.table row (display values only)."""
    return {
        "id": record.id,
        "client_key": record.client_key,
        "filename": record.filename,
        "email": record.email or "",
        "status": completion_label(record),
        "completed": record.is_completed,
        "pct": percentage(record),
        "color": status_color(record),
        "processed": processed_summary(record),
        "warn": record.counts.warn,
        "failed": record.counts.failed,
        "updated": format_timestamp(record.updated_at),
    }


class ProgressTableView:
    """Table of progress records.

    Lifecycle:
        - UI elements are created in render()
        - Data updates via set_records() (called by bindings)
        - Row clicks call on_open with the row's DetailKey

    Attributes:
        _on_open: Callback receiving the DetailKey of a clicked row.
        _pending_rows: Rows buffered before render() is called.
    """

    def __init__(
        self,
        *,
        on_open: OnOpen,
        title: Optional[str] = None,
        empty_label: str = "No progress records found",
        show_email: bool = True,
    ) -> None:
        self._on_open = on_open
        self._title = title
        self._empty_label = empty_label
        self._show_email = show_email
        self._table: Optional[ui.table] = None
        self._pending_rows: Rows = []

    def render(self) -> None:
        """Create the table UI inside the current container."""
        self._table = None
        if self._title:
            ui.label(self._title).classes("text-lg font-semibold")
        columns = [c for c in _COLUMNS if self._show_email or c["name"] != "email"]
        self._table = (
            ui.table(columns=columns, rows=list(self._pending_rows), row_key="id")
            .classes("w-full")
            .props(f'flat bordered hide-pagination :rows-per-page-options="[0]" no-data-label="{self._empty_label}"')
        )
        self._table.add_slot("body-cell-status", _STATUS_SLOT)
        self._table.add_slot("body-cell-progress", _PROGRESS_SLOT)
        self._table.on("rowClick", self._on_row_click)

    def set_records(self, records: Sequence[ProgressRecord]) -> None:
        """Replace the table rows."""
        rows = [record_to_row(r) for r in records]
        self._pending_rows = rows
        if self._table is None:
            return
        self._table.rows = rows

    def _on_row_click(self, e) -> None:
        # rowClick args: [event, row, index]
        try:
            row = e.args[1]
            key = DetailKey(client_key=str(row["client_key"]), filename=str(row["filename"]))
        except (IndexError, KeyError, TypeError):
            logger.warning(f"unexpected rowClick payload: {e.args!r}")
            return
        self._on_open(key)
