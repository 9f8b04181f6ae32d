"""Error / warning occurrence table with expandable pattern groups.

Renders the PatternRow list produced by the expansion state machine. A summary
row of a group with more than one occurrence is clickable (expand); an
expanded group ends with a "Show less" row (collapse). Both emit
PatternToggled through the on_toggle callback.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from nicegui import ui

from pebbles.core.expansion import PatternRow
from pebbles.gui.events import Namespace, PatternToggled

OnToggle = Callable[[PatternToggled], None]

_HEADERS = ("Message", "Pattern", "Count", "Line", "Values")
_GRID = "grid-template-columns: 3fr 3fr 1fr 1fr 2fr"


class PatternTableView:
    """One table for the "errors" or "warnings" namespace.

    The whole section is hidden while the record has no groups in this
    namespace.
    """

    def __init__(self, namespace: Namespace, *, on_toggle: OnToggle) -> None:
        self._namespace: Namespace = namespace
        self._on_toggle = on_toggle
        self._section: Optional[ui.card] = None
        self._title: Optional[ui.label] = None
        self._body: Optional[ui.column] = None
        self._rows: tuple[PatternRow, ...] = ()
        self._group_count: int = 0

    @property
    def _is_errors(self) -> bool:
        return self._namespace == "errors"

    def render(self) -> None:
        with ui.card().classes("w-full p-4") as self._section:
            with ui.row().classes("items-center gap-2"):
                ui.icon("warning" if self._is_errors else "info", color="red" if self._is_errors else "yellow-8")
                self._title = ui.label("").classes("text-lg font-semibold")
            with ui.element("div").classes("w-full grid gap-2 px-2 text-sm font-semibold").style(_GRID):
                for h in _HEADERS:
                    ui.label(h)
            ui.separator()
            self._body = ui.column().classes("w-full gap-0")
        self.set_rows(self._rows, self._group_count)

    def set_rows(self, rows: Sequence[PatternRow], group_count: int) -> None:
        self._rows = tuple(rows)
        self._group_count = group_count
        if self._section is None or self._body is None:
            return
        self._section.set_visibility(group_count > 0)
        if self._title is not None:
            name = "Errors" if self._is_errors else "Warnings"
            self._title.set_text(f"{name} ({group_count})")
        self._body.clear()
        with self._body:
            for row in self._rows:
                self._build_row(row)

    def _toggle(self, index: int) -> None:
        self._on_toggle(PatternToggled(namespace=self._namespace, index=index))

    def _build_row(self, row: PatternRow) -> None:
        if row.kind == "collapse":
            with ui.row().classes("w-full justify-center py-1"):
                ui.button("Show less", icon="expand_less", on_click=lambda i=row.group_index: self._toggle(i)).props(
                    "flat size=sm"
                )
            ui.separator()
            return

        cell = ui.element("div").classes("w-full grid gap-2 px-2 py-1 items-center").style(_GRID)
        if row.expandable:
            cell.classes("cursor-pointer hover:bg-gray-100").on("click", lambda i=row.group_index: self._toggle(i))
        with cell:
            ui.label(row.message or "")
            ui.label(row.pattern or "").classes("font-mono text-xs")
            if row.count is not None:
                ui.badge(str(row.count), color="red" if self._is_errors else "yellow-8")
            else:
                ui.label("")
            ui.label(row.line).classes("font-mono")
            with ui.row().classes("items-center gap-1"):
                ui.label(row.values).classes("font-mono text-xs")
                if row.kind == "summary" and row.more_count > 0:
                    ui.badge(f"+{row.more_count} more", color="grey").props("outline")
        if row.kind == "summary":
            ui.separator()
