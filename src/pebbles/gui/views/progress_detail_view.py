"""Detail panel for one progress record: progress ring, details and counts."""

from __future__ import annotations

from typing import Optional

from nicegui import ui

from pebbles.core.derivation import (
    completion_label,
    format_timestamp,
    percentage,
    processed_summary,
    status_color,
    status_icon,
)
from pebbles.core.records import ProgressRecord


class ProgressDetailView:
    """Overall progress, record details and processing statistics.

    Shows a spinner until the first record arrives; afterwards the content is
    rebuilt from each RecordUpdated. When the fetch settles without data (for
    example not-found) the spinner is hidden and the error banner takes over.
    """

    def __init__(self) -> None:
        self._container: Optional[ui.column] = None
        self._spinner: Optional[ui.spinner] = None
        self._record: Optional[ProgressRecord] = None

    def render(self) -> None:
        self._spinner = ui.spinner(size="xl").classes("self-center my-16")
        self._container = ui.column().classes("w-full gap-4")
        if self._record is not None:
            self.set_record(self._record)

    def set_placeholder(self, *, loading: bool, has_data: bool) -> None:
        if self._spinner is not None:
            self._spinner.set_visibility(loading and not has_data)

    def set_record(self, record: ProgressRecord) -> None:
        self._record = record
        if self._container is None:
            return
        if self._spinner is not None:
            self._spinner.set_visibility(False)
        self._container.clear()
        with self._container:
            self._build(record)

    def _build(self, r: ProgressRecord) -> None:
        pct = percentage(r)
        color = status_color(r)

        with ui.grid(columns=2).classes("w-full gap-4"):
            with ui.card().classes("p-4"):
                with ui.row().classes("w-full items-center justify-between"):
                    ui.label("Overall Progress").classes("text-lg font-semibold")
                    ui.icon(status_icon(r), color=color).classes("text-2xl")
                with ui.column().classes("w-full items-center"):
                    ui.circular_progress(
                        value=pct, min=0, max=max(100, pct), show_value=False, size="160px", color=color
                    ).props("thickness=0.15")
                    ui.label(f"{pct}%").classes("text-2xl font-bold")
                    ui.label("Complete").classes("text-xs text-gray-500")
                ui.linear_progress(value=min(pct, 100) / 100, show_value=False, size="16px", color=color)
                with ui.row().classes("w-full items-center justify-between"):
                    ui.label(processed_summary(r)).classes("text-sm text-gray-500")
                    ui.badge(completion_label(r), color="green" if r.is_completed else "orange").props("outline")

            with ui.card().classes("p-4"):
                ui.label("Details").classes("text-lg font-semibold")
                for label, value in (
                    ("File:", r.filename),
                    ("User:", r.email or "N/A"),
                    ("Started:", format_timestamp(r.created_at)),
                    ("Last Update:", format_timestamp(r.updated_at)),
                ):
                    with ui.row().classes("w-full justify-between"):
                        ui.label(label).classes("text-sm text-gray-500")
                        ui.label(value).classes("text-sm font-mono")

        with ui.card().classes("w-full p-4"):
            ui.label("Processing Statistics").classes("text-lg font-semibold")
            with ui.grid(columns=3).classes("w-full gap-4"):
                for icon, color, value, label in (
                    ("check_circle", "green", r.counts.done, "Successful"),
                    ("info", "yellow-8", r.counts.warn, "Warnings"),
                    ("warning", "red", r.counts.failed, "Errors"),
                ):
                    with ui.card().props("bordered flat").classes("items-center"):
                        ui.icon(icon, color=color).classes("text-3xl")
                        ui.label(f"{value:,}").classes(f"text-2xl font-bold text-{color}")
                        ui.label(label).classes("text-sm text-gray-500")
