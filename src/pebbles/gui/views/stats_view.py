"""Dashboard statistic cards."""

from __future__ import annotations

from typing import Optional

from nicegui import ui

from pebbles.core.derivation import ProgressStats

# (field, label, icon, color)
_CARDS: list[tuple[str, str, str, str]] = [
    ("total_files", "Total Files", "description", "blue"),
    ("completed", "Completed", "check_circle", "green"),
    ("in_progress", "In Progress", "schedule", "orange"),
    ("total_processed", "Items Processed", "task_alt", "teal"),
    ("total_warnings", "Warnings", "info", "yellow-8"),
    ("total_errors", "Errors", "warning", "red"),
]


class StatsView:
    """Grid of aggregate statistic cards.

    Values update in place via set_stats(); the cards are built once in render().
    """

    def __init__(self) -> None:
        self._values: dict[str, ui.label] = {}
        self._stats: Optional[ProgressStats] = None

    def render(self) -> None:
        self._values = {}
        with ui.grid(columns=3).classes("w-full gap-4"):
            for key, label, icon, color in _CARDS:
                with ui.card().classes("p-4"):
                    with ui.row().classes("w-full items-center justify-between"):
                        ui.label(label).classes("text-sm text-gray-500")
                        ui.icon(icon, color=color).classes("text-2xl")
                    self._values[key] = ui.label("0").classes("text-3xl font-bold")
        if self._stats is not None:
            self.set_stats(self._stats)

    def set_stats(self, stats: ProgressStats) -> None:
        self._stats = stats
        for key, value in stats.to_dict().items():
            label = self._values.get(key)
            if label is not None:
                label.set_text(f"{value:,}")
