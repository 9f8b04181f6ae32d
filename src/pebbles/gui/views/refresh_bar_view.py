"""Page title with "Last updated" label and a Refresh button."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from nicegui import ui


class RefreshBarView:
    def __init__(self, title: str, *, on_refresh: Callable[[], None], on_back: Optional[Callable[[], None]] = None) -> None:
        self._title = title
        self._on_refresh = on_refresh
        self._on_back = on_back
        self._updated: Optional[ui.label] = None
        self._button: Optional[ui.button] = None

    def render(self) -> None:
        with ui.row().classes("w-full items-center justify-between"):
            with ui.row().classes("items-center gap-2"):
                if self._on_back is not None:
                    ui.button("Back", icon="arrow_back", on_click=self._on_back).props("flat")
                ui.label(self._title).classes("text-2xl font-bold")
            with ui.row().classes("items-center gap-4"):
                self._updated = ui.label("").classes("text-sm text-gray-500")
                self._button = ui.button("Refresh", icon="refresh", on_click=self._on_refresh).props("outline")

    def set_status(self, *, last_updated: Optional[datetime], loading: bool) -> None:
        if self._updated is not None and last_updated is not None:
            self._updated.set_text(f"Last updated: {last_updated.strftime('%H:%M:%S')}")
        if self._button is not None:
            if loading:
                self._button.props("loading")
            else:
                self._button.props(remove="loading")
