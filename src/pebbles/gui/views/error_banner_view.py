"""Dismissable error alert shown above page content."""

from __future__ import annotations

from typing import Callable, Optional

from nicegui import ui

from pebbles.core.errors import ProgressFetchError


class ErrorBannerView:
    """Red alert with the current sync error.

    A Back button is offered only for not-found errors (the detail record is
    gone); other errors keep showing the last good data underneath.
    """

    def __init__(self, *, on_dismiss: Callable[[], None], on_back: Optional[Callable[[], None]] = None) -> None:
        self._on_dismiss = on_dismiss
        self._on_back = on_back
        self._root: Optional[ui.card] = None
        self._message: Optional[ui.label] = None
        self._back: Optional[ui.button] = None

    def render(self) -> None:
        with ui.card().classes("w-full bg-red-50 border border-red-300 p-3") as self._root:
            with ui.row().classes("w-full items-center justify-between no-wrap"):
                with ui.row().classes("items-center gap-2 no-wrap"):
                    ui.icon("warning", color="red").classes("text-xl")
                    with ui.column().classes("gap-0"):
                        ui.label("Error").classes("font-semibold text-red-800")
                        self._message = ui.label("").classes("text-red-800")
                ui.button(icon="close", on_click=self._on_dismiss).props("flat round dense color=red")
            if self._on_back is not None:
                self._back = ui.button("Back to Progress List", icon="arrow_back", on_click=self._on_back).props(
                    "flat color=primary"
                )
        self._root.set_visibility(False)

    def set_error(self, error: Optional[ProgressFetchError], *, not_found: bool = False) -> None:
        if self._root is None:
            return
        if error is None:
            self._root.set_visibility(False)
            return
        if self._message is not None:
            self._message.set_text(error.message)
        if self._back is not None:
            self._back.set_visibility(not_found)
        self._root.set_visibility(True)

    def notify(self, message: str) -> None:
        """Toast a failure. Runs inside the banner's slot so it also works from a poll task."""
        if self._root is None:
            return
        with self._root:
            ui.notify(message, type="negative", position="top-right")
