"""Detail page for one file: progress, statistics and error/warning tables."""

from __future__ import annotations

from typing import Optional

from nicegui import ui

from pebbles.core.records import DetailKey
from pebbles.gui.controllers import ExpansionController, RecordSyncController
from pebbles.gui.events import ErrorDismissed, RefreshRequested
from pebbles.gui.pages.base_page import BasePage, ui_timer_factory
from pebbles.gui.urls import DASHBOARD, PROGRESS_LIST
from pebbles.gui.views import (
    DetailBindings,
    ErrorBannerView,
    PatternTableView,
    ProgressDetailView,
    RefreshBarView,
    SyncStatusBindings,
)


class ProgressDetailPage(BasePage):
    """Detail view keyed by (client_key, filename) from the route."""

    def __init__(self, *args, key: DetailKey, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.key = key
        self._sync: Optional[RecordSyncController] = None
        self._expansion: Optional[ExpansionController] = None
        self._bindings: list = []

    def build(self) -> None:
        with ui.row().classes("items-center gap-1 text-sm"):
            ui.link("Dashboard", DASHBOARD)
            ui.label("/")
            ui.link("Progress List", PROGRESS_LIST)
            ui.label("/")
            ui.label(self.key.filename).classes("text-gray-500")

        refresh_bar = RefreshBarView(
            self.key.filename,
            on_refresh=lambda: self.bus.emit(RefreshRequested()),
            on_back=self._back,
        )
        banner = ErrorBannerView(on_dismiss=lambda: self.bus.emit(ErrorDismissed()), on_back=self._back)
        detail = ProgressDetailView()
        errors_table = PatternTableView("errors", on_toggle=self.bus.emit)
        warnings_table = PatternTableView("warnings", on_toggle=self.bus.emit)

        refresh_bar.render()
        banner.render()
        detail.render()
        errors_table.render()
        warnings_table.render()

        cfg = self.context.app_config.data
        self._expansion = ExpansionController(self.bus)
        self._bindings = [
            SyncStatusBindings(self.bus, banner, refresh_bar),
            DetailBindings(self.bus, detail, errors_table, warnings_table),
        ]
        self._sync = RecordSyncController(
            self.client.record_fetcher,
            self.key,
            self.bus,
            interval_s=cfg.detail_poll_s,
            timer_factory=ui_timer_factory,
        )
        self._sync.start()

    def _back(self) -> None:
        ui.navigate.to(PROGRESS_LIST)

    def stop(self) -> None:
        if self._sync is not None:
            self._sync.stop()
        if self._expansion is not None:
            self._expansion.stop()
        for b in self._bindings:
            b.teardown()
