"""Dashboard: aggregate statistics and recent activity, refreshed every second."""

from __future__ import annotations

from typing import Optional

from nicegui import ui

from pebbles.core.records import DetailKey
from pebbles.gui.controllers import CollectionSyncController
from pebbles.gui.events import ErrorDismissed, RefreshRequested
from pebbles.gui.pages.base_page import BasePage, ui_timer_factory
from pebbles.gui.urls import PROGRESS_LIST, detail_url
from pebbles.gui.views import (
    ErrorBannerView,
    ProgressTableView,
    RefreshBarView,
    StatsBindings,
    StatsView,
    SyncStatusBindings,
)


class DashboardPage(BasePage):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._sync: Optional[CollectionSyncController] = None
        self._bindings: list = []

    def build(self) -> None:
        refresh_bar = RefreshBarView("Dashboard", on_refresh=lambda: self.bus.emit(RefreshRequested()))
        banner = ErrorBannerView(on_dismiss=lambda: self.bus.emit(ErrorDismissed()))
        stats = StatsView()
        recent_table = ProgressTableView(
            on_open=self._open_detail, title="Recent Activity", empty_label="No progress data yet"
        )

        refresh_bar.render()
        banner.render()
        stats.render()
        with ui.card().classes("w-full p-4"):
            recent_table.render()
            ui.button("View all", icon="list", on_click=lambda: ui.navigate.to(PROGRESS_LIST)).props("flat")

        self._bindings = [
            SyncStatusBindings(self.bus, banner, refresh_bar),
            StatsBindings(self.bus, stats, recent_table),
        ]

        cfg = self.context.app_config.data
        self._sync = CollectionSyncController(
            self.client.collection_fetcher(self.context.client_key),
            self.bus,
            interval_s=cfg.dashboard_poll_s,
            timer_factory=ui_timer_factory,
            name="dashboard",
        )
        self._sync.start()

    def _open_detail(self, key: DetailKey) -> None:
        ui.navigate.to(detail_url(key))

    def stop(self) -> None:
        if self._sync is not None:
            self._sync.stop()
        for b in self._bindings:
            b.teardown()
