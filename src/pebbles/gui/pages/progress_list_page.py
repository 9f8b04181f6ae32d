"""Progress list: searchable, filterable, paginated table refreshed every few seconds."""

from __future__ import annotations

from typing import Optional

from nicegui import ui

from pebbles.core.records import DetailKey
from pebbles.gui.controllers import CollectionSyncController, ListViewController
from pebbles.gui.events import ErrorDismissed, RefreshRequested
from pebbles.gui.pages.base_page import BasePage, ui_timer_factory
from pebbles.gui.urls import detail_url
from pebbles.gui.views import (
    ErrorBannerView,
    ListBindings,
    ListControlsView,
    ProgressTableView,
    RefreshBarView,
    SyncStatusBindings,
)


class ProgressListPage(BasePage):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._sync: Optional[CollectionSyncController] = None
        self._list: Optional[ListViewController] = None
        self._bindings: list = []

    def build(self) -> None:
        refresh_bar = RefreshBarView("Progress List", on_refresh=lambda: self.bus.emit(RefreshRequested()))
        banner = ErrorBannerView(on_dismiss=lambda: self.bus.emit(ErrorDismissed()))
        controls = ListControlsView(
            on_search=self.bus.emit,
            on_status_filter=self.bus.emit,
            on_page=self.bus.emit,
        )
        table = ProgressTableView(on_open=self._open_detail)

        refresh_bar.render()
        banner.render()
        with ui.card().classes("w-full p-4 gap-4"):
            controls.render()
            table.render()
            controls.render_pagination()

        cfg = self.context.app_config.data
        # ListViewController subscribes before the sync controller can emit
        self._list = ListViewController(self.bus, page_size=cfg.page_size)
        self._bindings = [
            SyncStatusBindings(self.bus, banner, refresh_bar),
            ListBindings(self.bus, table, controls),
        ]
        self._sync = CollectionSyncController(
            self.client.collection_fetcher(self.context.client_key),
            self.bus,
            interval_s=cfg.list_poll_s,
            timer_factory=ui_timer_factory,
            name="progress-list",
        )
        self._sync.start()

    def _open_detail(self, key: DetailKey) -> None:
        ui.navigate.to(detail_url(key))

    def stop(self) -> None:
        if self._sync is not None:
            self._sync.stop()
        if self._list is not None:
            self._list.stop()
        for b in self._bindings:
            b.teardown()
