"""Base page class with shared header, auth guard and lifecycle management."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from nicegui import background_tasks, ui

from pebbles.core.progress_client import ProgressClient
from pebbles.core.session import SessionContext
from pebbles.core.utils.logging import get_logger
from pebbles.gui.app_context import AppContext
from pebbles.gui.bus import EventBus, clear_client_bus, get_client_id
from pebbles.gui.config import APP_NAME
from pebbles.gui.urls import DASHBOARD, LOGIN, PROGRESS_LIST

logger = get_logger(__name__)

NAV_ITEMS: list[tuple[str, str, str]] = [
    ("Dashboard", "dashboard", DASHBOARD),
    ("Progress List", "list", PROGRESS_LIST),
]


def ui_timer_factory(interval_s: float, callback):
    """PollingLoop timer backed by ui.timer (first tick after one interval)."""
    return ui.timer(interval_s, callback, immediate=False)


class BasePage(ABC):
    """Base class for all pages.

    Provides:
    - Consistent header/navigation across pages
    - Redirect to /login for pages that require a session
    - A ProgressClient bound to the page's session
    - Teardown when the client is deleted (stop polling, close HTTP client, clear bus)

    Attributes:
        context: Shared application context (singleton).
        bus: Per-client EventBus instance.
        session: Session built from the browser's stored token.
    """

    requires_auth: bool = True

    def __init__(self, context: AppContext, bus: EventBus) -> None:
        self.context: AppContext = context
        self.bus: EventBus = bus
        self.session: SessionContext = context.session_for_page()
        self._client_id: str = get_client_id()
        self._client: Optional[ProgressClient] = None
        self._torn_down: bool = False

    @property
    def client(self) -> ProgressClient:
        """ProgressClient for this page, created on first use."""
        if self._client is None:
            self._client = self.context.create_client(self.session)
        return self._client

    def render(self, *, page_title: str) -> None:
        """Render shared header, then page-specific content."""
        if self.requires_auth and not self.session.is_authenticated:
            logger.info("no active session, redirecting to /login")
            ui.navigate.to(LOGIN)
            return

        ui.page_title(page_title)
        self._build_header()
        self._register_teardown(ui.context.client)

        with ui.column().classes("w-full max-w-6xl mx-auto p-4 gap-4"):
            self.build()

    def _register_teardown(self, client) -> None:
        """Tear down when the client is deleted.

        A websocket disconnect is not enough: NiceGUI reconnects a tab after
        a short network drop and only deletes the client once the reconnect
        timeout has passed.
        """
        client.on_delete(self.teardown)

    def _build_header(self) -> None:
        with ui.header().classes("items-center justify-between"):
            with ui.row().classes("items-center gap-4"):
                ui.label(APP_NAME).classes("text-xl font-bold text-white cursor-pointer").on(
                    "click", lambda: ui.navigate.to(DASHBOARD)
                )
                if self.session.is_authenticated:
                    for label, icon, path in NAV_ITEMS:
                        ui.button(label, icon=icon, on_click=lambda p=path: ui.navigate.to(p)).props(
                            "flat text-color=white"
                        )
            if self.session.user is not None:
                with ui.row().classes("items-center gap-2"):
                    ui.label(self.session.user.display_name).classes("text-sm text-white")
                    ui.button("Logout", icon="logout", on_click=self._logout).props("flat text-color=white")

    def _logout(self) -> None:
        self.context.logout()
        self.session.clear()
        ui.navigate.to(LOGIN)

    def teardown(self) -> None:
        """Stop everything this page started. Idempotent."""
        if self._torn_down:
            return
        self._torn_down = True
        logger.debug(f"tearing down {type(self).__name__} (client={self._client_id})")
        self.stop()
        if self._client is not None:
            background_tasks.create(self._client.aclose(), name="close-progress-client")
            self._client = None
        clear_client_bus(self._client_id)

    def stop(self) -> None:
        """Cancel controllers and bindings. Override in subclasses."""

    @abstractmethod
    def build(self) -> None:
        """Build page-specific content."""
        raise NotImplementedError
