"""Login page: accept a bearer token and start a session."""

from __future__ import annotations

from nicegui import ui

from pebbles.core.errors import SessionError
from pebbles.core.utils.logging import get_logger
from pebbles.gui.pages.base_page import BasePage
from pebbles.gui.urls import DASHBOARD

logger = get_logger(__name__)


class LoginPage(BasePage):
    requires_auth = False

    def render(self, *, page_title: str) -> None:
        if self.session.is_authenticated:
            ui.navigate.to(DASHBOARD)
            return
        super().render(page_title=page_title)

    def build(self) -> None:
        with ui.card().classes("w-full max-w-md self-center mt-16 p-8 items-center gap-4"):
            ui.label("Welcome to Pebbles").classes("text-2xl font-bold text-primary")
            ui.label("Real-time Progress Tracking").classes("text-lg text-gray-500")
            ui.label("Monitor your file processing progress with live updates and detailed insights!").classes(
                "text-center"
            )
            token = ui.input("Access token", password=True, password_toggle_button=True).classes("w-full")
            ui.button("Sign in", icon="login", on_click=lambda: self._login(token.value)).classes("w-full")
            token.on("keydown.enter", lambda: self._login(token.value))

    def _login(self, token: str) -> None:
        try:
            user = self.context.login(token)
        except SessionError as e:
            logger.warning(f"login rejected: {e}")
            ui.notify(f"Login failed: {e}", type="negative")
            return
        logger.info(f"login successful for {user.display_name}")
        ui.navigate.to(DASHBOARD)
