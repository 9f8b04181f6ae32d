"""Application context singleton for shared state across pages.

Holds what is process-wide: the loaded AppConfig and the factory for
ProgressClient instances. Per-user state (the bearer token) lives in
``app.storage.user`` and is turned into a SessionContext on each page load;
per-tab state (polling loops, list filters, expansion flags) lives in the
page objects.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import httpx
from nicegui import app, ui

from pebbles.core.errors import SessionError
from pebbles.core.progress_client import ProgressClient
from pebbles.core.session import SessionContext, SessionUser
from pebbles.core.utils.logging import get_logger
from pebbles.gui.app_config import AppConfig
from pebbles.gui.config import TOKEN_STORAGE_KEY

logger = get_logger(__name__)


def _set_up_gui_defaults() -> None:
    """Set default classes and props for the ui elements the pages use."""
    ui.label.default_classes("select-text")
    ui.button.default_props("dense no-caps")
    ui.select.default_props("dense outlined")
    ui.input.default_props("dense outlined")
    ui.linear_progress.default_props("rounded")


class AppContext:
    """Singleton managing shared application state across all pages.

    Attributes:
        app_config: AppConfig with service URL, client key and poll intervals.
        transport: Optional httpx transport handed to every ProgressClient
            (None in production; a MockTransport in tests or demos).
    """

    _instance: Optional[AppContext] = None

    def __new__(cls) -> AppContext:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return

        logger.info("Initializing AppContext singleton (should happen once)")

        self.app_config = self._load_app_config()
        logger.info(f"App config loaded from: {self.app_config.path}")
        self._apply_env_overrides()

        self.transport: Optional[httpx.AsyncBaseTransport] = None

        _set_up_gui_defaults()

        self._initialized = True
        logger.info("AppContext initialized successfully")

    @staticmethod
    def _load_app_config() -> AppConfig:
        app_config_path = os.getenv("PEBBLES_APP_CONFIG_PATH")
        if app_config_path:
            return AppConfig.load(config_path=Path(app_config_path))
        return AppConfig.load()

    def _apply_env_overrides(self) -> None:
        """Environment variables win over the config file (not persisted)."""
        for env_name, key in (
            ("PEBBLES_API_BASE_URL", "api_base_url"),
            ("PEBBLES_CLIENT_KEY", "client_key"),
        ):
            raw = os.getenv(env_name)
            if raw:
                self.app_config.set_attribute(key, raw.strip())
                logger.info(f"{key} overridden by {env_name}: {raw.strip()}")

    @property
    def client_key(self) -> str:
        return self.app_config.data.client_key

    # -----------------------------
    # Session (per browser user)
    # -----------------------------
    def session_for_page(self) -> SessionContext:
        """Build a SessionContext from the token stored for this browser.

        An invalid or expired stored token is removed, leaving the session
        unauthenticated.
        """
        session = SessionContext()
        token = app.storage.user.get(TOKEN_STORAGE_KEY)
        if token:
            try:
                session.start(token)
            except SessionError as e:
                logger.info(f"discarding stored token: {e}")
                app.storage.user.pop(TOKEN_STORAGE_KEY, None)
        return session

    def login(self, token: str) -> SessionUser:
        """Validate a token and remember it for this browser.

        Raises:
            SessionError: If the token is empty, malformed or expired.
        """
        user = SessionContext().start(token)
        app.storage.user[TOKEN_STORAGE_KEY] = token.strip()
        return user

    def logout(self) -> None:
        app.storage.user.pop(TOKEN_STORAGE_KEY, None)
        logger.info("user logged out")

    # -----------------------------
    # Progress service
    # -----------------------------
    def create_client(self, session: SessionContext) -> ProgressClient:
        """New ProgressClient bound to a session. The caller owns aclose()."""
        cfg = self.app_config.data
        return ProgressClient(
            cfg.api_base_url,
            session,
            timeout_s=cfg.request_timeout_s,
            transport=self.transport,
        )

    def reset(self) -> None:
        """Reload config from disk (useful for testing)."""
        logger.info("Resetting AppContext")
        self.app_config = self._load_app_config()
        self._apply_env_overrides()

    @classmethod
    def get_instance(cls) -> AppContext:
        return cls()
