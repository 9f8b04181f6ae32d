"""Pebbles progress GUI entry point.

Each route builds a fresh page object with the client's EventBus. Pages own
their polling loops and cancel them when the browser tab disconnects.

Run with:
    pebbles-gui
    python -m pebbles.gui.app
"""

from __future__ import annotations

import os

from nicegui import ui

from pebbles.core.records import DetailKey
from pebbles.core.utils.logging import get_logger, setup_logging
from pebbles.gui.app_context import AppContext
from pebbles.gui.bus import get_event_bus
from pebbles.gui.config import APP_NAME, DEFAULT_PORT, STORAGE_SECRET
from pebbles.gui.pages import DashboardPage, LoginPage, ProgressDetailPage, ProgressListPage
from pebbles.gui.urls import DASHBOARD, LOGIN, PROGRESS_DETAIL, PROGRESS_LIST

logger = get_logger(__name__)

# Configure logging at module import (runs in the uvicorn worker too)
setup_logging(level=os.getenv("PEBBLES_LOG_LEVEL", "INFO"))

# Shared application context (singleton, process-level)
context = AppContext()


@ui.page(LOGIN)
def login() -> None:
    LoginPage(context, get_event_bus()).render(page_title=f"{APP_NAME} - Login")


@ui.page(DASHBOARD)
def dashboard() -> None:
    DashboardPage(context, get_event_bus()).render(page_title=APP_NAME)


@ui.page(PROGRESS_LIST)
def progress_list() -> None:
    ProgressListPage(context, get_event_bus()).render(page_title=f"{APP_NAME} - Progress List")


@ui.page(PROGRESS_DETAIL)
def progress_detail(client_key: str, filename: str) -> None:
    key = DetailKey(client_key=client_key, filename=filename)
    ProgressDetailPage(context, get_event_bus(), key=key).render(page_title=f"{APP_NAME} - {filename}")


def _env_bool(name: str, default: bool) -> bool:
    """Parse env var as bool; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    """Parse env var as int; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def main(*, reload: bool | None = None, native_bool: bool | None = None) -> None:
    """Start the Pebbles progress GUI.

    Defaults (no env vars, no args):
      - native=False (browser)
      - reload=False

    Env vars (used only when arg is None):
      - PEBBLES_GUI_NATIVE: 1/0
      - PEBBLES_GUI_RELOAD: 1/0
      - HOST: bind host
      - PORT: bind port
    """
    native_bool = _env_bool("PEBBLES_GUI_NATIVE", False) if native_bool is None else native_bool
    reload = _env_bool("PEBBLES_GUI_RELOAD", False) if reload is None else reload
    port = _env_int("PORT", DEFAULT_PORT)

    # Web deployments must bind 0.0.0.0; native mode only needs localhost.
    default_host = "127.0.0.1" if native_bool else "0.0.0.0"
    host = os.getenv("HOST", default_host)

    logger.info(
        f"Starting {APP_NAME}: host={host} port={port} reload={reload} native={native_bool} "
        f"api={context.app_config.data.api_base_url} client_key={context.client_key}"
    )

    ui.run(
        host=host,
        port=port,
        reload=reload,
        native=native_bool,
        storage_secret=STORAGE_SECRET,
        title=APP_NAME,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
