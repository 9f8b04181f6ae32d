"""Utilities for checking client validity and handling client lifecycle."""

from __future__ import annotations

from typing import Callable

from nicegui import ui

from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)


def is_client_alive() -> bool:
    """True if the current NiceGUI client context is still accessible."""
    try:
        _ = ui.context.client.id
        return True
    except (AttributeError, RuntimeError):
        return False


def safe_call(func: Callable, *args, **kwargs) -> None:
    """Call a UI update function, ignoring "client deleted" errors.

    A poll result can settle just after its tab closed; the view update then
    targets deleted elements. Any other RuntimeError is logged and re-raised.
    """
    try:
        func(*args, **kwargs)
    except RuntimeError as e:
        if "deleted" not in str(e).lower():
            logger.error(f"safe_call caught RuntimeError in {getattr(func, '__name__', func)}: {e}")
            raise
