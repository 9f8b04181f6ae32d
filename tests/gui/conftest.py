"""Pytest fixtures for GUI tests."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, Generator

import pytest

from pebbles.gui import app_context
from pebbles.gui.app_context import AppContext
from pebbles.gui.bus import BusConfig, EventBus


class ManualTimer:
    """Stand-in for ui.timer that only fires when the test calls tick()."""

    def __init__(self, interval_s: float, callback: Callable[[], None]) -> None:
        self.interval_s = interval_s
        self.callback = callback
        self.cancelled = False

    def tick(self) -> None:
        if not self.cancelled:
            self.callback()

    def cancel(self) -> None:
        self.cancelled = True


class DummyStorage:
    """Simple storage stub mimicking nicegui.app.storage."""

    def __init__(self) -> None:
        self.user: dict[str, str] = {}


@pytest.fixture
def bus() -> Generator[EventBus, None, None]:
    """Create an EventBus instance for testing.

    Yields:
        EventBus instance with trace disabled.
    """
    # Created directly (not via get_event_bus) so no NiceGUI client context is needed
    test_bus = EventBus(client_id="test-client", config=BusConfig(trace=False))
    yield test_bus
    test_bus.clear()


@pytest.fixture
def timers() -> list[ManualTimer]:
    """Timers created through ``timer_factory`` (see manual_timer_factory)."""
    return []


@pytest.fixture
def manual_timer_factory(timers):
    def _factory(interval_s: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval_s, callback)
        timers.append(timer)
        return timer

    return _factory


@pytest.fixture
def storage(monkeypatch) -> DummyStorage:
    s = DummyStorage()
    monkeypatch.setattr(app_context, "app", SimpleNamespace(storage=s))
    return s


@pytest.fixture
def fresh_context(tmp_path, monkeypatch, storage) -> Generator[Callable[[], AppContext], None, None]:
    """Factory for a fresh AppContext singleton backed by a tmp config file."""
    monkeypatch.setenv("PEBBLES_APP_CONFIG_PATH", str(tmp_path / "app_config.json"))
    monkeypatch.delenv("PEBBLES_API_BASE_URL", raising=False)
    monkeypatch.delenv("PEBBLES_CLIENT_KEY", raising=False)
    monkeypatch.setattr(app_context, "_set_up_gui_defaults", lambda: None)
    AppContext._instance = None

    def _make() -> AppContext:
        return AppContext()

    yield _make
    AppContext._instance = None
