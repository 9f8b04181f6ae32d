"""Tests for BasePage lifecycle wiring."""

from __future__ import annotations

from unittest.mock import MagicMock

from pebbles.core.session import SessionContext
from pebbles.gui.events import PageChanged
from pebbles.gui.pages.base_page import BasePage


class _Page(BasePage):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.stop_calls = 0

    def build(self) -> None:
        pass

    def stop(self) -> None:
        self.stop_calls += 1


def _page(bus) -> _Page:
    context = MagicMock()
    context.session_for_page.return_value = SessionContext()
    return _Page(context, bus)


def test_teardown_is_registered_on_client_delete_not_disconnect(bus) -> None:
    page = _page(bus)
    client = MagicMock()

    page._register_teardown(client)

    client.on_delete.assert_called_once_with(page.teardown)
    client.on_disconnect.assert_not_called()


def test_teardown_stops_once(bus) -> None:
    page = _page(bus)
    page.teardown()
    page.teardown()
    assert page.stop_calls == 1


def test_page_keeps_running_until_teardown(bus) -> None:
    page = _page(bus)
    received: list[PageChanged] = []
    bus.subscribe(PageChanged, received.append)
    page._register_teardown(MagicMock())
    bus.emit(PageChanged(page=2))
    assert received == [PageChanged(page=2)]
    assert page.stop_calls == 0
