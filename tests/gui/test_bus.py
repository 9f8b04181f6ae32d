"""Tests for the per-client EventBus."""

from __future__ import annotations

from dataclasses import dataclass

from pebbles.gui import bus as bus_module
from pebbles.gui.bus import EventBus, clear_client_bus, get_event_bus
from pebbles.gui.events import PageChanged, SearchChanged


@dataclass(frozen=True)
class _Other:
    value: int


def test_emit_routes_by_concrete_type(bus: EventBus) -> None:
    searches: list[SearchChanged] = []
    pages: list[PageChanged] = []
    bus.subscribe(SearchChanged, searches.append)
    bus.subscribe(PageChanged, pages.append)

    bus.emit(SearchChanged(text="abc"))
    bus.emit(_Other(1))

    assert searches == [SearchChanged(text="abc")]
    assert pages == []


def test_handlers_run_in_subscription_order(bus: EventBus) -> None:
    calls: list[str] = []
    bus.subscribe(PageChanged, lambda e: calls.append("first"))
    bus.subscribe(PageChanged, lambda e: calls.append("second"))
    bus.emit(PageChanged(page=2))
    assert calls == ["first", "second"]


def test_duplicate_subscription_is_ignored(bus: EventBus) -> None:
    received: list[PageChanged] = []
    bus.subscribe(PageChanged, received.append)
    bus.subscribe(PageChanged, received.append)
    assert bus.handler_count(PageChanged) == 1
    bus.emit(PageChanged(page=1))
    assert len(received) == 1


def test_unsubscribe(bus: EventBus) -> None:
    received: list[PageChanged] = []
    bus.subscribe(PageChanged, received.append)
    bus.unsubscribe(PageChanged, received.append)
    bus.unsubscribe(PageChanged, received.append)
    bus.unsubscribe(SearchChanged, received.append)
    bus.emit(PageChanged(page=1))
    assert received == []


def test_failing_handler_does_not_block_others(bus: EventBus) -> None:
    received: list[PageChanged] = []

    def broken(e: PageChanged) -> None:
        raise RuntimeError("handler bug")

    bus.subscribe(PageChanged, broken)
    bus.subscribe(PageChanged, received.append)
    bus.emit(PageChanged(page=3))
    assert received == [PageChanged(page=3)]


def test_handler_may_unsubscribe_during_emit(bus: EventBus) -> None:
    calls: list[int] = []

    def once(e: PageChanged) -> None:
        calls.append(e.page)
        bus.unsubscribe(PageChanged, once)

    bus.subscribe(PageChanged, once)
    bus.emit(PageChanged(page=1))
    bus.emit(PageChanged(page=2))
    assert calls == [1]


def test_clear_drops_all_handlers(bus: EventBus) -> None:
    bus.subscribe(PageChanged, lambda e: None)
    bus.subscribe(SearchChanged, lambda e: None)
    bus.clear()
    assert bus.handler_count(PageChanged) == 0
    assert bus.handler_count(SearchChanged) == 0


def test_get_event_bus_is_per_client(monkeypatch) -> None:
    current = {"id": "tab-a"}
    monkeypatch.setattr(bus_module, "get_client_id", lambda: current["id"])
    monkeypatch.setattr(bus_module, "_CLIENT_BUSES", {})

    a = get_event_bus()
    assert get_event_bus() is a
    assert a.client_id == "tab-a"

    current["id"] = "tab-b"
    b = get_event_bus()
    assert b is not a

    received: list[PageChanged] = []
    a.subscribe(PageChanged, received.append)
    b.emit(PageChanged(page=1))
    assert received == []


def test_clear_client_bus_forgets_bus(monkeypatch) -> None:
    monkeypatch.setattr(bus_module, "get_client_id", lambda: "tab-a")
    monkeypatch.setattr(bus_module, "_CLIENT_BUSES", {})

    a = get_event_bus()
    a.subscribe(PageChanged, lambda e: None)
    clear_client_bus()
    assert a.handler_count(PageChanged) == 0
    assert get_event_bus() is not a

    clear_client_bus("never-created")


def test_get_client_id_outside_page_context() -> None:
    assert isinstance(bus_module.get_client_id(), str)
