"""Event bus for the progress GUI with per-client isolation.

Each NiceGUI client (browser tab) gets its own EventBus, so the intents and
sync results of one tab never reach the views of another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, Dict, List, Type, TypeVar

from nicegui import ui

from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)

TEvent = TypeVar("TEvent")

# client id -> EventBus
_CLIENT_BUSES: Dict[str, EventBus] = {}


@dataclass(frozen=True, slots=True)
class BusConfig:
    """Configuration for EventBus behavior.

    Attributes:
        trace: If True, log every emission and handler call. Polling emits
            once a second per page, so this is off by default.
    """

    trace: bool = False


class EventBus:
    """A typed event bus for explicit GUI signal flow.

    Events are routed synchronously, in subscription order, to all handlers
    registered for the event's concrete type.
    """

    def __init__(self, client_id: str, config: BusConfig | None = None) -> None:
        self._config: BusConfig = config or BusConfig()
        self._subs: DefaultDict[Type[Any], List[Callable[[Any], None]]] = DefaultDict(list)
        self._client_id: str = client_id
        logger.debug(f"[bus] Created EventBus for client {client_id}")

    @property
    def client_id(self) -> str:
        return self._client_id

    def subscribe(self, event_type: Type[TEvent], handler: Callable[[TEvent], None]) -> None:
        """Subscribe a handler for a concrete event type.

        Subscribing the same handler twice for the same type has no effect.

        Args:
            event_type: The concrete event type (e.g. CollectionUpdated).
            handler: Callback receiving events of this type.
        """
        handlers = self._subs[event_type]
        if handler in handlers:
            logger.debug(
                f"[bus] Handler {handler.__qualname__} already subscribed to {event_type.__name__}, skipping"
            )
            return
        handlers.append(handler)
        logger.debug(
            f"[bus] Subscribed {handler.__qualname__} to {event_type.__name__} "
            f"(client={self._client_id}, total_handlers={len(handlers)})"
        )

    def unsubscribe(self, event_type: Type[TEvent], handler: Callable[[TEvent], None]) -> None:
        """Remove a handler. Safe to call for a handler that was never subscribed."""
        handlers = self._subs.get(event_type)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        logger.debug(
            f"[bus] Unsubscribed {handler.__qualname__} from {event_type.__name__} "
            f"(client={self._client_id}, remaining_handlers={len(handlers)})"
        )

    def emit(self, event: Any) -> None:
        """Deliver an event to all handlers of its type.

        A handler that raises is logged and does not stop delivery to the
        remaining handlers.
        """
        etype = type(event)
        handlers = list(self._subs.get(etype, []))

        if self._config.trace:
            logger.info(f"[bus] emit {etype.__name__}: {event} (client={self._client_id}, handlers={len(handlers)})")

        for h in handlers:
            try:
                h(event)
            except Exception:
                name = getattr(h, "__qualname__", repr(h))
                logger.exception(
                    f"[bus] Exception in handler {name} for {etype.__name__} (client={self._client_id})"
                )

    def handler_count(self, event_type: Type[Any]) -> int:
        return len(self._subs.get(event_type, []))

    def clear(self) -> None:
        """Drop all subscriptions. The bus instance stays usable."""
        count = sum(len(handlers) for handlers in self._subs.values())
        self._subs.clear()
        logger.debug(f"[bus] Cleared {count} subscriptions (client={self._client_id})")


def get_client_id() -> str:
    """Current NiceGUI client id, or "default" outside a page context."""
    try:
        if hasattr(ui.context, "client") and hasattr(ui.context.client, "id"):
            return str(ui.context.client.id)
    except (AttributeError, RuntimeError):
        pass
    return "default"


def get_event_bus(config: BusConfig | None = None) -> EventBus:
    """Get or create the EventBus for the current NiceGUI client.

    Must be called within a page function. Tests create EventBus directly.
    """
    client_id = get_client_id()
    if client_id not in _CLIENT_BUSES:
        _CLIENT_BUSES[client_id] = EventBus(client_id, config)
        logger.debug(f"[bus] Created new EventBus for client {client_id}")
    return _CLIENT_BUSES[client_id]


def clear_client_bus(client_id: str | None = None) -> None:
    """Clear and forget a client's bus (current client if None)."""
    if client_id is None:
        client_id = get_client_id()
    bus = _CLIENT_BUSES.pop(client_id, None)
    if bus is not None:
        bus.clear()
        logger.debug(f"[bus] Removed bus for client {client_id}")
