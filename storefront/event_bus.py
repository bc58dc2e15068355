"""
In-memory diagnostics bus.

The engine never fails on corrupt storage; it absorbs the problem and reports
it. Reports (and ordinary lifecycle notices such as "order placed") are
published here so a UI layer can show them without the engine knowing who
listens.

Design decisions:
- Synchronous delivery, in subscription order
- Type-based subscriptions plus a "*" wildcard
- Every published event is kept in an in-memory log
- A failing handler is logged and never interrupts the publisher
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

logger = logging.getLogger("event_bus")


@dataclass
class Event:
    """
    Something that happened to shopper state.

    Attributes:
        event_type: String name of the event type (used for routing)
        payload: Event-specific data
        source: Component that published the event
        event_id: Unique identifier for this event instance
        timestamp: When the event occurred
    """
    event_type: str
    payload: dict[str, Any]
    source: str
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"Event({self.event_type}, id={self.event_id[:8]}, source={self.source})"


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Simple pub/sub for diagnostics.

    Example:
        bus = EventBus()
        bus.subscribe("DirectoryRepaired", lambda e: print(e.payload["email"]))
        bus.publish(directory_repaired("alice@example.com"))
    """

    def __init__(self):
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)
        self._event_log: list[Event] = []

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers[event_type].append(handler)
        logger.debug(f"Subscribed handler to '{event_type}' events")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to every event type."""
        self._subscribers["*"].append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """
        Remove a handler.

        Returns:
            True if the handler was found and removed, False otherwise
        """
        try:
            self._subscribers[event_type].remove(handler)
            return True
        except ValueError:
            return False

    def publish(self, event: Event) -> int:
        """
        Deliver an event to its type subscribers, then to wildcard subscribers.

        Returns:
            Number of handlers that received the event
        """
        self._event_log.append(event)
        logger.debug(f"Publishing: {event}")

        handlers = self._subscribers.get(event.event_type, []) + self._subscribers.get("*", [])
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler raised exception for {event}: {e}")

        return len(handlers)

    def get_subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, []))

    def get_event_log(self, event_type: Optional[str] = None) -> list[Event]:
        """Copy of the published events, optionally filtered by type."""
        if event_type is None:
            return self._event_log.copy()
        return [e for e in self._event_log if e.event_type == event_type]

    def clear_event_log(self) -> None:
        self._event_log.clear()


# Module-level singleton for convenience
_default_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """Get the default event bus singleton."""
    global _default_bus
    if _default_bus is None:
        _default_bus = EventBus()
    return _default_bus


def reset_event_bus() -> EventBus:
    """Replace the default event bus (used by tests)."""
    global _default_bus
    _default_bus = EventBus()
    return _default_bus
