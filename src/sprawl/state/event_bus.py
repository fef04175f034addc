"""
Event bus for Sprawl state changes.

Provides decoupled communication between the engine and whatever sits
outside it (quest log, UI, save hooks). Collaborators subscribe to events
and react without the engine knowing they exist.

Usage:
    from .event_bus import EventBus, EventType

    bus = EventBus()
    bus.on(EventType.REPUTATION_CHANGED, my_handler)

    engine = StandingEngine(bus=bus)
    engine.reputation.add_reputation("corp1", 10, "Delivered the package")

    # Handler receives event
    def my_handler(event: GameEvent):
        print(f"{event.data['faction_id']} is now {event.data['new_score']}")

The bus is injected, not global. An engine built without one emits nothing.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Engine events that can be published."""

    # Reputation events
    REPUTATION_CHANGED = "reputation.changed"
    STANDING_CHANGED = "reputation.standing_changed"

    # Faction lifecycle
    FACTION_CREATED = "faction.created"
    FACTION_REMOVED = "faction.removed"
    FACTION_STATUS_CHANGED = "faction.status_changed"
    RELATIONSHIP_CHANGED = "faction.relationship_changed"

    # Territory events
    TERRITORY_TRANSFERRED = "territory.transferred"
    TERRITORY_RELEASED = "territory.released"

    # Economy events
    SUPPLY_CHANGED = "economy.supply_changed"
    SHOP_STATUS_CHANGED = "economy.shop_status_changed"

    # Snapshot events
    STATE_IMPORTED = "state.imported"
    STATE_SAVED = "state.saved"


@dataclass
class GameEvent:
    """
    Event payload for the event bus.

    Attributes:
        type: The event type (from EventType enum)
        data: Event-specific payload as dict
        timestamp: When the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners are called immediately on emit(), in subscription order.
    A listener that raises is logged and skipped; the emitter never sees it.
    """

    def __init__(self, history_limit: int = 100):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._history: list[GameEvent] = []
        self._history_limit = history_limit

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The type of event to listen for
            handler: Callback function that receives GameEvent
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        if handler not in self._listeners[event_type]:
            self._listeners[event_type].append(handler)

    def on_all(self, handler: EventHandler) -> None:
        """Subscribe one handler to every event type."""
        for event_type in EventType:
            self.on(event_type, handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe a handler. Unknown handlers are ignored."""
        if event_type in self._listeners and handler in self._listeners[event_type]:
            self._listeners[event_type].remove(handler)

    def emit(self, event_type: EventType, **data) -> GameEvent:
        """
        Emit an event to all subscribers.

        Args:
            event_type: The type of event
            **data: Event-specific data

        Returns:
            The emitted GameEvent (for chaining/testing)
        """
        event = GameEvent(type=event_type, data=data)

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in handler for {event_type.value}")

        return event

    def clear(self) -> None:
        """Clear all listeners. Useful for testing."""
        self._listeners.clear()

    def get_history(self, event_type: EventType | None = None) -> list[GameEvent]:
        """
        Get recent event history.

        Args:
            event_type: Filter by type, or None for all events
        """
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]

    def listener_count(self, event_type: EventType) -> int:
        """Get number of listeners for an event type."""
        return len(self._listeners.get(event_type, []))
