"""
Event bus for the village chase.

Input presses flow from the hosts to the controller, and game
notifications (frames, score, phase, game over, commentary, background)
flow back out to whichever host is presenting them. Delivery is
synchronous and happens on the caller's tick.
"""

from dataclasses import dataclass, field
from typing import Any, Callable
from enum import Enum, auto
import logging
import time
from collections import defaultdict

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types exchanged between hosts and the controller."""
    # Input events
    START_PRESSED = auto()
    JUMP_PRESSED = auto()

    # Simulation events
    FRAME = auto()  # Simulation advanced, carries a render snapshot
    SCORE_CHANGED = auto()
    PHASE_CHANGED = auto()
    GAME_OVER = auto()

    # Collaborator events
    COMMENTARY_UPDATED = auto()
    BACKGROUND_READY = auto()

    # System events
    SHUTDOWN = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: Event type
        data: Event payload
        source: Component that emitted the event
        timestamp: When event was created
    """
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub between the controller and its hosts.

    A handler that raises is logged and skipped; the remaining handlers
    still receive the event.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[Handler]] = defaultdict(list)
        self._global_handlers: list[Handler] = []

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """
        Subscribe to one event type.

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler subscribed to {event_type.name}")

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Subscribe to every event. Returns an unsubscribe function."""
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Deliver an event to its subscribers, then to the global ones."""
        handlers = self._handlers.get(event.type, []) + self._global_handlers

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in {event.type.name} handler: {e}")


def start_event(source: str = "keyboard") -> Event:
    """Create a start/retry press event."""
    return Event(EventType.START_PRESSED, source=source)


def jump_event(source: str = "keyboard") -> Event:
    """Create a jump press event."""
    return Event(EventType.JUMP_PRESSED, source=source)
