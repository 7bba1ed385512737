"""
Base classes for domain events and event handling.
Settlement mutations publish events after both ledger writes have succeeded.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, Any, List, Optional
from datetime import datetime
from dataclasses import dataclass, field

from app.domain.models.base import new_identifier, utc_now


logger = logging.getLogger(__name__)

EVENT_LOG_SIZE = 1000


@dataclass(kw_only=True)
class DomainEvent(ABC):
    """Base class for all domain events."""

    event_id: str = field(default_factory=new_identifier)
    occurred_at: datetime = field(default_factory=utc_now)
    event_type: str = field(init=False, default="")
    version: int = field(default=1)

    def __post_init__(self):
        """Set event type based on class name."""
        if not self.event_type:
            self.event_type = self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data()
        }

    @abstractmethod
    def _get_event_data(self) -> Dict[str, Any]:
        """Get event-specific data for serialization."""
        pass


class EventHandler(ABC):
    """Base class for event handlers."""

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """Handle a domain event."""
        pass

    @abstractmethod
    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can process the given event."""
        pass


class EventDispatcher:
    """Dispatches domain events to registered handlers."""

    def __init__(self, log_size: int = EVENT_LOG_SIZE):
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._event_log: Deque[Dict[str, Any]] = deque(maxlen=log_size)

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        """Register an event handler for specific event type."""
        self._handlers.setdefault(event_type, []).append(handler)
        logger.info(f"Registered handler {handler.__class__.__name__} for {event_type}")

    def register_global_handler(self, handler: EventHandler) -> None:
        """Register a handler that receives all events it can handle."""
        self._global_handlers.append(handler)
        logger.info(f"Registered global handler {handler.__class__.__name__}")

    def clear_handlers(self) -> None:
        self._handlers.clear()
        self._global_handlers.clear()

    async def dispatch(self, event: DomainEvent) -> None:
        """Dispatch event to all registered handlers."""
        self._event_log.append(event.to_dict())

        logger.debug(f"Dispatching event: {event.event_type} (ID: {event.event_id})")

        handlers = self._handlers.get(event.event_type, []) + [
            h for h in self._global_handlers
            if h.can_handle(event)
        ]

        if not handlers:
            logger.debug(f"No handlers registered for event: {event.event_type}")
            return

        await asyncio.gather(*(self._safe_handle(handler, event) for handler in handlers))

    async def _safe_handle(self, handler: EventHandler, event: DomainEvent) -> None:
        """Run one handler; a failing handler never fails the ledger mutation."""
        try:
            await handler.handle(event)
            logger.debug(f"Handler {handler.__class__.__name__} processed {event.event_type}")
        except Exception as e:
            logger.error(
                f"Handler {handler.__class__.__name__} failed to process "
                f"{event.event_type}: {str(e)}"
            )

    def get_event_log(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get recent events from the log, newest first."""
        events = list(reversed(self._event_log))
        return events[:limit] if limit else events

    def get_registered_handlers(self) -> Dict[str, List[str]]:
        """Get information about registered handlers."""
        result = {
            event_type: [h.__class__.__name__ for h in handlers]
            for event_type, handlers in self._handlers.items()
        }

        if self._global_handlers:
            result["global"] = [h.__class__.__name__ for h in self._global_handlers]

        return result


# Singleton instance
_event_dispatcher = None

def get_event_dispatcher() -> EventDispatcher:
    """Get singleton event dispatcher instance."""
    global _event_dispatcher
    if _event_dispatcher is None:
        _event_dispatcher = EventDispatcher()
    return _event_dispatcher


# Convenience function for dispatching events
async def publish_event(event: DomainEvent) -> None:
    """Publish a domain event."""
    dispatcher = get_event_dispatcher()
    await dispatcher.dispatch(event)
