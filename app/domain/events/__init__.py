"""
Domain events for the application.
Event-driven architecture components for audit and notifications.
"""

from .base import DomainEvent, EventHandler, EventDispatcher, get_event_dispatcher, publish_event
from .payment_events import PaymentRecorded, PaymentDeleted, InvoicePaid

__all__ = [
    "DomainEvent",
    "EventHandler",
    "EventDispatcher",
    "get_event_dispatcher",
    "publish_event",
    "PaymentRecorded",
    "PaymentDeleted",
    "InvoicePaid"
]
