"""
Infrastructure event handlers.
Handles domain events and writes the settlement audit trail.
"""

from .audit_handlers import AuditLogHandler, SettlementNotificationHandler
from .event_setup import setup_event_handlers, initialize_event_system

__all__ = [
    "AuditLogHandler",
    "SettlementNotificationHandler",
    "setup_event_handlers",
    "initialize_event_system"
]
