"""
Event system setup and configuration.
Registers all event handlers with the event dispatcher.
"""

import logging
from app.domain.events.base import get_event_dispatcher
from .audit_handlers import AuditLogHandler, SettlementNotificationHandler

logger = logging.getLogger(__name__)


def setup_event_handlers():
    """Set up and register all event handlers."""

    dispatcher = get_event_dispatcher()
    dispatcher.clear_handlers()

    # Global handler for the audit trail
    dispatcher.register_global_handler(AuditLogHandler())

    settlement_handler = SettlementNotificationHandler()
    dispatcher.register_handler("PaymentRecorded", settlement_handler)
    dispatcher.register_handler("PaymentDeleted", settlement_handler)
    dispatcher.register_handler("InvoicePaid", settlement_handler)

    registered = dispatcher.get_registered_handlers()
    for event_type, handlers in registered.items():
        logger.info(f"Event {event_type}: {', '.join(handlers)} handlers")


def initialize_event_system():
    """Initialize the complete event system."""
    try:
        setup_event_handlers()
        logger.info("Event system initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize event system: {str(e)}")
        raise
