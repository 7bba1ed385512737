"""
Event handlers for the settlement audit trail.
Converts domain events into structured log records.
"""

import logging

from app.domain.events.base import EventHandler, DomainEvent
from app.domain.events.payment_events import PaymentRecorded, PaymentDeleted, InvoicePaid


logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("settlement.audit")


class AuditLogHandler(EventHandler):
    """Writes every domain event to the audit logger."""

    def can_handle(self, event: DomainEvent) -> bool:
        return True

    async def handle(self, event: DomainEvent) -> None:
        audit_logger.info(f"{event.event_type} {event.event_id}", extra={"event": event.to_dict()})


class SettlementNotificationHandler(EventHandler):
    """Handler for settlement milestones worth surfacing to operators."""

    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can process settlement events."""
        return isinstance(event, (PaymentRecorded, PaymentDeleted, InvoicePaid))

    async def handle(self, event: DomainEvent) -> None:
        if isinstance(event, InvoicePaid):
            await self._handle_invoice_paid(event)
        elif isinstance(event, PaymentDeleted):
            await self._handle_payment_deleted(event)
        elif isinstance(event, PaymentRecorded):
            await self._handle_payment_recorded(event)

    async def _handle_invoice_paid(self, event: InvoicePaid) -> None:
        suffix = " after its due date" if event.paid_after_due else ""
        logger.info(
            f"Invoice {event.invoice_number} of company {event.company_id} "
            f"settled in full{suffix}: {event.client_amount} {event.client_currency}"
        )

    async def _handle_payment_deleted(self, event: PaymentDeleted) -> None:
        logger.warning(
            f"Payment {event.payment_id} of {event.original_payment_amount} "
            f"{event.company_currency} removed from invoice {event.invoice_number}; "
            f"status now {event.invoice_status}"
        )

    async def _handle_payment_recorded(self, event: PaymentRecorded) -> None:
        logger.info(
            f"Payment {event.payment_id} via {event.payment_method} on invoice "
            f"{event.invoice_number}: {event.amount_paid_by_client} {event.client_currency}"
        )
