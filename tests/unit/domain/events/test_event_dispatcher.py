"""
Unit tests for domain event dispatching and the settlement audit handlers.
"""

import logging
import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

from app.domain.events.base import EventDispatcher, EventHandler
from app.domain.events.payment_events import PaymentRecorded, PaymentDeleted, InvoicePaid
from app.infrastructure.events.audit_handlers import AuditLogHandler, SettlementNotificationHandler


def recorded_event(**overrides):
    values = dict(
        invoice_id="inv-1",
        company_id="co-1",
        invoice_number="INV-001",
        payment_id="pay-1",
        payment_method="neft",
        payment_date=datetime(2024, 6, 10),
        original_payment_amount=Decimal("40000"),
        company_currency="JPY",
        amount_inr=Decimal("37500"),
        amount_paid_by_client=Decimal("500"),
        client_currency="EUR",
        invoice_status="partially-paid",
    )
    values.update(overrides)
    return PaymentRecorded(**values)


class TestPaymentEvents:
    """Test cases for payment event payloads."""

    def test_event_type_from_class(self):
        """Test event_type defaults to the class name."""
        assert recorded_event().event_type == "PaymentRecorded"

    def test_to_dict_keeps_amounts_exact(self):
        """Test serialized amounts are strings."""
        data = recorded_event().to_dict()

        assert data["event_type"] == "PaymentRecorded"
        assert data["data"]["amount_inr"] == "37500"
        assert data["data"]["payment_date"] == "2024-06-10T00:00:00"

    def test_invoice_paid_payload(self):
        """Test InvoicePaid serialization."""
        event = InvoicePaid(
            invoice_id="inv-1",
            company_id="co-1",
            invoice_number="INV-001",
            client_amount=Decimal("1000"),
            client_currency="EUR",
            paid_after_due=True,
            qualifying_payment_id="pay-2",
        )

        data = event.to_dict()["data"]
        assert data["paid_after_due"] is True
        assert data["qualifying_payment_id"] == "pay-2"


class TestEventDispatcher:
    """Test cases for EventDispatcher."""

    def setup_method(self):
        """Set up a fresh dispatcher."""
        self.dispatcher = EventDispatcher(log_size=2)

    def make_handler(self, handles=True):
        handler = Mock(spec=EventHandler)
        handler.can_handle.return_value = handles
        handler.handle = AsyncMock()
        return handler

    @pytest.mark.asyncio
    async def test_dispatch_to_typed_and_global_handlers(self):
        """Test both handler kinds receive the event."""
        typed = self.make_handler()
        global_handler = self.make_handler()
        self.dispatcher.register_handler("PaymentRecorded", typed)
        self.dispatcher.register_global_handler(global_handler)

        event = recorded_event()
        await self.dispatcher.dispatch(event)

        typed.handle.assert_awaited_once_with(event)
        global_handler.handle.assert_awaited_once_with(event)

    @pytest.mark.asyncio
    async def test_global_handler_filter(self):
        """Test global handlers can decline events."""
        declining = self.make_handler(handles=False)
        self.dispatcher.register_global_handler(declining)

        await self.dispatcher.dispatch(recorded_event())

        declining.handle.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_handler_is_isolated(self):
        """Test one failing handler does not stop the others."""
        failing = self.make_handler()
        failing.handle.side_effect = RuntimeError("smtp down")
        healthy = self.make_handler()
        self.dispatcher.register_handler("PaymentRecorded", failing)
        self.dispatcher.register_handler("PaymentRecorded", healthy)

        await self.dispatcher.dispatch(recorded_event())

        healthy.handle.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_event_log_is_bounded(self):
        """Test the in-memory log keeps only the newest entries."""
        for payment_id in ("a", "b", "c"):
            await self.dispatcher.dispatch(recorded_event(payment_id=payment_id))

        log = self.dispatcher.get_event_log()
        assert [entry["data"]["payment_id"] for entry in log] == ["c", "b"]

    def test_registered_handlers(self):
        """Test handler introspection."""
        self.dispatcher.register_handler("InvoicePaid", SettlementNotificationHandler())
        self.dispatcher.register_global_handler(AuditLogHandler())

        assert self.dispatcher.get_registered_handlers() == {
            "InvoicePaid": ["SettlementNotificationHandler"],
            "global": ["AuditLogHandler"],
        }


class TestAuditHandlers:
    """Test cases for the audit trail handlers."""

    @pytest.mark.asyncio
    async def test_audit_log_records_every_event(self, caplog):
        """Test every event reaches the audit logger."""
        event = recorded_event()

        with caplog.at_level(logging.INFO, logger="settlement.audit"):
            await AuditLogHandler().handle(event)

        assert f"PaymentRecorded {event.event_id}" in caplog.text

    @pytest.mark.asyncio
    async def test_notification_handler_logs_deletion(self, caplog):
        """Test deletions are surfaced as warnings."""
        event = PaymentDeleted(
            invoice_id="inv-1",
            company_id="co-1",
            invoice_number="INV-001",
            payment_id="pay-1",
            original_payment_amount=Decimal("40000"),
            company_currency="JPY",
            invoice_status="sent",
        )

        with caplog.at_level(logging.WARNING):
            await SettlementNotificationHandler().handle(event)

        assert "pay-1" in caplog.text
        assert caplog.records[-1].levelno == logging.WARNING

    def test_notification_handler_scope(self):
        """Test the handler only accepts settlement events."""
        handler = SettlementNotificationHandler()

        assert handler.can_handle(recorded_event()) is True
        assert handler.can_handle(Mock()) is False
