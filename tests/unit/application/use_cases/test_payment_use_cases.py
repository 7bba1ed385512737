"""
Unit tests for payment use cases.
"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, Mock, patch

from app.application.dto.payment_dto import (
    RecordPaymentCommandDTO,
    DeletePaymentRequestDTO,
    InvoiceRequestDTO,
    ListInvoicePaymentsRequestDTO,
    CompanyRequestDTO,
    ListCompanyPaymentsRequestDTO
)
from app.application.use_cases.payment_use_cases import (
    RecordPaymentUseCase,
    DeletePaymentUseCase,
    ReconcileInvoiceUseCase,
    GetInvoiceStatusUseCase,
    ListInvoicePaymentsUseCase,
    ListCompanyPaymentsUseCase,
    GetCompanyTotalsUseCase
)
from app.domain.events.payment_events import PaymentRecorded, PaymentDeleted, InvoicePaid
from app.domain.services.settlement_service import SettlementService

from tests.fakes import NOW, InMemoryLedgerRepository, make_invoice, worked_example_gateway


PUBLISH = "app.application.use_cases.base_use_case.publish_event"


def record_command(**overrides):
    values = dict(
        invoice_id="inv-1",
        amount=Decimal("40000"),
        payment_method="neft",
        payment_date=datetime(2024, 6, 10),
    )
    values.update(overrides)
    return RecordPaymentCommandDTO(**values)


class TestRecordPaymentUseCase:
    """Test cases for RecordPaymentUseCase."""

    def setup_method(self):
        """Set up test fixtures."""
        self.ledger = InMemoryLedgerRepository()
        self.ledger.put_invoice(make_invoice())
        self.gateway = worked_example_gateway()
        self.service = SettlementService(self.ledger, self.gateway, clock=lambda: NOW)

    @pytest.mark.asyncio
    async def test_record_payment_response(self):
        """Test the response DTO is rounded for display."""
        with patch(PUBLISH, new=AsyncMock()):
            result = await RecordPaymentUseCase(self.service).execute(record_command())

        assert result.success is True
        response = result.data
        assert response.payment.amount_inr == Decimal("37500.00")
        assert response.payment.amount_paid_by_client == Decimal("500.00")
        assert response.aggregate.status == "partial"
        assert response.invoice.status == "partially-paid"
        assert response.invoice.outstanding_client_amount == Decimal("500.00")

    @pytest.mark.asyncio
    async def test_publishes_payment_recorded(self):
        """Test the recorded event is published."""
        with patch(PUBLISH, new=AsyncMock()) as publish:
            result = await RecordPaymentUseCase(self.service).execute(record_command(reference_number="UTR1"))

        event = publish.await_args_list[0].args[0]
        assert isinstance(event, PaymentRecorded)
        assert event.payment_id == result.data.payment.id
        assert event.reference_number == "UTR1"
        assert publish.await_count == 1

    @pytest.mark.asyncio
    async def test_publishes_invoice_paid_once(self):
        """Test InvoicePaid is only announced by the settling payment."""
        with patch(PUBLISH, new=AsyncMock()) as publish:
            await RecordPaymentUseCase(self.service).execute(record_command())
            await RecordPaymentUseCase(self.service).execute(record_command(payment_date=datetime(2024, 6, 20)))
            await RecordPaymentUseCase(self.service).execute(record_command(payment_date=datetime(2024, 6, 22)))

        paid_events = [c.args[0] for c in publish.await_args_list if isinstance(c.args[0], InvoicePaid)]
        assert len(paid_events) == 1
        assert paid_events[0].paid_after_due is False

    @pytest.mark.asyncio
    async def test_gateway_failure_result(self):
        """Test conversion failures surface as error results."""
        self.gateway.unavailable.add("JPY")

        with patch(PUBLISH, new=AsyncMock()) as publish:
            result = await RecordPaymentUseCase(self.service).execute(record_command())

        assert result.success is False
        assert result.error_code == "CONVERSION_UNAVAILABLE"
        publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_invoice_result(self):
        """Test missing invoice."""
        result = await RecordPaymentUseCase(self.service).execute(record_command(invoice_id="missing"))

        assert result.error_code == "ENTITY_NOT_FOUND"


class TestDeleteAndReconcileUseCases:
    """Test cases for DeletePaymentUseCase and ReconcileInvoiceUseCase."""

    def setup_method(self):
        """Set up test fixtures."""
        self.ledger = InMemoryLedgerRepository()
        self.ledger.put_invoice(make_invoice())
        self.service = SettlementService(self.ledger, worked_example_gateway(), clock=lambda: NOW)
        self.first = self.service.record_payment("inv-1", Decimal("40000"), "neft", datetime(2024, 6, 10))
        self.second = self.service.record_payment("inv-1", Decimal("40000"), "neft", datetime(2024, 6, 20))

    @pytest.mark.asyncio
    async def test_delete_payment(self):
        """Test deleting the settling payment."""
        request = DeletePaymentRequestDTO(invoice_id="inv-1", payment_id=self.second.event.id)

        with patch(PUBLISH, new=AsyncMock()) as publish:
            result = await DeletePaymentUseCase(self.service).execute(request)

        assert result.success is True
        assert result.data.invoice.status == "partially-paid"
        assert result.data.invoice.amount_paid_by_client == Decimal("500.00")
        event = publish.await_args.args[0]
        assert isinstance(event, PaymentDeleted)
        assert event.invoice_status == "partially-paid"

    @pytest.mark.asyncio
    async def test_delete_unknown_payment(self):
        """Test deleting an unknown event id."""
        request = DeletePaymentRequestDTO(invoice_id="inv-1", payment_id="nope")

        result = await DeletePaymentUseCase(self.service).execute(request)

        assert result.error_code == "ENTITY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_reconcile(self):
        """Test reconcile returns the rebuilt summary."""
        self.ledger.invoices["inv-1"].amount_paid_by_client = Decimal("0")
        self.ledger.invoices["inv-1"].settled_version = 0

        result = await ReconcileInvoiceUseCase(self.service).execute(InvoiceRequestDTO(invoice_id="inv-1"))

        assert result.data.amount_paid_by_client == Decimal("1000.00")
        assert result.data.status == "paid"
        assert result.data.settled_version == 2


class TestQueryUseCases:
    """Test cases for read-side use cases."""

    def setup_method(self):
        """Set up test fixtures."""
        self.ledger = InMemoryLedgerRepository()
        self.ledger.put_invoice(make_invoice())
        self.ledger.put_invoice(make_invoice(id="inv-2", invoice_number="INV-002"))
        self.service = SettlementService(self.ledger, worked_example_gateway(), clock=lambda: NOW)
        self.service.record_payment("inv-1", Decimal("40000"), "neft", datetime(2024, 6, 10))
        self.service.record_payment("inv-1", Decimal("8000"), "cheque", datetime(2024, 6, 12))

    @pytest.mark.asyncio
    async def test_invoice_status(self):
        """Test status response details."""
        result = await GetInvoiceStatusUseCase(self.service).execute(InvoiceRequestDTO(invoice_id="inv-1"))

        assert result.data.status == "partially-paid"
        assert result.data.amount_paid_by_client == Decimal("600.00")
        assert result.data.client_currency == "EUR"

    @pytest.mark.asyncio
    async def test_invoice_status_reads_ledger_once(self):
        """Test status and paid amount come from the same read."""
        self.ledger.get_invoice = Mock(wraps=self.ledger.get_invoice)
        self.ledger.get_payment = Mock(wraps=self.ledger.get_payment)

        result = await GetInvoiceStatusUseCase(self.service).execute(InvoiceRequestDTO(invoice_id="inv-1"))

        assert result.data.amount_paid_by_client == Decimal("600.00")
        assert self.ledger.get_invoice.call_count == 1
        assert self.ledger.get_payment.call_count == 1

    @pytest.mark.asyncio
    async def test_invoice_status_unknown_invoice(self):
        """Test status of a missing invoice."""
        result = await GetInvoiceStatusUseCase(self.service).execute(InvoiceRequestDTO(invoice_id="missing"))

        assert result.error_code == "ENTITY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_list_invoice_payments(self):
        """Test history listing with method filter."""
        request = ListInvoicePaymentsRequestDTO(invoice_id="inv-1", payment_method="cheque")

        result = await ListInvoicePaymentsUseCase(self.service).execute(request)

        assert [p.original_payment_amount for p in result.data] == [Decimal("8000.00")]

    @pytest.mark.asyncio
    async def test_list_company_payments(self):
        """Test company listing."""
        request = ListCompanyPaymentsRequestDTO(company_id="co-1", status="partial")

        result = await ListCompanyPaymentsUseCase(self.service).execute(request)

        assert [p.invoice_id for p in result.data] == ["inv-1"]
        assert len(result.data[0].partial_payments) == 2

    @pytest.mark.asyncio
    async def test_company_totals(self):
        """Test totals response."""
        result = await GetCompanyTotalsUseCase(self.service).execute(CompanyRequestDTO(company_id="co-1"))

        assert result.data.total_received == Decimal("48000.00")
        assert result.data.total_pending == Decimal("1400.00")
        assert result.data.received_this_month == Decimal("48000.00")
