"""
Payment use cases for the application layer.
Implements recording, deletion, reconciliation and reporting of invoice payments.
"""

from typing import List

from starlette.concurrency import run_in_threadpool

from app.application.use_cases.base_use_case import CommandUseCase, QueryUseCase
from app.application.dto.payment_dto import (
    RecordPaymentCommandDTO, DeletePaymentRequestDTO, InvoiceRequestDTO,
    ListInvoicePaymentsRequestDTO, CompanyRequestDTO, ListCompanyPaymentsRequestDTO,
    RecordPaymentResponseDTO, PartialPaymentResponseDTO, PaymentResponseDTO,
    InvoiceStatusResponseDTO, InvoiceSettlementResponseDTO, CompanyTotalsResponseDTO
)
from app.domain.events.payment_events import PaymentRecorded, PaymentDeleted, InvoicePaid
from app.domain.models.invoice import InvoiceStatus
from app.domain.services.settlement_service import SettlementService


class RecordPaymentUseCase(CommandUseCase[RecordPaymentCommandDTO, RecordPaymentResponseDTO]):
    """Use case for recording a payment against an invoice."""

    def __init__(self, settlement_service: SettlementService):
        super().__init__()
        self.settlement_service = settlement_service

    async def _execute_command_logic(self, request: RecordPaymentCommandDTO) -> RecordPaymentResponseDTO:
        # Rate feed and ledger I/O block; run off the event loop
        outcome = await run_in_threadpool(
            self.settlement_service.record_payment,
            invoice_id=request.invoice_id,
            amount=request.amount,
            payment_method=request.payment_method,
            payment_date=request.payment_date,
            reference_number=request.reference_number,
            notes=request.notes,
            bank_details=request.bank_details.to_domain() if request.bank_details else None
        )

        event = outcome.event
        invoice = outcome.invoice
        status = outcome.status

        self.record_event(PaymentRecorded(
            invoice_id=invoice.id,
            company_id=invoice.company_id,
            invoice_number=invoice.invoice_number,
            payment_id=event.id,
            payment_method=event.payment_method.value,
            payment_date=event.payment_date,
            original_payment_amount=event.original_payment_amount,
            company_currency=event.company_currency,
            amount_inr=event.amount,
            amount_paid_by_client=event.amount_paid_by_client,
            client_currency=event.client_currency,
            invoice_status=status.status.value,
            reference_number=event.reference_number
        ))

        # Only the event that crossed the threshold announces the invoice as paid
        if status.status.is_terminal and status.qualifying_payment_id == event.id:
            self.record_event(InvoicePaid(
                invoice_id=invoice.id,
                company_id=invoice.company_id,
                invoice_number=invoice.invoice_number,
                client_amount=invoice.client_amount,
                client_currency=invoice.client_currency,
                paid_after_due=status.status == InvoiceStatus.PAID_AFTER_DUE,
                qualifying_payment_id=status.qualifying_payment_id
            ))

        return RecordPaymentResponseDTO(
            payment=PartialPaymentResponseDTO.from_domain(event),
            aggregate=PaymentResponseDTO.from_domain(outcome.payment),
            invoice=InvoiceStatusResponseDTO.from_domain(
                invoice, status, outcome.payment.total_paid_by_client
            )
        )


class DeletePaymentUseCase(CommandUseCase[DeletePaymentRequestDTO, RecordPaymentResponseDTO]):
    """Use case for removing a payment event from an invoice."""

    def __init__(self, settlement_service: SettlementService):
        super().__init__()
        self.settlement_service = settlement_service

    async def _execute_command_logic(self, request: DeletePaymentRequestDTO) -> RecordPaymentResponseDTO:
        outcome = await run_in_threadpool(
            self.settlement_service.delete_payment, request.invoice_id, request.payment_id
        )

        invoice = outcome.invoice
        self.record_event(PaymentDeleted(
            invoice_id=invoice.id,
            company_id=invoice.company_id,
            invoice_number=invoice.invoice_number,
            payment_id=outcome.event.id,
            original_payment_amount=outcome.event.original_payment_amount,
            company_currency=outcome.event.company_currency,
            invoice_status=outcome.status.status.value
        ))

        return RecordPaymentResponseDTO(
            payment=PartialPaymentResponseDTO.from_domain(outcome.event),
            aggregate=PaymentResponseDTO.from_domain(outcome.payment),
            invoice=InvoiceStatusResponseDTO.from_domain(
                invoice, outcome.status, outcome.payment.total_paid_by_client
            )
        )


class ReconcileInvoiceUseCase(CommandUseCase[InvoiceRequestDTO, InvoiceSettlementResponseDTO]):
    """Use case for rebuilding an invoice summary from its event log."""

    def __init__(self, settlement_service: SettlementService):
        super().__init__()
        self.settlement_service = settlement_service

    async def _execute_command_logic(self, request: InvoiceRequestDTO) -> InvoiceSettlementResponseDTO:
        invoice = await run_in_threadpool(self.settlement_service.reconcile_invoice, request.invoice_id)
        return InvoiceSettlementResponseDTO.from_domain(invoice)


class GetInvoiceStatusUseCase(QueryUseCase[InvoiceRequestDTO, InvoiceStatusResponseDTO]):
    """Use case for deriving the current status of an invoice."""

    def __init__(self, settlement_service: SettlementService):
        super().__init__()
        self.settlement_service = settlement_service

    async def _execute_business_logic(self, request: InvoiceRequestDTO) -> InvoiceStatusResponseDTO:
        snapshot = await run_in_threadpool(
            self.settlement_service.get_invoice_status_snapshot, request.invoice_id
        )
        return InvoiceStatusResponseDTO.from_domain(
            snapshot.invoice, snapshot.status, snapshot.amount_paid_by_client
        )


class ListInvoicePaymentsUseCase(QueryUseCase[ListInvoicePaymentsRequestDTO, List[PartialPaymentResponseDTO]]):
    """Use case for listing the payment events of an invoice."""

    def __init__(self, settlement_service: SettlementService):
        super().__init__()
        self.settlement_service = settlement_service

    async def _execute_business_logic(
        self,
        request: ListInvoicePaymentsRequestDTO
    ) -> List[PartialPaymentResponseDTO]:
        events = await run_in_threadpool(
            self.settlement_service.list_payments, request.invoice_id, request.payment_method
        )
        return [PartialPaymentResponseDTO.from_domain(event) for event in events]


class ListCompanyPaymentsUseCase(QueryUseCase[ListCompanyPaymentsRequestDTO, List[PaymentResponseDTO]]):
    """Use case for listing payment aggregates across a company."""

    def __init__(self, settlement_service: SettlementService):
        super().__init__()
        self.settlement_service = settlement_service

    async def _execute_business_logic(self, request: ListCompanyPaymentsRequestDTO) -> List[PaymentResponseDTO]:
        payments = await run_in_threadpool(
            self.settlement_service.list_company_payments,
            request.company_id,
            status=request.status,
            method=request.payment_method
        )
        return [PaymentResponseDTO.from_domain(payment) for payment in payments]


class GetCompanyTotalsUseCase(QueryUseCase[CompanyRequestDTO, CompanyTotalsResponseDTO]):
    """Use case for computing the dashboard totals of a company."""

    def __init__(self, settlement_service: SettlementService):
        super().__init__()
        self.settlement_service = settlement_service

    async def _execute_business_logic(self, request: CompanyRequestDTO) -> CompanyTotalsResponseDTO:
        totals = await run_in_threadpool(self.settlement_service.get_company_totals, request.company_id)
        return CompanyTotalsResponseDTO.from_domain(totals)
