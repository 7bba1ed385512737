"""Settlement service for recording, deleting and reconciling invoice payments.
Owns the PartialPayment accumulation and recomputation algorithms.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Union

from app.domain.models.base import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    ValidationError,
    utc_now
)
from app.domain.models.invoice import Invoice
from app.domain.models.payment import (
    Payment,
    PartialPayment,
    PaymentMethod,
    PaymentStatus,
    build_partial_payment
)
from app.domain.models.value_objects import BankDetails, to_decimal
from app.domain.repositories.ledger_repository import LedgerRepository
from app.domain.services.exchange_gateway import ExchangeGateway
from app.domain.services.status_service import StatusResult, derive_invoice_status


logger = logging.getLogger(__name__)

ZERO = Decimal('0')


@dataclass
class PaymentEventResult:
    """Outcome of recording one payment."""

    event: PartialPayment
    payment: Payment
    invoice: Invoice
    status: StatusResult


@dataclass
class PaymentDeletionResult:
    """Outcome of deleting one payment event."""

    event: PartialPayment
    payment: Payment
    invoice: Invoice
    status: StatusResult


@dataclass
class InvoiceStatusSnapshot:
    """Invoice, payment aggregate and derived status taken from one read."""

    invoice: Invoice
    payment: Optional[Payment]
    status: StatusResult

    @property
    def amount_paid_by_client(self) -> Decimal:
        if self.payment is not None:
            return self.payment.total_paid_by_client
        return self.invoice.amount_paid_by_client


@dataclass
class CompanyTotals:
    """Cross-invoice totals for a company, recomputed on every read."""

    company_id: str
    total_received: Decimal = ZERO
    total_pending: Decimal = ZERO
    received_this_month: Decimal = ZERO
    invoice_count: int = 0
    open_invoice_count: int = 0
    status_breakdown: Dict[str, int] = field(default_factory=dict)


class SettlementService:
    """
    Domain service for invoice settlement.

    Every mutation converts and validates fully before its first write,
    rebuilds the aggregate from the complete event list, then writes the
    Payment aggregate before the Invoice summary.
    """

    def __init__(
        self,
        ledger: LedgerRepository,
        gateway: ExchangeGateway,
        max_write_attempts: int = 3,
        paid_tolerance: Decimal = ZERO,
        clock: Callable[[], datetime] = utc_now
    ):
        if max_write_attempts < 1:
            raise ValueError("max_write_attempts must be at least 1")
        self.ledger = ledger
        self.gateway = gateway
        self.max_write_attempts = max_write_attempts
        self.paid_tolerance = paid_tolerance
        self.clock = clock

    # Commands

    def record_payment(
        self,
        invoice_id: str,
        amount: Union[Decimal, int, float, str],
        payment_method: Union[PaymentMethod, str],
        payment_date: datetime,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        bank_details: Optional[BankDetails] = None
    ) -> PaymentEventResult:
        """
        Record a cash receipt against an invoice.

        Raises ValidationError, EntityNotFoundError or
        ConversionUnavailableError before anything is written.
        """
        amount = self._parse_amount(amount)
        method = self._parse_method(payment_method)

        invoice = self._load_invoice(invoice_id)

        # One to-INR hop then one from-INR hop, chained through the same value
        amount_inr = self.gateway.to_inr(amount, invoice.company_currency)
        amount_client = self.gateway.from_inr(amount_inr, invoice.client_currency)

        event = build_partial_payment(
            amount=amount,
            amount_inr=amount_inr,
            amount_client=amount_client,
            payment_method=method,
            payment_date=payment_date,
            company_currency=invoice.company_currency,
            client_currency=invoice.client_currency,
            converted_at=self.clock(),
            reference_number=reference_number,
            notes=notes,
            bank_details=bank_details
        )

        for attempt in range(1, self.max_write_attempts + 1):
            payment = self.ledger.get_payment(invoice_id) or Payment.empty_for(invoice)
            expected_version = payment.version

            stored_event = payment.append_event(event, invoice.total_amount_inr)

            try:
                saved = self.ledger.put_payment(payment, expected_version)
            except ConcurrencyConflictError:
                logger.warning(
                    f"Version conflict recording payment on invoice {invoice_id} "
                    f"(attempt {attempt}/{self.max_write_attempts})"
                )
                continue

            updated_invoice, status = self._write_invoice_summary(invoice_id, saved)

            logger.info(
                f"Recorded payment {stored_event.id} on invoice {invoice_id}: "
                f"{stored_event.original_payment_amount} {stored_event.company_currency} -> "
                f"{stored_event.amount} INR -> {stored_event.amount_paid_by_client} "
                f"{stored_event.client_currency}; status {status.status.value}"
            )
            return PaymentEventResult(
                event=stored_event,
                payment=saved,
                invoice=updated_invoice,
                status=status
            )

        raise ConcurrencyConflictError("Payment", invoice_id, expected_version)

    def delete_payment(self, invoice_id: str, event_id: str) -> PaymentDeletionResult:
        """
        Remove one payment event, addressed by its identifier.
        Raises EntityNotFoundError when the invoice, its aggregate or the event is missing.
        """
        invoice = self._load_invoice(invoice_id)

        for attempt in range(1, self.max_write_attempts + 1):
            payment = self.ledger.get_payment(invoice_id)
            if payment is None:
                raise EntityNotFoundError("PartialPayment", event_id)
            expected_version = payment.version

            removed = payment.remove_event(event_id, invoice.total_amount_inr)

            try:
                saved = self.ledger.put_payment(payment, expected_version)
            except ConcurrencyConflictError:
                logger.warning(
                    f"Version conflict deleting payment {event_id} on invoice {invoice_id} "
                    f"(attempt {attempt}/{self.max_write_attempts})"
                )
                continue

            updated_invoice, status = self._write_invoice_summary(invoice_id, saved)

            logger.info(
                f"Deleted payment {event_id} from invoice {invoice_id}; "
                f"status {status.status.value}"
            )
            return PaymentDeletionResult(
                event=removed,
                payment=saved,
                invoice=updated_invoice,
                status=status
            )

        raise ConcurrencyConflictError("Payment", invoice_id, expected_version)

    def reconcile_invoice(self, invoice_id: str) -> Invoice:
        """
        Re-run the recompute against the stored event list and rewrite both
        documents. Idempotent; recovers from a crash between the two writes.
        """
        invoice = self._load_invoice(invoice_id)

        for attempt in range(1, self.max_write_attempts + 1):
            payment = self.ledger.get_payment(invoice_id)
            if payment is None:
                status = derive_invoice_status(invoice, None, self.clock(), self.paid_tolerance)
                invoice.apply_settlement(ZERO, 0, status.status)
                return self.ledger.put_invoice(invoice)

            expected_version = payment.version
            before = (payment.total_paid_usd, payment.total_paid_inr, payment.pending_inr, payment.status)
            payment.recompute(invoice.total_amount_inr)
            after = (payment.total_paid_usd, payment.total_paid_inr, payment.pending_inr, payment.status)

            if before != after:
                logger.warning(f"Payment aggregate of invoice {invoice_id} had drifted; rewriting")
                try:
                    payment = self.ledger.put_payment(payment, expected_version)
                except ConcurrencyConflictError:
                    continue

            updated_invoice, _ = self._write_invoice_summary(invoice_id, payment)
            return updated_invoice

        raise ConcurrencyConflictError("Payment", invoice_id, expected_version)

    # Queries

    def get_invoice_status(self, invoice_id: str, now: Optional[datetime] = None) -> StatusResult:
        """Derive the current status of an invoice from the ledger."""
        return self.get_invoice_status_snapshot(invoice_id, now).status

    def get_invoice_status_snapshot(
        self,
        invoice_id: str,
        now: Optional[datetime] = None
    ) -> InvoiceStatusSnapshot:
        """Status together with the invoice and aggregate it was derived from."""
        invoice = self._load_invoice(invoice_id)
        payment = self.ledger.get_payment(invoice_id)
        status = derive_invoice_status(invoice, payment, now or self.clock(), self.paid_tolerance)
        return InvoiceStatusSnapshot(invoice=invoice, payment=payment, status=status)

    def list_payments(
        self,
        invoice_id: str,
        method: Optional[Union[PaymentMethod, str]] = None
    ) -> List[PartialPayment]:
        """Payment events of an invoice in log order, optionally filtered by method."""
        self._load_invoice(invoice_id)
        payment = self.ledger.get_payment(invoice_id)
        if payment is None:
            return []

        events = list(payment.partial_payments)
        if method is not None:
            wanted = self._parse_method(method)
            events = [event for event in events if event.payment_method == wanted]
        return events

    def list_company_payments(
        self,
        company_id: str,
        status: Optional[Union[PaymentStatus, str]] = None,
        method: Optional[Union[PaymentMethod, str]] = None
    ) -> List[Payment]:
        """Payment aggregates of a company filtered by aggregate status and method used."""
        payments = self.ledger.find_payments_by_company(company_id)

        if status is not None:
            try:
                wanted_status = PaymentStatus(status)
            except ValueError:
                raise ValidationError(f"Invalid payment status: {status}", "status")
            payments = [p for p in payments if p.status == wanted_status]

        if method is not None:
            wanted_method = self._parse_method(method)
            payments = [p for p in payments if p.uses_method(wanted_method)]

        return payments

    def get_company_totals(self, company_id: str, now: Optional[datetime] = None) -> CompanyTotals:
        """
        Fold over every invoice and payment aggregate of a company.

        total_received sums original payment amounts over all events.
        total_pending sums the unpaid client-currency balance of every invoice
        that is not yet paid, using the event log as the paid amount.
        """
        now = now or self.clock()
        invoices = self.ledger.find_invoices_by_company(company_id)
        payments_by_invoice = {
            payment.invoice_id: payment
            for payment in self.ledger.find_payments_by_company(company_id)
        }

        totals = CompanyTotals(company_id=company_id)

        for payment in payments_by_invoice.values():
            for event in payment.partial_payments:
                totals.total_received += event.original_payment_amount
                if event.payment_date.year == now.year and event.payment_date.month == now.month:
                    totals.received_this_month += event.original_payment_amount

        for invoice in invoices:
            payment = payments_by_invoice.get(invoice.id)
            result = derive_invoice_status(invoice, payment, now, self.paid_tolerance)

            totals.invoice_count += 1
            key = result.status.value
            totals.status_breakdown[key] = totals.status_breakdown.get(key, 0) + 1

            if result.status.is_terminal:
                continue

            paid = payment.total_paid_by_client if payment else ZERO
            totals.open_invoice_count += 1
            totals.total_pending += max(ZERO, invoice.client_amount - paid)

        return totals

    # Helpers

    def _load_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.ledger.get_invoice(invoice_id)
        if invoice is None:
            raise EntityNotFoundError("Invoice", invoice_id)
        return invoice

    def _write_invoice_summary(self, invoice_id: str, payment: Payment):
        """
        Second write of every mutation: refresh the invoice summary from the
        saved aggregate. Re-reads the invoice so content edits made meanwhile
        are not overwritten.
        """
        invoice = self._load_invoice(invoice_id)
        status = derive_invoice_status(invoice, payment, self.clock(), self.paid_tolerance)
        invoice.apply_settlement(payment.total_paid_by_client, payment.version, status.status)
        return self.ledger.put_invoice(invoice), status

    @staticmethod
    def _parse_amount(amount: Union[Decimal, int, float, str]) -> Decimal:
        try:
            value = to_decimal(amount)
        except ValueError as e:
            raise ValidationError(str(e), "amount")
        if value <= 0:
            raise ValidationError("Payment amount must be positive", "amount")
        return value

    @staticmethod
    def _parse_method(method: Union[PaymentMethod, str]) -> PaymentMethod:
        try:
            return PaymentMethod(method)
        except ValueError:
            raise ValidationError(f"Invalid payment method: {method}", "payment_method")
