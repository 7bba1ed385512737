"""
Payment DTOs for the application layer.
Data Transfer Objects for settlement and reconciliation operations.

Amounts travel at full precision through the domain; response DTOs round
them to two places for display.
"""

from typing import Optional, List, Dict
from datetime import datetime, timezone
from decimal import Decimal
from pydantic import Field, field_validator

from app.domain.models.invoice import Invoice, InvoiceStatus
from app.domain.models.payment import Payment, PartialPayment, PaymentMethod, PaymentStatus
from app.domain.models.value_objects import BankDetails, ConversionRate, round_for_display
from app.domain.services.settlement_service import CompanyTotals
from app.domain.services.status_service import StatusResult

from .base_dto import RequestDTO, ResponseDTO, BaseDTO


# Nested DTOs
class BankDetailsDTO(BaseDTO):
    """Bank transfer details attached to a payment."""

    from_account: Optional[str] = Field(default=None, max_length=64, description="Payer account")
    to_account: Optional[str] = Field(default=None, max_length=64, description="Payee account")
    ifsc_code: Optional[str] = Field(default=None, max_length=11, description="IFSC code")

    def to_domain(self) -> BankDetails:
        return BankDetails(
            from_account=self.from_account,
            to_account=self.to_account,
            ifsc_code=self.ifsc_code
        )

    @classmethod
    def from_domain(cls, details: Optional[BankDetails]) -> Optional["BankDetailsDTO"]:
        if details is None:
            return None
        return cls(
            from_account=details.from_account,
            to_account=details.to_account,
            ifsc_code=details.ifsc_code
        )


class ConversionRateDTO(BaseDTO):
    """Frozen rate snapshot of one conversion."""

    company_to_inr: Decimal = Field(description="INR per unit of company currency")
    inr_to_client: Decimal = Field(description="Client currency per INR")
    company_to_client: Decimal = Field(description="Implied cross rate")
    timestamp: datetime = Field(description="When the rates were fetched")

    @classmethod
    def from_domain(cls, rate: ConversionRate) -> "ConversionRateDTO":
        return cls(
            company_to_inr=rate.company_to_inr,
            inr_to_client=rate.inr_to_client,
            company_to_client=rate.company_to_client,
            timestamp=rate.timestamp
        )


# Request DTOs
class RecordPaymentRequestDTO(RequestDTO):
    """Body of a record-payment request."""

    amount: Decimal = Field(gt=0, description="Amount received, in company currency")
    payment_method: PaymentMethod = Field(description="Payment method")
    payment_date: datetime = Field(description="Date the payment was received")
    reference_number: Optional[str] = Field(default=None, max_length=100, description="Bank or cheque reference")
    notes: Optional[str] = Field(default=None, max_length=1000, description="Free-form notes")
    bank_details: Optional[BankDetailsDTO] = Field(default=None, description="Bank transfer details")

    @field_validator('payment_date')
    @classmethod
    def strip_timezone(cls, v: datetime) -> datetime:
        """Store naive UTC datetimes."""
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class RecordPaymentCommandDTO(RecordPaymentRequestDTO):
    """Record-payment request bound to its invoice."""

    invoice_id: str = Field(min_length=1, description="Invoice ID")


class DeletePaymentRequestDTO(RequestDTO):
    """Remove a single payment event."""

    invoice_id: str = Field(min_length=1, description="Invoice ID")
    payment_id: str = Field(min_length=1, description="Payment event ID")


class InvoiceRequestDTO(RequestDTO):
    """Request addressing one invoice."""

    invoice_id: str = Field(min_length=1, description="Invoice ID")


class ListInvoicePaymentsRequestDTO(InvoiceRequestDTO):
    """List payment events of one invoice."""

    payment_method: Optional[PaymentMethod] = Field(default=None, description="Filter by method")


class CompanyRequestDTO(RequestDTO):
    """Request addressing one company."""

    company_id: str = Field(min_length=1, description="Company ID")


class ListCompanyPaymentsRequestDTO(CompanyRequestDTO):
    """List payment aggregates of a company."""

    status: Optional[PaymentStatus] = Field(default=None, description="Filter by aggregate status")
    payment_method: Optional[PaymentMethod] = Field(default=None, description="Filter by method used")


# Response DTOs
class PartialPaymentResponseDTO(ResponseDTO):
    """One recorded payment event."""

    payment_date: datetime
    payment_method: PaymentMethod
    original_payment_amount: Decimal
    company_currency: str
    amount_inr: Decimal
    amount_paid_by_client: Decimal
    client_currency: str
    pending_payment_in_inr: Decimal
    conversion_rate: ConversionRateDTO
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    bank_details: Optional[BankDetailsDTO] = None

    @classmethod
    def from_domain(cls, event: PartialPayment) -> "PartialPaymentResponseDTO":
        return cls(
            id=event.id,
            created_at=event.recorded_at,
            payment_date=event.payment_date,
            payment_method=event.payment_method,
            original_payment_amount=round_for_display(event.original_payment_amount),
            company_currency=event.company_currency,
            amount_inr=round_for_display(event.amount),
            amount_paid_by_client=round_for_display(event.amount_paid_by_client),
            client_currency=event.client_currency,
            pending_payment_in_inr=round_for_display(event.pending_payment_in_inr),
            conversion_rate=ConversionRateDTO.from_domain(event.conversion_rate),
            reference_number=event.reference_number,
            notes=event.notes,
            bank_details=BankDetailsDTO.from_domain(event.bank_details)
        )


class PaymentResponseDTO(ResponseDTO):
    """Payment aggregate of one invoice."""

    invoice_id: str
    company_id: str
    client_id: str
    invoice_number: str
    total_paid_usd: Decimal = Field(description="Sum of original amounts, company currency")
    total_paid_inr: Decimal
    total_paid_by_client: Decimal
    pending_inr: Decimal
    status: PaymentStatus
    version: int
    partial_payments: List[PartialPaymentResponseDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, payment: Payment) -> "PaymentResponseDTO":
        return cls(
            id=payment.id,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
            invoice_id=payment.invoice_id,
            company_id=payment.company_id,
            client_id=payment.client_id,
            invoice_number=payment.invoice_number,
            total_paid_usd=round_for_display(payment.total_paid_usd),
            total_paid_inr=round_for_display(payment.total_paid_inr),
            total_paid_by_client=round_for_display(payment.total_paid_by_client),
            pending_inr=round_for_display(payment.pending_inr),
            status=payment.status,
            version=payment.version,
            partial_payments=[PartialPaymentResponseDTO.from_domain(e) for e in payment.partial_payments]
        )


class InvoiceStatusResponseDTO(BaseDTO):
    """Derived status of an invoice with display details."""

    invoice_id: str
    invoice_number: str
    status: InvoiceStatus
    days_overdue: int = 0
    is_partial_overdue: bool = False
    qualifying_payment_id: Optional[str] = None
    client_amount: Decimal
    client_currency: str
    amount_paid_by_client: Decimal
    outstanding_client_amount: Decimal
    due_date: datetime

    @classmethod
    def from_domain(
        cls,
        invoice: Invoice,
        result: StatusResult,
        paid_by_client: Optional[Decimal] = None
    ) -> "InvoiceStatusResponseDTO":
        paid = invoice.amount_paid_by_client if paid_by_client is None else paid_by_client
        return cls(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            status=result.status,
            days_overdue=result.days_overdue,
            is_partial_overdue=result.is_partial_overdue,
            qualifying_payment_id=result.qualifying_payment_id,
            client_amount=round_for_display(invoice.client_amount),
            client_currency=invoice.client_currency,
            amount_paid_by_client=round_for_display(paid),
            outstanding_client_amount=round_for_display(max(Decimal('0'), invoice.client_amount - paid)),
            due_date=invoice.due_date
        )


class InvoiceSettlementResponseDTO(ResponseDTO):
    """Invoice summary as written by the settlement engine."""

    invoice_number: str
    company_id: str
    client_id: str
    company_currency: str
    client_currency: str
    total_amount: Decimal
    total_amount_inr: Decimal
    client_amount: Decimal
    amount_paid_by_client: Decimal
    status: InvoiceStatus
    settled_version: int
    due_date: datetime

    @classmethod
    def from_domain(cls, invoice: Invoice) -> "InvoiceSettlementResponseDTO":
        return cls(
            id=invoice.id,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
            invoice_number=invoice.invoice_number,
            company_id=invoice.company_id,
            client_id=invoice.client_id,
            company_currency=invoice.company_currency,
            client_currency=invoice.client_currency,
            total_amount=round_for_display(invoice.total_amount),
            total_amount_inr=round_for_display(invoice.total_amount_inr),
            client_amount=round_for_display(invoice.client_amount),
            amount_paid_by_client=round_for_display(invoice.amount_paid_by_client),
            status=invoice.status,
            settled_version=invoice.settled_version,
            due_date=invoice.due_date
        )


class RecordPaymentResponseDTO(BaseDTO):
    """Result of recording or deleting a payment."""

    payment: PartialPaymentResponseDTO
    aggregate: PaymentResponseDTO
    invoice: InvoiceStatusResponseDTO


class CompanyTotalsResponseDTO(BaseDTO):
    """Dashboard totals of a company."""

    company_id: str
    total_received: Decimal = Field(description="Sum of original payment amounts")
    total_pending: Decimal = Field(description="Unpaid client-currency balance of open invoices")
    received_this_month: Decimal
    invoice_count: int
    open_invoice_count: int
    status_breakdown: Dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, totals: CompanyTotals) -> "CompanyTotalsResponseDTO":
        return cls(
            company_id=totals.company_id,
            total_received=round_for_display(totals.total_received),
            total_pending=round_for_display(totals.total_pending),
            received_this_month=round_for_display(totals.received_this_month),
            invoice_count=totals.invoice_count,
            open_invoice_count=totals.open_invoice_count,
            status_breakdown=dict(totals.status_breakdown)
        )
