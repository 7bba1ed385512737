"""
Payment aggregate and PartialPayment events.

A Payment aggregate exists once per invoice and is a rollup of an ordered log
of PartialPayment events. Every derived field on the aggregate is recomputed
from the complete event list, never patched with a delta.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Dict, Any, Iterable, Tuple
from enum import Enum
from decimal import Decimal

from app.domain.models.base import (
    AggregateRoot,
    ValidationError,
    EntityNotFoundError,
    new_identifier,
    utc_now
)
from app.domain.models.value_objects import BankDetails, ConversionRate, to_decimal


ZERO = Decimal('0')


class PaymentMethod(str, Enum):
    """Accepted payment methods."""
    NEFT = "neft"
    RTGS = "rtgs"
    IMPS = "imps"
    UPI = "upi"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    CHEQUE = "cheque"


class PaymentStatus(str, Enum):
    """Coarse three-state mirror of the invoice status."""
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PartialPayment:
    """One immutable recorded cash receipt against an invoice."""

    id: str
    payment_date: datetime
    payment_method: PaymentMethod

    # As entered by the user, company currency
    original_payment_amount: Decimal
    # Converted to INR at this event's own submission time
    amount: Decimal
    # `amount` converted INR -> client currency at the same instant
    amount_paid_by_client: Decimal

    conversion_rate: ConversionRate
    # Balance right after this event was applied; audit value only
    pending_payment_in_inr: Decimal

    company_currency: str
    client_currency: str

    reference_number: Optional[str] = None
    notes: Optional[str] = None
    bank_details: Optional[BankDetails] = None
    recorded_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary. Decimals are kept as strings."""
        return {
            "id": self.id,
            "payment_date": self.payment_date.isoformat(),
            "payment_method": self.payment_method.value,
            "original_payment_amount": str(self.original_payment_amount),
            "amount": str(self.amount),
            "amount_paid_by_client": str(self.amount_paid_by_client),
            "conversion_rate": self.conversion_rate.to_dict(),
            "pending_payment_in_inr": str(self.pending_payment_in_inr),
            "company_currency": self.company_currency,
            "client_currency": self.client_currency,
            "reference_number": self.reference_number,
            "notes": self.notes,
            "bank_details": self.bank_details.to_dict() if self.bank_details else None,
            "recorded_at": self.recorded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PartialPayment":
        """Rebuild an event from its dictionary form."""
        return cls(
            id=data["id"],
            payment_date=_parse_datetime(data["payment_date"]),
            payment_method=PaymentMethod(data["payment_method"]),
            original_payment_amount=Decimal(str(data["original_payment_amount"])),
            amount=Decimal(str(data["amount"])),
            amount_paid_by_client=Decimal(str(data["amount_paid_by_client"])),
            conversion_rate=ConversionRate.from_dict(data["conversion_rate"]),
            pending_payment_in_inr=Decimal(str(data["pending_payment_in_inr"])),
            company_currency=data["company_currency"],
            client_currency=data["client_currency"],
            reference_number=data.get("reference_number"),
            notes=data.get("notes"),
            bank_details=BankDetails.from_dict(data.get("bank_details")),
            recorded_at=_parse_datetime(data.get("recorded_at") or data["payment_date"]),
        )


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class PaymentTotals:
    """Aggregate fields derived from an event list."""

    total_paid_usd: Decimal
    total_paid_inr: Decimal
    total_paid_by_client: Decimal
    pending_inr: Decimal
    status: PaymentStatus


def compute_payment_totals(
    partial_payments: Iterable[PartialPayment],
    total_amount_inr: Decimal
) -> PaymentTotals:
    """
    Recompute every aggregate field from the complete event list.

    Pure function of its inputs: both the add and delete paths go through it,
    so running it twice over the same list yields identical totals.
    """
    events = list(partial_payments)

    total_paid_usd = sum((event.original_payment_amount for event in events), ZERO)
    total_paid_inr = sum((event.amount for event in events), ZERO)
    total_paid_by_client = sum((event.amount_paid_by_client for event in events), ZERO)
    pending_inr = max(ZERO, total_amount_inr - total_paid_inr)

    # Exact INR comparison; the client-currency paid tolerance only affects invoice status
    if not events or total_paid_inr <= 0:
        status = PaymentStatus.PENDING
    elif pending_inr == 0:
        status = PaymentStatus.COMPLETED
    else:
        status = PaymentStatus.PARTIAL

    return PaymentTotals(
        total_paid_usd=total_paid_usd,
        total_paid_inr=total_paid_inr,
        total_paid_by_client=total_paid_by_client,
        pending_inr=pending_inr,
        status=status
    )


def build_partial_payment(
    amount: Decimal,
    amount_inr: Decimal,
    amount_client: Decimal,
    payment_method: PaymentMethod,
    payment_date: datetime,
    company_currency: str,
    client_currency: str,
    converted_at: datetime,
    reference_number: Optional[str] = None,
    notes: Optional[str] = None,
    bank_details: Optional[BankDetails] = None
) -> PartialPayment:
    """
    Build a new event from one chained to-INR / from-INR conversion.

    pending_payment_in_inr is left at zero; it depends on the log the event
    is appended to and is filled in by Payment.append_event.
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise ValidationError("Payment amount must be positive", "amount")

    if amount_inr <= 0:
        raise ValidationError(
            "Conversion to INR produced a zero amount; refusing a zero-rate payment",
            "amount"
        )

    return PartialPayment(
        id=new_identifier(),
        payment_date=payment_date,
        payment_method=payment_method,
        original_payment_amount=amount,
        amount=amount_inr,
        amount_paid_by_client=amount_client,
        conversion_rate=ConversionRate.from_amounts(amount, amount_inr, amount_client, converted_at),
        pending_payment_in_inr=ZERO,
        company_currency=company_currency,
        client_currency=client_currency,
        reference_number=reference_number,
        notes=notes,
        bank_details=bank_details,
        recorded_at=converted_at,
    )


@dataclass(eq=False, kw_only=True)
class Payment(AggregateRoot):
    """
    Per-invoice rollup of all PartialPayment events.
    Keyed 1:1 by invoice_id; version 0 means the aggregate was never stored.
    """

    invoice_id: str
    company_id: str
    client_id: str
    invoice_number: str

    total_paid_usd: Decimal = ZERO
    total_paid_inr: Decimal = ZERO
    pending_inr: Decimal = ZERO
    status: PaymentStatus = PaymentStatus.PENDING

    partial_payments: Tuple[PartialPayment, ...] = ()

    def __post_init__(self):
        if self.id is None:
            self.id = self.invoice_id
        self.partial_payments = tuple(self.partial_payments)

    @classmethod
    def empty_for(cls, invoice) -> "Payment":
        """Create the lazily-initialized aggregate for an invoice with no payments yet."""
        return cls(
            invoice_id=invoice.id,
            company_id=invoice.company_id,
            client_id=invoice.client_id,
            invoice_number=invoice.invoice_number,
            pending_inr=invoice.total_amount_inr,
        )

    @property
    def total_paid_by_client(self) -> Decimal:
        """Cumulative amount paid in client currency, summed from the log."""
        return sum((event.amount_paid_by_client for event in self.partial_payments), ZERO)

    @property
    def event_total_inr(self) -> Decimal:
        return sum((event.amount for event in self.partial_payments), ZERO)

    def find_event(self, event_id: str) -> Optional[PartialPayment]:
        for event in self.partial_payments:
            if event.id == event_id:
                return event
        return None

    def append_event(self, event: PartialPayment, total_amount_inr: Decimal) -> PartialPayment:
        """
        Append an event and recompute the aggregate.
        Returns the stored event with its point-in-time pending balance.
        """
        if self.find_event(event.id) is not None:
            raise ValidationError(f"Payment event {event.id} already recorded", "id")

        pending_after = max(ZERO, total_amount_inr - self.event_total_inr - event.amount)
        stored = replace(event, pending_payment_in_inr=pending_after)

        self.partial_payments = self.partial_payments + (stored,)
        self.recompute(total_amount_inr)
        return stored

    def remove_event(self, event_id: str, total_amount_inr: Decimal) -> PartialPayment:
        """Remove an event by identifier and recompute the aggregate."""
        event = self.find_event(event_id)
        if event is None:
            raise EntityNotFoundError("PartialPayment", event_id)

        self.partial_payments = tuple(p for p in self.partial_payments if p.id != event_id)
        self.recompute(total_amount_inr)
        return event

    def recompute(self, total_amount_inr: Decimal) -> PaymentTotals:
        """Overwrite every derived field from the current event list."""
        totals = compute_payment_totals(self.partial_payments, total_amount_inr)
        self.total_paid_usd = totals.total_paid_usd
        self.total_paid_inr = totals.total_paid_inr
        self.pending_inr = totals.pending_inr
        self.status = totals.status
        self.mark_as_updated()
        return totals

    def uses_method(self, method: PaymentMethod) -> bool:
        return any(event.payment_method == method for event in self.partial_payments)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "invoice_id": self.invoice_id,
            "company_id": self.company_id,
            "client_id": self.client_id,
            "invoice_number": self.invoice_number,
            "total_paid_usd": str(self.total_paid_usd),
            "total_paid_inr": str(self.total_paid_inr),
            "pending_inr": str(self.pending_inr),
            "status": self.status.value,
            "partial_payments": [event.to_dict() for event in self.partial_payments],
            "version": self.version,
        }
