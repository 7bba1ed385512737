"""
Invoice domain model.
Holds the three currency views of an invoice and its settlement summary.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum
from decimal import Decimal

from app.domain.models.base import AggregateRoot, ValidationError
from app.domain.models.value_objects import ConversionRate, normalize_currency, to_decimal


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""
    DRAFT = "draft"
    SENT = "sent"
    # Legacy documents may still carry "pending"; it is never derived.
    PENDING = "pending"
    PARTIALLY_PAID = "partially-paid"
    PAID = "paid"
    OVERDUE = "overdue"
    PAID_AFTER_DUE = "paid-after-due"

    @property
    def is_terminal(self) -> bool:
        return self in (InvoiceStatus.PAID, InvoiceStatus.PAID_AFTER_DUE)


@dataclass(eq=False, kw_only=True)
class Invoice(AggregateRoot):
    """
    Invoice aggregate root.

    Only the payment related summary (amount_paid_by_client, settled_version
    and the status cache) is written by the settlement engine. Content fields
    are owned by the issuing workflow.
    """

    company_id: str
    client_id: str
    invoice_number: str

    company_currency: str
    client_currency: str

    # Native company currency amount
    total_amount: Decimal
    # Pivot currency value fixed at issuance
    total_amount_inr: Decimal
    # Client currency value at issuance
    client_amount: Decimal

    issue_date: datetime
    due_date: datetime

    conversion_rate: Optional[ConversionRate] = None
    amount_paid_by_client: Decimal = Decimal('0')
    is_draft: bool = False

    # Cache of the derived status, rewritten together with the fields it depends on
    status: InvoiceStatus = InvoiceStatus.SENT
    # Version of the payment aggregate this summary was computed from
    settled_version: int = 0

    def __post_init__(self):
        """Normalize amounts and currencies, then validate."""
        self.company_currency = normalize_currency(self.company_currency)
        self.client_currency = normalize_currency(self.client_currency)
        self.total_amount = to_decimal(self.total_amount, "total_amount")
        self.total_amount_inr = to_decimal(self.total_amount_inr, "total_amount_inr")
        self.client_amount = to_decimal(self.client_amount, "client_amount")
        self.amount_paid_by_client = to_decimal(self.amount_paid_by_client, "amount_paid_by_client")
        if self.is_draft:
            self.status = InvoiceStatus.DRAFT
        self.validate()

    def validate(self) -> None:
        """Validate invoice state."""
        if not self.company_id:
            raise ValidationError("Company ID is required", "company_id")

        if not self.client_id:
            raise ValidationError("Client ID is required", "client_id")

        if not self.invoice_number:
            raise ValidationError("Invoice number is required", "invoice_number")

        if self.total_amount < 0:
            raise ValidationError("Total amount cannot be negative", "total_amount")

        if self.total_amount_inr < 0:
            raise ValidationError("INR total cannot be negative", "total_amount_inr")

        if self.client_amount < 0:
            raise ValidationError("Client amount cannot be negative", "client_amount")

        if self.amount_paid_by_client < 0:
            raise ValidationError("Amount paid cannot be negative", "amount_paid_by_client")

        if self.due_date < self.issue_date:
            raise ValidationError("Due date cannot be before issue date", "due_date")

    @property
    def company_amount(self) -> Decimal:
        """Alias of total_amount, the invoice value in company currency."""
        return self.total_amount

    @property
    def outstanding_client_amount(self) -> Decimal:
        """Remaining balance in client currency, never negative."""
        return max(Decimal('0'), self.client_amount - self.amount_paid_by_client)

    def apply_settlement(
        self,
        amount_paid_by_client: Decimal,
        payment_version: int,
        status: InvoiceStatus
    ) -> None:
        """Overwrite the settlement summary with values recomputed from the ledger."""
        self.amount_paid_by_client = amount_paid_by_client
        self.settled_version = payment_version
        self.status = status
        self.mark_as_updated()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "company_id": self.company_id,
            "client_id": self.client_id,
            "invoice_number": self.invoice_number,
            "company_currency": self.company_currency,
            "client_currency": self.client_currency,
            "total_amount": str(self.total_amount),
            "total_amount_inr": str(self.total_amount_inr),
            "client_amount": str(self.client_amount),
            "amount_paid_by_client": str(self.amount_paid_by_client),
            "conversion_rate": self.conversion_rate.to_dict() if self.conversion_rate else None,
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "is_draft": self.is_draft,
            "status": self.status.value,
            "settled_version": self.settled_version,
        }
