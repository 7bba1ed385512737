"""
Domain events related to invoice settlement.
Published after the payment aggregate and the invoice summary were both written.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from .base import DomainEvent


@dataclass(kw_only=True)
class PaymentRecorded(DomainEvent):
    """Event fired when a cash receipt is appended to an invoice."""

    invoice_id: str
    company_id: str
    invoice_number: str
    payment_id: str
    payment_method: str
    payment_date: datetime
    original_payment_amount: Decimal
    company_currency: str
    amount_inr: Decimal
    amount_paid_by_client: Decimal
    client_currency: str
    invoice_status: str
    reference_number: Optional[str] = None

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_id": self.invoice_id,
            "company_id": self.company_id,
            "invoice_number": self.invoice_number,
            "payment_id": self.payment_id,
            "payment_method": self.payment_method,
            "payment_date": self.payment_date.isoformat(),
            "original_payment_amount": str(self.original_payment_amount),
            "company_currency": self.company_currency,
            "amount_inr": str(self.amount_inr),
            "amount_paid_by_client": str(self.amount_paid_by_client),
            "client_currency": self.client_currency,
            "invoice_status": self.invoice_status,
            "reference_number": self.reference_number
        }


@dataclass(kw_only=True)
class PaymentDeleted(DomainEvent):
    """Event fired when a payment event is removed from an invoice."""

    invoice_id: str
    company_id: str
    invoice_number: str
    payment_id: str
    original_payment_amount: Decimal
    company_currency: str
    invoice_status: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_id": self.invoice_id,
            "company_id": self.company_id,
            "invoice_number": self.invoice_number,
            "payment_id": self.payment_id,
            "original_payment_amount": str(self.original_payment_amount),
            "company_currency": self.company_currency,
            "invoice_status": self.invoice_status
        }


@dataclass(kw_only=True)
class InvoicePaid(DomainEvent):
    """Event fired when a payment brings an invoice to a paid status."""

    invoice_id: str
    company_id: str
    invoice_number: str
    client_amount: Decimal
    client_currency: str
    paid_after_due: bool
    qualifying_payment_id: Optional[str] = None

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_id": self.invoice_id,
            "company_id": self.company_id,
            "invoice_number": self.invoice_number,
            "client_amount": str(self.client_amount),
            "client_currency": self.client_currency,
            "paid_after_due": self.paid_after_due,
            "qualifying_payment_id": self.qualifying_payment_id
        }
