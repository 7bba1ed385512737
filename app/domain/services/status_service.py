"""
Invoice status derivation.

Status is a pure function of the current ledger state and the clock. It is
never read back from storage as truth; every reader calls derive_invoice_status.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from app.domain.models.base import utc_now
from app.domain.models.invoice import Invoice, InvoiceStatus
from app.domain.models.payment import Payment, PartialPayment


ZERO = Decimal('0')

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class StatusResult:
    """Derived status plus the details the status display needs."""

    status: InvoiceStatus
    days_overdue: int = 0
    is_partial_overdue: bool = False
    qualifying_payment_id: Optional[str] = None


def find_qualifying_payment(
    partial_payments: Sequence[PartialPayment],
    client_amount: Decimal,
    tolerance: Decimal = ZERO
) -> Optional[PartialPayment]:
    """
    Return the event whose application first brought the cumulative
    client-currency total to the invoice amount, walking the log in order.
    """
    threshold = client_amount - tolerance
    running = ZERO
    for event in partial_payments:
        running += event.amount_paid_by_client
        if running >= threshold:
            return event
    return None


def calculate_status(
    amount_paid_by_client: Decimal,
    client_amount: Decimal,
    due_date: datetime,
    now: datetime,
    is_draft: bool,
    partial_payments: Sequence[PartialPayment] = (),
    tolerance: Decimal = ZERO
) -> StatusResult:
    """
    Apply the status rules in order; first match wins.

    tolerance widens the paid threshold to absorb sub-cent conversion drift.
    """
    if is_draft:
        return StatusResult(InvoiceStatus.DRAFT)

    is_past_due = now > due_date
    is_fully_paid = amount_paid_by_client >= client_amount - tolerance

    if not is_fully_paid:
        if is_past_due:
            days_overdue = int((now - due_date).total_seconds() // SECONDS_PER_DAY)
            return StatusResult(
                InvoiceStatus.OVERDUE,
                days_overdue=days_overdue,
                is_partial_overdue=amount_paid_by_client > 0
            )
        if amount_paid_by_client <= 0:
            return StatusResult(InvoiceStatus.SENT)
        return StatusResult(InvoiceStatus.PARTIALLY_PAID)

    # Nothing owed and nothing paid: only reachable for zero-value invoices
    if amount_paid_by_client <= 0 and not is_past_due:
        return StatusResult(InvoiceStatus.SENT)

    qualifying = find_qualifying_payment(partial_payments, client_amount, tolerance)
    if qualifying is None:
        return StatusResult(InvoiceStatus.PAID)

    if qualifying.payment_date > due_date:
        return StatusResult(InvoiceStatus.PAID_AFTER_DUE, qualifying_payment_id=qualifying.id)
    return StatusResult(InvoiceStatus.PAID, qualifying_payment_id=qualifying.id)


def derive_invoice_status(
    invoice: Invoice,
    payment: Optional[Payment] = None,
    now: Optional[datetime] = None,
    tolerance: Decimal = ZERO
) -> StatusResult:
    """
    Derive the status of an invoice from its ledger state.

    When the payment aggregate is supplied its event log is the source of the
    paid amount; otherwise the invoice summary field is used.
    """
    if payment is not None:
        events = payment.partial_payments
        paid = payment.total_paid_by_client
    else:
        events = ()
        paid = invoice.amount_paid_by_client

    return calculate_status(
        amount_paid_by_client=paid,
        client_amount=invoice.client_amount,
        due_date=invoice.due_date,
        now=now or utc_now(),
        is_draft=invoice.is_draft,
        partial_payments=events,
        tolerance=tolerance
    )
