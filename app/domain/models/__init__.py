"""
Domain models for the settlement engine.
This module exports all domain entities and value objects.
"""

# Base classes
from .base import (
    BaseEntity,
    AggregateRoot,
    DomainException,
    ValidationError,
    EntityNotFoundError,
    ConversionUnavailableError,
    ConcurrencyConflictError,
    utc_now,
    new_identifier
)

# Value Objects
from .value_objects import (
    PIVOT_CURRENCY,
    ConversionRate,
    BankDetails,
    to_decimal,
    round_for_display,
    normalize_currency
)

# Domain entities
from .invoice import (
    Invoice,
    InvoiceStatus
)

from .payment import (
    Payment,
    PartialPayment,
    PaymentMethod,
    PaymentStatus,
    PaymentTotals,
    compute_payment_totals,
    build_partial_payment
)

__all__ = [
    # Base classes
    "BaseEntity",
    "AggregateRoot",
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "ConversionUnavailableError",
    "ConcurrencyConflictError",
    "utc_now",
    "new_identifier",

    # Value objects
    "PIVOT_CURRENCY",
    "ConversionRate",
    "BankDetails",
    "to_decimal",
    "round_for_display",
    "normalize_currency",

    # Invoice
    "Invoice",
    "InvoiceStatus",

    # Payment
    "Payment",
    "PartialPayment",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentTotals",
    "compute_payment_totals",
    "build_partial_payment",
]
