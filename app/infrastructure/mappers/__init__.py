"""
Mappers between domain entities and database models.
"""

from .invoice_mapper import InvoiceMapper
from .payment_mapper import PaymentMapper

__all__ = [
    "InvoiceMapper",
    "PaymentMapper",
]
