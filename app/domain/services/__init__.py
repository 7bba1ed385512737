"""
Domain services for the settlement engine.
This module exports all domain services for complex business logic.
"""

from .exchange_gateway import ExchangeGateway
from .status_service import StatusResult, calculate_status, derive_invoice_status
from .settlement_service import (
    SettlementService,
    PaymentEventResult,
    PaymentDeletionResult,
    CompanyTotals,
    InvoiceStatusSnapshot
)

__all__ = [
    "ExchangeGateway",
    "StatusResult",
    "calculate_status",
    "derive_invoice_status",
    "SettlementService",
    "PaymentEventResult",
    "PaymentDeletionResult",
    "CompanyTotals",
    "InvoiceStatusSnapshot",
]
