"""
Application layer use cases.
Business logic for the settlement engine.
"""

from .base_use_case import *
from .payment_use_cases import *

__all__ = [
    # Base Use Cases
    "BaseUseCase",
    "QueryUseCase",
    "CommandUseCase",
    "UseCaseResult",

    # Payment Use Cases
    "RecordPaymentUseCase",
    "DeletePaymentUseCase",
    "ReconcileInvoiceUseCase",
    "GetInvoiceStatusUseCase",
    "ListInvoicePaymentsUseCase",
    "ListCompanyPaymentsUseCase",
    "GetCompanyTotalsUseCase",
]
