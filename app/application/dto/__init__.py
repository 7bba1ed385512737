"""
Application layer DTOs.
Request and response models for the settlement engine.
"""

from .base_dto import BaseDTO, RequestDTO, ResponseDTO
from .payment_dto import *

__all__ = [
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "BankDetailsDTO",
    "ConversionRateDTO",
    "RecordPaymentRequestDTO",
    "RecordPaymentCommandDTO",
    "DeletePaymentRequestDTO",
    "InvoiceRequestDTO",
    "ListInvoicePaymentsRequestDTO",
    "CompanyRequestDTO",
    "ListCompanyPaymentsRequestDTO",
    "PartialPaymentResponseDTO",
    "PaymentResponseDTO",
    "InvoiceStatusResponseDTO",
    "InvoiceSettlementResponseDTO",
    "RecordPaymentResponseDTO",
    "CompanyTotalsResponseDTO",
]
