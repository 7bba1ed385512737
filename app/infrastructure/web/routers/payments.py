"""
Invoice payment router.
Handles recording, listing and deleting payments and invoice status derivation.
"""

from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, status, Query

from app.application.use_cases.payment_use_cases import (
    RecordPaymentUseCase,
    DeletePaymentUseCase,
    ReconcileInvoiceUseCase,
    GetInvoiceStatusUseCase,
    ListInvoicePaymentsUseCase
)
from app.application.dto.payment_dto import (
    RecordPaymentRequestDTO,
    RecordPaymentCommandDTO,
    DeletePaymentRequestDTO,
    InvoiceRequestDTO,
    ListInvoicePaymentsRequestDTO,
    RecordPaymentResponseDTO,
    PartialPaymentResponseDTO,
    InvoiceStatusResponseDTO,
    InvoiceSettlementResponseDTO
)
from app.domain.models.payment import PaymentMethod
from app.domain.services.settlement_service import SettlementService
from app.infrastructure.web.dependencies import get_settlement_service, unwrap_result


router = APIRouter()


@router.post(
    "/{invoice_id}/payments",
    status_code=status.HTTP_201_CREATED,
    response_model=RecordPaymentResponseDTO
)
async def record_payment(
    invoice_id: str,
    request: RecordPaymentRequestDTO,
    service: Annotated[SettlementService, Depends(get_settlement_service)]
):
    """
    Record a payment against an invoice.

    - **amount**: Amount received in the company currency (required, > 0)
    - **payment_method**: neft, rtgs, imps, upi, cash, credit_card, debit_card or cheque
    - **payment_date**: Date the money was received
    - **reference_number**: Bank or cheque reference (optional)
    - **notes**: Free-form notes (optional)
    - **bank_details**: Payer/payee accounts and IFSC code (optional)
    """
    command = RecordPaymentCommandDTO(invoice_id=invoice_id, **request.model_dump())
    result = await RecordPaymentUseCase(service).execute(command)
    return unwrap_result(result)


@router.get("/{invoice_id}/payments", response_model=List[PartialPaymentResponseDTO])
async def list_invoice_payments(
    invoice_id: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)],
    method: Optional[PaymentMethod] = Query(None, description="Filter by payment method")
):
    """
    List the payments of an invoice in the order they were recorded.
    """
    request = ListInvoicePaymentsRequestDTO(invoice_id=invoice_id, payment_method=method)
    result = await ListInvoicePaymentsUseCase(service).execute(request)
    return unwrap_result(result)


@router.delete("/{invoice_id}/payments/{payment_id}", response_model=RecordPaymentResponseDTO)
async def delete_payment(
    invoice_id: str,
    payment_id: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)]
):
    """
    Delete a single payment, addressed by its ID, and recompute the invoice.
    """
    request = DeletePaymentRequestDTO(invoice_id=invoice_id, payment_id=payment_id)
    result = await DeletePaymentUseCase(service).execute(request)
    return unwrap_result(result)


@router.get("/{invoice_id}/status", response_model=InvoiceStatusResponseDTO)
async def get_invoice_status(
    invoice_id: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)]
):
    """
    Derive the current status of an invoice from its payment log and due date.
    """
    result = await GetInvoiceStatusUseCase(service).execute(InvoiceRequestDTO(invoice_id=invoice_id))
    return unwrap_result(result)


@router.post("/{invoice_id}/reconcile", response_model=InvoiceSettlementResponseDTO)
async def reconcile_invoice(
    invoice_id: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)]
):
    """
    Rebuild the payment aggregate and invoice summary from the stored payment log.
    """
    result = await ReconcileInvoiceUseCase(service).execute(InvoiceRequestDTO(invoice_id=invoice_id))
    return unwrap_result(result)
