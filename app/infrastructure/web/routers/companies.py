"""
Company reporting router.
Dashboard totals and payment listings across all invoices of a company.
"""

from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query

from app.application.use_cases.payment_use_cases import (
    GetCompanyTotalsUseCase,
    ListCompanyPaymentsUseCase
)
from app.application.dto.payment_dto import (
    CompanyRequestDTO,
    ListCompanyPaymentsRequestDTO,
    CompanyTotalsResponseDTO,
    PaymentResponseDTO
)
from app.domain.models.payment import PaymentMethod, PaymentStatus
from app.domain.services.settlement_service import SettlementService
from app.infrastructure.web.dependencies import get_settlement_service, unwrap_result


router = APIRouter()


@router.get("/{company_id}/totals", response_model=CompanyTotalsResponseDTO)
async def get_company_totals(
    company_id: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)]
):
    """
    Get total received and total pending for a company.

    Totals are recomputed from every invoice and payment on each call.
    """
    result = await GetCompanyTotalsUseCase(service).execute(CompanyRequestDTO(company_id=company_id))
    return unwrap_result(result)


@router.get("/{company_id}/payments", response_model=List[PaymentResponseDTO])
async def list_company_payments(
    company_id: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)],
    status: Optional[PaymentStatus] = Query(None, description="Filter by payment status"),
    method: Optional[PaymentMethod] = Query(None, description="Filter by payment method used")
):
    """
    List payment aggregates of a company.

    - **status**: pending, partial or completed
    - **method**: keep aggregates with at least one payment of this method
    """
    request = ListCompanyPaymentsRequestDTO(company_id=company_id, status=status, payment_method=method)
    result = await ListCompanyPaymentsUseCase(service).execute(request)
    return unwrap_result(result)
