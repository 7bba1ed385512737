"""
FastAPI dependencies wiring the settlement engine to its adapters.
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.application.use_cases.base_use_case import UseCaseResult
from app.config import get_settings
from app.domain.repositories.ledger_repository import LedgerRepository
from app.domain.services.exchange_gateway import ExchangeGateway
from app.domain.services.settlement_service import SettlementService
from app.infrastructure.db.database import get_db
from app.infrastructure.exchange.exchange_rate_gateway import ExchangeRateApiGateway
from app.infrastructure.repositories.ledger_repository import SQLAlchemyLedgerRepository


ERROR_STATUS_CODES = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "ENTITY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONCURRENCY_CONFLICT": status.HTTP_409_CONFLICT,
    "CONVERSION_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


@lru_cache()
def get_exchange_gateway() -> ExchangeGateway:
    """Process-wide gateway so its rate cache is shared between requests."""
    settings = get_settings()
    return ExchangeRateApiGateway(
        base_url=settings.exchange_rate_api_url,
        timeout=settings.exchange_rate_timeout_seconds,
        cache_seconds=settings.exchange_rate_cache_seconds,
        pivot_currency=settings.pivot_currency
    )


def get_ledger_repository(session: Session = Depends(get_db)) -> LedgerRepository:
    """Dependency to get the ledger repository."""
    return SQLAlchemyLedgerRepository(session)


def get_settlement_service(
    ledger: LedgerRepository = Depends(get_ledger_repository),
    gateway: ExchangeGateway = Depends(get_exchange_gateway)
) -> SettlementService:
    """Dependency to get the settlement service."""
    settings = get_settings()
    return SettlementService(
        ledger=ledger,
        gateway=gateway,
        max_write_attempts=settings.settlement_max_write_attempts,
        paid_tolerance=settings.paid_tolerance
    )


def unwrap_result(result: UseCaseResult):
    """Return the data of a successful result or raise the matching HTTPException."""
    if result.success:
        return result.data

    status_code = ERROR_STATUS_CODES.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = {"error_code": result.error_code, "message": result.error}
    if result.metadata and result.metadata.get("field"):
        detail["field"] = result.metadata["field"]
    raise HTTPException(status_code=status_code, detail=detail)
