"""
Invoice mapper for converting between domain entities and database models.
"""

from typing import Any, Dict

from app.domain.models.invoice import Invoice, InvoiceStatus
from app.domain.models.value_objects import ConversionRate
from app.infrastructure.db.models import InvoiceModel


class InvoiceMapper:
    """Maps between Invoice domain entity and InvoiceModel database model."""

    def domain_to_columns(self, invoice: Invoice) -> Dict[str, Any]:
        """Column values of an invoice, without its primary key."""
        return {
            "company_id": invoice.company_id,
            "client_id": invoice.client_id,
            "invoice_number": invoice.invoice_number,
            "is_draft": invoice.is_draft,
            "company_currency": invoice.company_currency,
            "client_currency": invoice.client_currency,
            "total_amount": invoice.total_amount,
            "total_amount_inr": invoice.total_amount_inr,
            "client_amount": invoice.client_amount,
            "conversion_rate": invoice.conversion_rate.to_dict() if invoice.conversion_rate else None,
            "amount_paid_by_client": invoice.amount_paid_by_client,
            "status": invoice.status.value,
            "settled_version": invoice.settled_version,
            "issue_date": invoice.issue_date,
            "due_date": invoice.due_date,
            "created_at": invoice.created_at,
            "updated_at": invoice.updated_at,
        }

    def domain_to_model(self, invoice: Invoice) -> InvoiceModel:
        """Convert Invoice domain entity to InvoiceModel."""
        return InvoiceModel(id=invoice.id, **self.domain_to_columns(invoice))

    def model_to_domain(self, model: InvoiceModel) -> Invoice:
        """Convert InvoiceModel to Invoice domain entity."""
        return Invoice(
            id=model.id,
            company_id=model.company_id,
            client_id=model.client_id,
            invoice_number=model.invoice_number,
            is_draft=bool(model.is_draft),
            company_currency=model.company_currency,
            client_currency=model.client_currency,
            total_amount=model.total_amount,
            total_amount_inr=model.total_amount_inr,
            client_amount=model.client_amount,
            conversion_rate=ConversionRate.from_dict(model.conversion_rate),
            amount_paid_by_client=model.amount_paid_by_client,
            status=InvoiceStatus(model.status) if model.status else InvoiceStatus.SENT,
            settled_version=model.settled_version or 0,
            issue_date=model.issue_date,
            due_date=model.due_date,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
