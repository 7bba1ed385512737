"""
Payment mapper for converting between the payment aggregate and its database model.
"""

from typing import Any, Dict

from app.domain.models.payment import Payment, PartialPayment, PaymentStatus
from app.infrastructure.db.models import PaymentModel


class PaymentMapper:
    """Maps between Payment aggregate and PaymentModel database model."""

    def domain_to_columns(self, payment: Payment) -> Dict[str, Any]:
        """Column values of an aggregate, without its key and version."""
        return {
            "company_id": payment.company_id,
            "client_id": payment.client_id,
            "invoice_number": payment.invoice_number,
            "total_paid_usd": payment.total_paid_usd,
            "total_paid_inr": payment.total_paid_inr,
            "pending_inr": payment.pending_inr,
            "status": payment.status.value,
            "partial_payments": [event.to_dict() for event in payment.partial_payments],
            "created_at": payment.created_at,
            "updated_at": payment.updated_at,
        }

    def domain_to_model(self, payment: Payment, version: int) -> PaymentModel:
        """Convert Payment aggregate to PaymentModel stored at `version`."""
        return PaymentModel(
            invoice_id=payment.invoice_id,
            version=version,
            **self.domain_to_columns(payment)
        )

    def model_to_domain(self, model: PaymentModel) -> Payment:
        """Convert PaymentModel to Payment aggregate."""
        return Payment(
            id=model.invoice_id,
            invoice_id=model.invoice_id,
            company_id=model.company_id,
            client_id=model.client_id,
            invoice_number=model.invoice_number,
            total_paid_usd=model.total_paid_usd,
            total_paid_inr=model.total_paid_inr,
            pending_inr=model.pending_inr,
            status=PaymentStatus(model.status),
            partial_payments=tuple(PartialPayment.from_dict(item) for item in (model.partial_payments or [])),
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
