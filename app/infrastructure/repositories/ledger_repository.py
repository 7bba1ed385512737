"""
Ledger repository implementation using SQLAlchemy.
"""

import logging
from typing import Optional, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.domain.models.base import ConcurrencyConflictError, new_identifier
from app.domain.models.invoice import Invoice
from app.domain.models.payment import Payment
from app.domain.repositories.ledger_repository import LedgerRepository as LedgerRepositoryInterface
from app.infrastructure.db.models import InvoiceModel, PaymentModel
from app.infrastructure.mappers.invoice_mapper import InvoiceMapper
from app.infrastructure.mappers.payment_mapper import PaymentMapper


logger = logging.getLogger(__name__)


class SQLAlchemyLedgerRepository(LedgerRepositoryInterface):
    """
    SQLAlchemy implementation of the settlement ledger.
    Every write commits on its own; there is no transaction spanning two documents.
    """

    def __init__(self, session: Session):
        self.session = session
        self.invoice_mapper = InvoiceMapper()
        self.payment_mapper = PaymentMapper()

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID."""
        model = self.session.query(InvoiceModel).filter_by(id=invoice_id).first()
        if not model:
            return None
        return self.invoice_mapper.model_to_domain(model)

    def put_invoice(self, invoice: Invoice) -> Invoice:
        """Insert or overwrite an invoice unless the stored summary is newer."""
        if invoice.id is None:
            invoice.id = new_identifier()

        columns = self.invoice_mapper.domain_to_columns(invoice)

        updated = self.session.query(InvoiceModel).filter(
            InvoiceModel.id == invoice.id,
            InvoiceModel.settled_version <= invoice.settled_version
        ).update(columns, synchronize_session=False)

        if updated:
            self.session.commit()
            return invoice

        existing = self.session.query(InvoiceModel).filter_by(id=invoice.id).first()
        if existing is not None:
            # A newer summary already landed; keep it
            logger.info(
                f"Ignoring stale summary for invoice {invoice.id} "
                f"(version {invoice.settled_version} < {existing.settled_version})"
            )
            self.session.rollback()
            return self.invoice_mapper.model_to_domain(existing)

        try:
            self.session.add(self.invoice_mapper.domain_to_model(invoice))
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConcurrencyConflictError("Invoice", invoice.id, invoice.settled_version)
        return invoice

    def get_payment(self, invoice_id: str) -> Optional[Payment]:
        """Get the payment aggregate of an invoice."""
        model = self.session.query(PaymentModel).filter_by(invoice_id=invoice_id).first()
        if not model:
            return None
        return self.payment_mapper.model_to_domain(model)

    def put_payment(self, payment: Payment, expected_version: int) -> Payment:
        """Compare-and-set write keyed on the aggregate version."""
        new_version = expected_version + 1

        if expected_version == 0:
            try:
                self.session.add(self.payment_mapper.domain_to_model(payment, new_version))
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                raise ConcurrencyConflictError("Payment", payment.invoice_id, expected_version)
        else:
            columns = self.payment_mapper.domain_to_columns(payment)
            columns["version"] = new_version

            updated = self.session.query(PaymentModel).filter(
                PaymentModel.invoice_id == payment.invoice_id,
                PaymentModel.version == expected_version
            ).update(columns, synchronize_session=False)

            if updated != 1:
                self.session.rollback()
                raise ConcurrencyConflictError("Payment", payment.invoice_id, expected_version)
            self.session.commit()

        payment.version = new_version
        return payment

    def find_invoices_by_company(self, company_id: str) -> List[Invoice]:
        """Get all invoices of a company ordered by issue date."""
        models = self.session.query(InvoiceModel).filter_by(
            company_id=company_id
        ).order_by(InvoiceModel.issue_date, InvoiceModel.id).all()
        return [self.invoice_mapper.model_to_domain(model) for model in models]

    def find_payments_by_company(self, company_id: str) -> List[Payment]:
        """Get all payment aggregates of a company."""
        models = self.session.query(PaymentModel).filter_by(
            company_id=company_id
        ).order_by(PaymentModel.invoice_id).all()
        return [self.payment_mapper.model_to_domain(model) for model in models]
