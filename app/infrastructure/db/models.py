"""
SQLAlchemy models for the database.
Maps the settlement ledger documents to database tables.
"""

from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean,
    ForeignKey, JSON, Index, CheckConstraint
)
from sqlalchemy.types import TypeDecorator

from app.infrastructure.db.database import Base


class DecimalText(TypeDecorator):
    """
    Stores Decimals as their canonical string form.
    Amounts keep full precision on every backend, including SQLite.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class InvoiceModel(Base):
    """Invoice table"""
    __tablename__ = 'invoices'

    id = Column(String(36), primary_key=True)
    company_id = Column(String(64), nullable=False)
    client_id = Column(String(64), nullable=False)

    # Invoice details
    invoice_number = Column(String(50), nullable=False)
    is_draft = Column(Boolean, default=False, nullable=False)

    # Amounts and currencies
    company_currency = Column(String(3), nullable=False)
    client_currency = Column(String(3), nullable=False)
    total_amount = Column(DecimalText, nullable=False)
    total_amount_inr = Column(DecimalText, nullable=False)
    client_amount = Column(DecimalText, nullable=False)
    conversion_rate = Column(JSON)

    # Settlement summary
    amount_paid_by_client = Column(DecimalText, nullable=False, default=Decimal('0'))
    status = Column(String(20), nullable=False)
    settled_version = Column(Integer, nullable=False, default=0)

    # Dates
    issue_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_invoices_company', 'company_id'),
        CheckConstraint('settled_version >= 0', name='check_settled_version'),
    )


class PaymentModel(Base):
    """Payment aggregate table, one row per invoice"""
    __tablename__ = 'payments'

    invoice_id = Column(String(36), ForeignKey('invoices.id', ondelete='CASCADE'), primary_key=True)
    company_id = Column(String(64), nullable=False)
    client_id = Column(String(64), nullable=False)
    invoice_number = Column(String(50), nullable=False)

    # Derived rollup
    total_paid_usd = Column(DecimalText, nullable=False)
    total_paid_inr = Column(DecimalText, nullable=False)
    pending_inr = Column(DecimalText, nullable=False)
    status = Column(String(20), nullable=False)

    # Ordered event log, decimals serialized as strings
    partial_payments = Column(JSON, nullable=False, default=list)

    # Optimistic concurrency token
    version = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_payments_company', 'company_id'),
        CheckConstraint('version > 0', name='check_payment_version'),
    )
