"""
Unit tests for the SQLAlchemy ledger repository.
"""

import pytest
from datetime import datetime
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.domain.models.base import ConcurrencyConflictError
from app.domain.models.invoice import InvoiceStatus
from app.domain.models.payment import Payment, PaymentMethod, PaymentStatus, build_partial_payment
from app.domain.models.value_objects import BankDetails
from app.infrastructure.db.database import Base
from app.infrastructure.db import models  # noqa: F401
from app.infrastructure.repositories.ledger_repository import SQLAlchemyLedgerRepository

from tests.fakes import make_invoice


def make_event(amount="40000", amount_inr="37500", amount_client="500", **overrides):
    values = dict(
        amount=Decimal(amount),
        amount_inr=Decimal(amount_inr),
        amount_client=Decimal(amount_client),
        payment_method=PaymentMethod.NEFT,
        payment_date=datetime(2024, 6, 10),
        company_currency="JPY",
        client_currency="EUR",
        converted_at=datetime(2024, 6, 10, 9, 30),
    )
    values.update(overrides)
    return build_partial_payment(**values)


class TestSQLAlchemyLedgerRepository:
    """Test cases for SQLAlchemyLedgerRepository."""

    def setup_method(self):
        """Set up an in-memory database."""
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False)
        self.session = self.Session()
        self.repository = SQLAlchemyLedgerRepository(self.session)

        self.invoice = self.repository.put_invoice(make_invoice())

    def teardown_method(self):
        self.session.close()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()

    def new_payment(self, *events):
        payment = Payment.empty_for(self.invoice)
        for event in events:
            payment.append_event(event, self.invoice.total_amount_inr)
        return payment

    def test_invoice_round_trip(self):
        """Test invoice fields survive storage."""
        stored = self.repository.get_invoice("inv-1")

        assert stored.invoice_number == "INV-001"
        assert stored.client_amount == Decimal("1000")
        assert stored.total_amount_inr == Decimal("75000")
        assert stored.due_date == datetime(2024, 6, 30)
        assert stored.status == InvoiceStatus.SENT

    def test_get_missing_documents(self):
        """Test missing documents return None."""
        assert self.repository.get_invoice("missing") is None
        assert self.repository.get_payment("inv-1") is None

    def test_insert_payment_at_version_one(self):
        """Test first write of an aggregate."""
        saved = self.repository.put_payment(self.new_payment(make_event()), 0)

        assert saved.version == 1
        stored = self.repository.get_payment("inv-1")
        assert stored.version == 1
        assert stored.status == PaymentStatus.PARTIAL
        assert stored.pending_inr == Decimal("37500")
        assert len(stored.partial_payments) == 1

    def test_second_insert_conflicts(self):
        """Test two writers both creating the aggregate."""
        self.repository.put_payment(self.new_payment(make_event()), 0)

        with pytest.raises(ConcurrencyConflictError):
            self.repository.put_payment(self.new_payment(make_event()), 0)

        assert len(self.repository.get_payment("inv-1").partial_payments) == 1

    def test_conditional_update(self):
        """Test compare-and-set on the aggregate version."""
        self.repository.put_payment(self.new_payment(make_event()), 0)

        payment = self.repository.get_payment("inv-1")
        payment.append_event(make_event(payment_date=datetime(2024, 6, 20)), self.invoice.total_amount_inr)
        saved = self.repository.put_payment(payment, 1)

        assert saved.version == 2
        stored = self.repository.get_payment("inv-1")
        assert stored.status == PaymentStatus.COMPLETED
        assert stored.total_paid_inr == Decimal("75000")

    def test_stale_version_conflicts(self):
        """Test a writer holding an old version loses."""
        self.repository.put_payment(self.new_payment(make_event()), 0)
        first = self.repository.get_payment("inv-1")
        second = self.repository.get_payment("inv-1")

        first.append_event(make_event(), self.invoice.total_amount_inr)
        self.repository.put_payment(first, 1)

        second.append_event(make_event(), self.invoice.total_amount_inr)
        with pytest.raises(ConcurrencyConflictError):
            self.repository.put_payment(second, 1)

        assert self.repository.get_payment("inv-1").version == 2

    def test_event_log_keeps_full_precision(self):
        """Test decimals are not rounded by storage."""
        event = make_event(
            amount="33333.333333",
            amount_inr="31249.99999968750",
            amount_client="416.6666666625",
            reference_number="UTR-77",
            bank_details=BankDetails(from_account="111", to_account="222", ifsc_code="hdfc0000123"),
        )
        payment = self.new_payment(event)
        self.repository.put_payment(payment, 0)

        stored = self.repository.get_payment("inv-1").partial_payments[0]

        assert stored == payment.partial_payments[0]
        assert stored.amount == Decimal("31249.99999968750")
        assert stored.amount_paid_by_client == Decimal("416.6666666625")
        assert stored.pending_payment_in_inr == Decimal("43750.00000031250")
        assert stored.bank_details.ifsc_code == "HDFC0000123"

    def test_invoice_summary_write(self):
        """Test the summary fields are overwritten."""
        invoice = self.repository.get_invoice("inv-1")
        invoice.apply_settlement(Decimal("500"), 1, InvoiceStatus.PARTIALLY_PAID)

        self.repository.put_invoice(invoice)

        stored = self.repository.get_invoice("inv-1")
        assert stored.amount_paid_by_client == Decimal("500")
        assert stored.settled_version == 1
        assert stored.status == InvoiceStatus.PARTIALLY_PAID

    def test_stale_invoice_summary_is_ignored(self):
        """Test an older summary cannot overwrite a newer one."""
        newer = self.repository.get_invoice("inv-1")
        newer.apply_settlement(Decimal("1000"), 2, InvoiceStatus.PAID)
        self.repository.put_invoice(newer)

        older = self.repository.get_invoice("inv-1")
        older.apply_settlement(Decimal("500"), 1, InvoiceStatus.PARTIALLY_PAID)
        returned = self.repository.put_invoice(older)

        assert returned.settled_version == 2
        stored = self.repository.get_invoice("inv-1")
        assert stored.amount_paid_by_client == Decimal("1000")
        assert stored.status == InvoiceStatus.PAID

    def test_find_by_company(self):
        """Test company scoped queries."""
        self.repository.put_invoice(make_invoice(id="inv-0", invoice_number="INV-000", issue_date=datetime(2024, 5, 1)))
        self.repository.put_invoice(make_invoice(id="inv-9", company_id="co-2"))
        self.repository.put_payment(self.new_payment(make_event()), 0)

        invoices = self.repository.find_invoices_by_company("co-1")
        payments = self.repository.find_payments_by_company("co-1")

        assert [i.id for i in invoices] == ["inv-0", "inv-1"]
        assert [p.invoice_id for p in payments] == ["inv-1"]
        assert self.repository.find_payments_by_company("co-2") == []
