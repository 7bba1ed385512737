"""Ledger repository interface.
Defines the contract for the document store holding invoices and their payment aggregates.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.domain.models.invoice import Invoice
from app.domain.models.payment import Payment


class LedgerRepository(ABC):
    """
    Repository interface for the settlement ledger.

    Each method reads or writes a single document. No multi-document
    transaction is assumed; the engine orders its writes and recomputes
    from the full event list instead.
    """

    @abstractmethod
    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """
        Find an invoice by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    def put_invoice(self, invoice: Invoice) -> Invoice:
        """
        Insert or overwrite an invoice.
        A summary computed from an older payment version than the stored
        one (settled_version) is ignored so a slow writer cannot roll the
        summary back.
        """
        pass

    @abstractmethod
    def get_payment(self, invoice_id: str) -> Optional[Payment]:
        """
        Find the payment aggregate of an invoice.
        Returns None if no payment was ever recorded.
        """
        pass

    @abstractmethod
    def put_payment(self, payment: Payment, expected_version: int) -> Payment:
        """
        Conditionally write a payment aggregate.

        expected_version is the version that was read; 0 means the aggregate
        must not exist yet. On success the returned aggregate carries
        expected_version + 1. Raises ConcurrencyConflictError when another
        writer got there first.
        """
        pass

    @abstractmethod
    def find_invoices_by_company(self, company_id: str) -> List[Invoice]:
        """
        Find all invoices of a company.
        """
        pass

    @abstractmethod
    def find_payments_by_company(self, company_id: str) -> List[Payment]:
        """
        Find all payment aggregates of a company.
        """
        pass
