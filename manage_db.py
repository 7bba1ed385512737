#!/usr/bin/env python3
"""
Database management script for the settlement engine.
Handles table creation, reset, demo seeding and ledger reconciliation.
"""

import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from app.config import settings
from app.domain.models.base import utc_now
from app.domain.models.invoice import Invoice
from app.domain.services.settlement_service import SettlementService
from app.infrastructure.db.database import SessionLocal, create_tables, drop_tables
from app.infrastructure.repositories.ledger_repository import SQLAlchemyLedgerRepository
from app.infrastructure.web.dependencies import get_exchange_gateway


def create_database():
    """Create all tables that do not exist yet."""
    print("Creating tables...")
    create_tables()


def reset_database():
    """Reset database - WARNING: This will drop all data!"""
    response = input("This will drop ALL data. Type 'yes' to continue: ")
    if response.lower() == 'yes':
        print("Resetting database...")
        drop_tables()
        create_tables()
    else:
        print("Database reset cancelled.")


def seed_database():
    """Insert a demo invoice: 1000 USD billed to a EUR client."""
    session = SessionLocal()
    try:
        ledger = SQLAlchemyLedgerRepository(session)
        issue_date = utc_now().replace(microsecond=0)
        invoice = Invoice(
            company_id="demo-company",
            client_id="demo-client",
            invoice_number="INV-0001",
            company_currency="USD",
            client_currency="EUR",
            total_amount=Decimal("1000"),
            total_amount_inr=Decimal("83000"),
            client_amount=Decimal("920"),
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=30),
        )
        saved = ledger.put_invoice(invoice)
        print(f"Seeded invoice {saved.invoice_number} with id {saved.id}")
    finally:
        session.close()


def reconcile_company(company_id: str):
    """Rebuild every payment aggregate and invoice summary of a company."""
    session = SessionLocal()
    try:
        ledger = SQLAlchemyLedgerRepository(session)
        service = SettlementService(
            ledger=ledger,
            gateway=get_exchange_gateway(),
            max_write_attempts=settings.settlement_max_write_attempts,
            paid_tolerance=settings.paid_tolerance
        )
        invoices = ledger.find_invoices_by_company(company_id)
        for invoice in invoices:
            reconciled = service.reconcile_invoice(invoice.id)
            print(f"{reconciled.invoice_number}: {reconciled.status.value}")
        print(f"Reconciled {len(invoices)} invoice(s)")
    finally:
        session.close()


def main():
    """Main CLI function."""
    if len(sys.argv) < 2:
        print("Usage: python manage_db.py [command]")
        print("Commands:")
        print("  create              - Create tables")
        print("  reset               - Reset database (WARNING: drops all data)")
        print("  seed                - Insert a demo invoice")
        print("  reconcile <company> - Recompute all invoices of a company")
        return

    command_name = sys.argv[1]

    if command_name == "create":
        create_database()
    elif command_name == "reset":
        reset_database()
    elif command_name == "seed":
        seed_database()
    elif command_name == "reconcile":
        if len(sys.argv) < 3:
            print("Usage: python manage_db.py reconcile <company_id>")
            return
        reconcile_company(sys.argv[2])
    else:
        print(f"Unknown command: {command_name}")


if __name__ == "__main__":
    main()
