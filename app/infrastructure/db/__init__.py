"""
Database infrastructure for the settlement ledger.
"""

from .database import engine, SessionLocal, get_db, Base, create_db_engine, create_tables, drop_tables
from .models import DecimalText, InvoiceModel, PaymentModel

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "Base",
    "create_db_engine",
    "create_tables",
    "drop_tables",
    "DecimalText",
    "InvoiceModel",
    "PaymentModel",
]
