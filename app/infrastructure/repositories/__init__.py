"""
Repository implementations backed by SQLAlchemy.
"""

from .ledger_repository import SQLAlchemyLedgerRepository

__all__ = [
    "SQLAlchemyLedgerRepository",
]
