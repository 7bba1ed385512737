"""
Repository interfaces for the domain layer.
This module exports all repository interfaces (ports) for dependency injection.
"""

from .ledger_repository import LedgerRepository

__all__ = [
    "LedgerRepository",
]
