"""
Infrastructure layer for the invoice settlement engine.

This layer contains the implementation details for external systems integration:
- Database (SQLAlchemy ledger of invoices and payment aggregates)
- Exchange rate feed (HTTP via requests)
- Domain event handlers
- FastAPI web adapters

The infrastructure layer implements interfaces defined in the domain layer,
following the Dependency Inversion Principle of Clean Architecture.
"""
