"""
Base entity and exceptions for the domain layer.
This module contains the foundational classes for all settlement entities.
"""

from datetime import datetime, timezone
from typing import Optional, Any
from abc import ABC
from dataclasses import dataclass, field
import uuid


def utc_now() -> datetime:
    """Current UTC wall-clock time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_identifier() -> str:
    """Generate an immutable identifier for an entity or event."""
    return str(uuid.uuid4())


@dataclass
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides common attributes and behavior for all entities.
    """

    id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        if self.id is None:
            return hash(id(self))
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utc_now()


@dataclass(eq=False)
class AggregateRoot(BaseEntity):
    """
    Base class for aggregate roots.
    The version counts persisted writes and backs optimistic concurrency checks.
    """

    version: int = field(default=0)


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Exception raised when input or entity validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class EntityNotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, "ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConversionUnavailableError(DomainException):
    """Exception raised when the exchange gateway cannot provide a rate."""

    def __init__(self, currency: str, reason: Optional[str] = None):
        message = f"Exchange rate for {currency} is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, "CONVERSION_UNAVAILABLE")
        self.currency = currency
        self.reason = reason


class ConcurrencyConflictError(DomainException):
    """Exception raised when a versioned write loses a race with another writer."""

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int):
        message = (
            f"{entity_type} with id {entity_id} was modified concurrently "
            f"(expected version {expected_version})"
        )
        super().__init__(message, "CONCURRENCY_CONFLICT")
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
