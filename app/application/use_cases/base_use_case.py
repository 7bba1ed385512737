"""
Base use case classes for the application layer.
Provides common patterns and structure for use case implementations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TypeVar, Generic, List
from dataclasses import dataclass

from app.domain.events.base import DomainEvent, publish_event
from app.domain.models.base import DomainException, ValidationError, utc_now


logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


@dataclass
class UseCaseResult(Generic[T]):
    """Result wrapper for use case operations."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(cls, data: T, metadata: Optional[Dict[str, Any]] = None) -> "UseCaseResult[T]":
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def error_result(
        cls,
        error: str,
        error_code: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "UseCaseResult[T]":
        """Create an error result."""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            metadata=metadata
        )

    @classmethod
    def from_exception(cls, exc: Exception) -> "UseCaseResult[T]":
        """Create error result from exception."""
        if isinstance(exc, ValidationError):
            result = cls.error_result(exc.message, "VALIDATION_ERROR")
            if exc.field:
                result.metadata = {"field": exc.field}
            return result
        elif isinstance(exc, DomainException):
            return cls.error_result(exc.message, exc.code)
        else:
            logger.exception(f"Unexpected error in use case: {exc}")
            return cls.error_result("An unexpected error occurred", "UNKNOWN_ERROR")


class BaseUseCase(ABC, Generic[T, R]):
    """
    Base class for all use cases.
    Provides common structure and error handling.
    """

    def __init__(self):
        self.execution_start = None
        self.execution_end = None

    async def execute(self, request: T) -> UseCaseResult[R]:
        """
        Execute the use case with proper error handling and logging.
        """
        self.execution_start = utc_now()

        try:
            await self._validate_request(request)

            result = await self._execute_business_logic(request)

            self.execution_end = utc_now()
            execution_time = (self.execution_end - self.execution_start).total_seconds()

            return UseCaseResult.success_result(
                result,
                metadata={
                    "execution_time_seconds": execution_time,
                    "executed_at": self.execution_end.isoformat()
                }
            )

        except Exception as exc:
            self.execution_end = utc_now()
            execution_time = (self.execution_end - self.execution_start).total_seconds()

            error_result = UseCaseResult.from_exception(exc)
            error_result.metadata = {
                **(error_result.metadata or {}),
                "execution_time_seconds": execution_time,
                "failed_at": self.execution_end.isoformat(),
                "exception_type": type(exc).__name__
            }

            return error_result

    async def _validate_request(self, request: T) -> None:
        """
        Validate the request. Override in subclasses if needed.
        """
        if hasattr(request, 'model_validate'):
            # Pydantic models
            request.model_validate(request.model_dump())

    @abstractmethod
    async def _execute_business_logic(self, request: T) -> R:
        """
        Execute the core business logic. Must be implemented by subclasses.
        """
        pass


class QueryUseCase(BaseUseCase[T, R]):
    """
    Base class for query use cases (read operations).
    """
    pass


class CommandUseCase(BaseUseCase[T, R]):
    """
    Base class for command use cases (write operations).
    Domain events collected during the command are published once it succeeds.
    """

    def __init__(self):
        super().__init__()
        self.events: List[DomainEvent] = []

    async def _execute_business_logic(self, request: T) -> R:
        self.events.clear()
        result = await self._execute_command_logic(request)
        await self._publish_events()
        return result

    @abstractmethod
    async def _execute_command_logic(self, request: T) -> R:
        """Execute the command logic. Must be implemented by subclasses."""
        pass

    def record_event(self, event: DomainEvent) -> None:
        self.events.append(event)

    async def _publish_events(self) -> None:
        """Publish collected domain events."""
        for event in self.events:
            await publish_event(event)

        self.events.clear()
