# backend/visit_sync/core/exceptions.py
"""
Domain-specific exceptions for the visit sync service.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class BadDataException(ValidationException):
    """Raised when a request names a code or id that does not resolve."""


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when the current state of a resource forbids the operation."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *,
        entity_id: Optional[str] = None,
    ) -> None:
        merged = dict(details or {})
        if entity_id is not None:
            merged["entity_id"] = entity_id
        super().__init__(message, code=code, details=merged)


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class UnmappedReferenceDataException(ServiceException):
    """Raised when a seed reference code that must always exist is missing."""

    def __init__(self, domain: str, code: str):
        super().__init__(
            message=f"Reference code {domain}/{code} is not configured",
            code="UNMAPPED_REFERENCE_DATA",
            details={"domain": domain, "code": code},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues or query failures.
    """


class UniqueConstraintViolation(RepositoryException):
    """Raised when an insert collides with an existing row on a unique key."""
