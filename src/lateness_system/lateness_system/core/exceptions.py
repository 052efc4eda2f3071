from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidConfig(ValidationError):
    """Raised when a tier or base amount carries an out-of-range value."""


class OverlappingTierRange(ValidationError):
    """Raised when a tier's minute range collides with another tier in its scope."""


class NotFoundError(DomainError):
    """Raised when a configuration row does not exist."""


class DuplicateError(DomainError):
    """Raised when a unique configuration key already exists."""


class DataFetchFailure(DomainError):
    """Raised when the upstream event source cannot be read."""


class OperationCancelled(DomainError):
    """Raised when a request is cancelled or runs past its deadline."""
