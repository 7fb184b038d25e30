"""Domain error hierarchy for clean exception handling."""
from __future__ import annotations


class DomainError(Exception):
    """Base for all domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Invalid input or state."""


class MalformedUpdateError(ValidationError):
    """A realtime update batch contains an op that cannot be interpreted."""

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class ConflictError(DomainError):
    """Resource conflict (e.g., duplicate share)."""


class AuthenticationError(DomainError):
    """Caller identity is missing or cannot be verified."""


class AccessDeniedError(DomainError):
    """Caller is authenticated but lacks permission on the resource."""


class StoreUnavailableError(DomainError):
    """The persistent store failed while loading or saving."""
