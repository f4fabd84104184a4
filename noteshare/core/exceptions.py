"""Base exceptions for the domain layer."""

from __future__ import annotations

from typing import Any, Dict


class DomainError(Exception):
    """Base class for all domain level exceptions."""

    kind = "DomainError"

    def to_dict(self) -> Dict[str, Any]:
        """Serializable payload for whatever adapter surfaces the error."""
        return {"error": self.kind, "message": str(self)}


class NotFoundError(DomainError):
    """Raised when an entity cannot be located."""

    kind = "NotFound"

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(DomainError):
    """Raised when data fails domain validation rules."""

    kind = "ValidationError"


class UnauthorizedError(DomainError):
    """Raised when an operation needs an authenticated user and got none."""

    kind = "Unauthorized"


class InsufficientFundsError(DomainError):
    """Raised when a buyer cannot cover the coin price of a premium note."""

    kind = "InsufficientFunds"

    def __init__(self, required: int, available: int) -> None:
        super().__init__("Insufficient coins")
        self.required = required
        self.available = available

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(required=self.required, available=self.available)
        return data


class InvalidOperationError(DomainError):
    """Raised for requests that are well formed but not allowed."""

    kind = "InvalidOperation"


class InvalidReferenceError(InvalidOperationError):
    """Raised when a reply points at a parent outside its discussion."""


class StoreClosedError(DomainError):
    """Raised when the entity store is used after ``close()``."""

    kind = "StoreClosed"


# Alias to keep a generic name for error type hints
Error = DomainError

__all__ = [
    "DomainError",
    "NotFoundError",
    "ValidationError",
    "UnauthorizedError",
    "InsufficientFundsError",
    "InvalidOperationError",
    "InvalidReferenceError",
    "StoreClosedError",
    "Error",
]
