"""Domain exceptions raised by the ordering and reservation services.

Every error carries a machine-readable ``code`` and the HTTP status it maps to,
so the API layer can turn it into a structured response without inspecting
the concrete type.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for errors the API reports to the caller."""

    code: str = "domain_error"
    status_code: int = 400
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None, *, errors: list[dict[str, Any]] | None = None) -> None:
        self.message: str = message or self.default_message
        self.errors: list[dict[str, Any]] = errors or []
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        return {
            "success": False,
            "code": self.code,
            "message": self.message,
            "errors": self.errors,
        }


class ValidationFailed(DomainError):
    """Raised when input fails field-level validation."""

    code = "validation_error"
    default_message = "Invalid data."

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls(message, errors=[{"field": field, "message": message}])


class EmptyCart(ValidationFailed):
    code = "empty_cart"
    default_message = "Cart is empty."


class InvalidTransition(ValidationFailed):
    """Raised when a status change is not allowed from the current status."""

    code = "invalid_transition"

    def __init__(self, current: str, target: str) -> None:
        self.current: str = current
        self.target: str = target
        super().__init__(
            f"Cannot change status from '{current}' to '{target}'.",
            errors=[{"field": "status", "message": f"'{target}' is not reachable from '{current}'."}],
        )


class NotFound(DomainError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found."


class SlotUnavailable(DomainError):
    """Raised when a slot has not enough seating capacity left."""

    code = "slot_unavailable"
    status_code = 409
    default_message = "Not enough seats left for this slot."


class IdempotencyInProgress(DomainError):
    code = "idempotency_in_progress"
    status_code = 409
    default_message = "A request with this Idempotency-Key is still being processed."


class IdempotencyKeyReused(DomainError):
    code = "idempotency_key_reused"
    status_code = 422
    default_message = "Idempotency-Key was already used with a different payload."


class PayloadTooLarge(DomainError):
    code = "payload_too_large"
    status_code = 413
    default_message = "Request payload is too large."
