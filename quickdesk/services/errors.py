"""Domain errors raised by services and mapped to HTTP status codes at the API boundary."""

from typing import Any


class ServiceError(Exception):
    """Base class for recoverable service errors; message is safe to return to clients."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationFailed(ServiceError):
    """Input is well-formed but invalid against current data (e.g. unknown category)."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls("Validation failed", errors=[{"field": field, "message": message}])


class NotFoundError(ServiceError):
    """Referenced ticket, category or user does not exist."""


class AccessDeniedError(ServiceError):
    """Caller is authenticated but role or ownership forbids the action."""


class ConflictError(ServiceError):
    """Duplicate category name or email, or a delete blocked by dependent records."""
