from __future__ import annotations

from typing import Any, Optional


class WorkshopError(Exception):
    """
    Base class for domain failures raised by the work-order engine.

    Each subclass carries a machine-readable ``kind`` and the HTTP status the
    API layer maps it to; ``message`` is safe to show to callers.
    """

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(WorkshopError):
    """A referenced work order, inventory item, service item, worker, vehicle or customer is absent."""

    kind = "not_found"
    status_code = 404


class InvalidArgumentError(WorkshopError):
    """The request is well-formed but cannot be applied (e.g. assignment without a worker)."""

    kind = "invalid_argument"
    status_code = 400


class ConflictError(WorkshopError):
    """A uniqueness rule was violated, such as a duplicate work-order code."""

    kind = "conflict"
    status_code = 409


class StorageUnavailableError(WorkshopError):
    """The database could not be reached or rejected the statement at the schema level."""

    kind = "storage_unavailable"
    status_code = 503
