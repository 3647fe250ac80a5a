from __future__ import annotations

from typing import Any, Optional


class CatalogError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequestError(CatalogError):
    status_code = 400
    default_message = "Bad request"


class UnauthorizedError(CatalogError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(CatalogError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(CatalogError):
    status_code = 404
    default_message = "Not found"


class ConflictError(CatalogError):
    status_code = 409
    default_message = "Conflict"
