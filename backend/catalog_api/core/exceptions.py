"""
Error taxonomy shared by the services and the HTTP boundary.

Every service operation raises one of these; the exception handlers in
``catalog_api.main`` turn them into ``{"error": ...}`` responses.
"""

from typing import Any, Dict, List, Optional

from fastapi import status


class CatalogError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(CatalogError):
    """Client payload is malformed. Carries every violation found."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"

    def __init__(
        self,
        details: Optional[List[Dict[str, str]]] = None,
        message: Optional[str] = None,
    ):
        super().__init__(message)
        self.details = details or []

    @classmethod
    def single(cls, path: str, message: str) -> "ValidationError":
        return cls([{"path": path, "message": message}])

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details}


class BadRequest(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Unauthorized(CatalogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(CatalogError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid or expired token"


class NotFound(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(CatalogError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(CatalogError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class PersistenceError(Exception):
    """Database failure that is not the caller's fault."""


class UniqueConstraintViolation(PersistenceError):
    """An insert/update collided with a unique constraint."""
