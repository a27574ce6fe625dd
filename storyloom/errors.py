"""Error hierarchy shared by the repository, context and HTTP layers.

Each error carries the HTTP status the API layer should answer with, a
stable machine-readable ``code`` and an optional ``context`` dict for
debugging.  Storage failures are *not* wrapped: ``SQLAlchemyError`` and
friends propagate to the caller unchanged.
"""

from __future__ import annotations

from typing import Any, Optional


class StoryloomError(Exception):
    """Base class for all Storyloom errors."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.context:
            payload["context"] = self.context
        return payload


class EntityNotFoundError(StoryloomError):
    """Requested entity does not exist.

    >>> raise EntityNotFoundError("Chapter", 42)
    """

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str | int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"{entity_type} {entity_id} not found",
            {"entity_type": entity_type, "entity_id": entity_id},
        )


class ValidationError(StoryloomError):
    """Caller supplied an invalid argument (e.g. a negative token budget)."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, {"field": field} if field else None)
