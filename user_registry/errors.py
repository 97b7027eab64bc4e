from __future__ import annotations


class StoreError(Exception):
    """Base for every error a user registry operation can surface.

    ``kind`` is the stable tag returned to API clients next to the message.
    """

    kind = "store_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    kind = "validation_error"


class ConflictError(StoreError):
    kind = "conflict"


class NotFoundError(StoreError):
    kind = "not_found"


class MalformedRequestError(StoreError):
    """Unparseable id or body. Raised at the HTTP boundary, never by the store."""

    kind = "malformed_request"
