from __future__ import annotations


class DknError(Exception):
    """Base error for the document catalog service.

    ``message`` is safe to return to callers; anything more detailed belongs in
    the logs.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DknError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(DknError):
    status_code = 401
    default_message = "Not authorized, no token"


class AuthorizationError(DknError):
    status_code = 403
    default_message = "Not permitted"


class NotFoundError(DknError):
    status_code = 404
    default_message = "Not found"


class StorageError(DknError):
    status_code = 500
    default_message = "Server error"


__all__ = [
    "DknError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "StorageError",
]
