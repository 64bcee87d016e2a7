from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    DknError,
    NotFoundError,
    StorageError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "DknError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "StorageError",
]
