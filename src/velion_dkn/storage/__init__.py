from .base import InvalidKeyError, StorageBackend, StorageBackendError
from .local import LocalBackend, generate_key

__all__ = [
    "StorageBackend",
    "StorageBackendError",
    "InvalidKeyError",
    "LocalBackend",
    "generate_key",
]
