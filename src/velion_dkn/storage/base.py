from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class StorageBackendError(Exception):
    """Raised by backends when the underlying store fails."""


class InvalidKeyError(StorageBackendError):
    """Key escapes the storage root or is otherwise unusable."""


class StorageBackend(ABC):
    """Where uploaded file bodies live.

    Keys are opaque, relative, and unique per upload.
    """

    @abstractmethod
    async def put(self, key: str, data: bytes) -> int:
        """Persist ``data`` under ``key``; returns bytes written."""

    @abstractmethod
    async def exists(self, key: str) -> bool: ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns False when nothing was there."""

    @abstractmethod
    def path_for(self, key: str) -> Path:
        """Filesystem path a response can stream from."""
