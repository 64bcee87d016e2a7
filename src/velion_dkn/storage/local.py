from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path, PurePosixPath

from starlette.concurrency import run_in_threadpool

from .base import InvalidKeyError, StorageBackend, StorageBackendError

logger = logging.getLogger(__name__)


def generate_key(original_name: str | None) -> str:
    """``<epoch-ms>-<random><ext>``; the original extension is kept, the name is not."""
    suffix = PurePosixPath(original_name or "").suffix.lower()
    if not suffix[1:].isalnum():
        suffix = ""
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9):09d}{suffix}"


class LocalBackend(StorageBackend):
    """Stores files on the local filesystem under ``base_path``."""

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path).resolve()

    def ensure_root(self) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if not key or key.startswith(("/", "\\")):
            raise InvalidKeyError(f"Invalid storage key: {key!r}")
        path = (self.base_path / key).resolve()
        if self.base_path not in path.parents:
            raise InvalidKeyError(f"Storage key escapes root: {key!r}")
        return path

    async def put(self, key: str, data: bytes) -> int:
        path = self.path_for(key)

        def _write() -> int:
            path.parent.mkdir(parents=True, exist_ok=True)
            # "xb": a generated key must never overwrite an existing file
            fh = open(path, "xb")
            try:
                with fh:
                    return fh.write(data)
            except OSError:
                # only our own partial write is removed, never a file we did not create
                path.unlink(missing_ok=True)
                raise

        try:
            written = await run_in_threadpool(_write)
        except OSError as exc:
            raise StorageBackendError(f"Failed to write {key}") from exc
        logger.debug("Stored %s (%d bytes)", key, written)
        return written

    async def exists(self, key: str) -> bool:
        path = self.path_for(key)
        return await run_in_threadpool(path.is_file)

    async def delete(self, key: str) -> bool:
        path = self.path_for(key)

        def _unlink() -> bool:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            return True

        try:
            return await run_in_threadpool(_unlink)
        except OSError as exc:
            raise StorageBackendError(f"Failed to delete {key}") from exc
