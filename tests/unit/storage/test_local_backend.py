"""Unit tests for LocalBackend."""

import re

import pytest

from velion_dkn.storage import InvalidKeyError, LocalBackend, StorageBackendError, generate_key


class TestGenerateKey:
    def test_keeps_extension_drops_name(self):
        key = generate_key("Client Plan FINAL.PDF")
        assert re.fullmatch(r"\d{13}-\d{9}\.pdf", key)

    def test_no_extension(self):
        assert re.fullmatch(r"\d{13}-\d{9}", generate_key("README"))
        assert re.fullmatch(r"\d{13}-\d{9}", generate_key(None))

    def test_odd_extension_is_dropped(self):
        assert re.fullmatch(r"\d{13}-\d{9}", generate_key("notes.tar-gz"))

    def test_keys_differ(self):
        assert len({generate_key("a.txt") for _ in range(50)}) == 50


@pytest.mark.asyncio
class TestLocalBackend:
    @pytest.fixture
    def backend(self, tmp_path):
        backend = LocalBackend(tmp_path / "files")
        backend.ensure_root()
        return backend

    async def test_put_and_exists(self, backend):
        written = await backend.put("a.txt", b"hello")

        assert written == 5
        assert await backend.exists("a.txt")
        assert backend.path_for("a.txt").read_bytes() == b"hello"

    async def test_put_never_overwrites(self, backend):
        await backend.put("a.txt", b"first")

        with pytest.raises(StorageBackendError):
            await backend.put("a.txt", b"second")
        assert backend.path_for("a.txt").read_bytes() == b"first"

    async def test_delete(self, backend):
        await backend.put("a.txt", b"x")

        assert await backend.delete("a.txt") is True
        assert not await backend.exists("a.txt")
        # already gone
        assert await backend.delete("a.txt") is False

    async def test_missing_file_does_not_exist(self, backend):
        assert await backend.exists("nope.txt") is False

    @pytest.mark.parametrize("key", ["", "/etc/passwd", "../outside.txt", "sub/../../outside.txt"])
    async def test_rejects_keys_outside_root(self, backend, key):
        with pytest.raises(InvalidKeyError):
            backend.path_for(key)
        with pytest.raises(InvalidKeyError):
            await backend.put(key, b"x")
