"""
NoteSync Backend — Local Blob Store Unit Tests
================================================

What:  Tests for LocalBlobStore storage and signed locators.
How:   Uses pytest's tmp_path and a controllable clock.

Test Strategy:
    ✅ put / remove on disk, content type sniffed from the bytes
    ✅ keys never become filesystem paths (traversal-proof)
    ✅ locator format, signature and expiry checks
    ✅ missing keys raise BlobNotFoundError
"""

from urllib.parse import parse_qs, urlsplit

import pytest

from notesync.exceptions import BlobNotFoundError, LocatorError
from notesync.services.local_blob_store import LocalBlobStore


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def locator_params(locator):
    parts = urlsplit(locator)
    query = parse_qs(parts.query)
    return parts.path, int(query["expires"][0]), query["signature"][0]


class TestLocalBlobStore:

    def setup_method(self):
        self.clock = FakeClock()

    def make_store(self, root, ttl=900):
        return LocalBlobStore(
            storage_root=str(root),
            secret="secret",
            public_base_url="http://test/",
            ttl_seconds=ttl,
            clock=self.clock,
        )

    # ── Storage ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_put_writes_bytes(self, temp_storage, sample_image_bytes):
        store = self.make_store(temp_storage)

        await store.put("B", sample_image_bytes)

        assert store.path_for("B").read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_put_overwrites_same_key(self, temp_storage):
        store = self.make_store(temp_storage)

        await store.put("same", b"first")
        await store.put("same", b"second")

        assert store.path_for("same").read_bytes() == b"second"

    @pytest.mark.asyncio
    async def test_key_cannot_escape_storage_root(self, temp_storage):
        store = self.make_store(temp_storage)

        await store.put("../../etc/passwd", b"x")

        path = store.path_for("../../etc/passwd")
        assert path.is_file()
        assert store.storage_root in path.parents

    @pytest.mark.asyncio
    async def test_remove(self, temp_storage):
        store = self.make_store(temp_storage)
        await store.put("gone", b"x")

        await store.remove("gone")

        with pytest.raises(BlobNotFoundError):
            await store.media_type("gone")

    @pytest.mark.asyncio
    async def test_remove_missing_key_is_noop(self, temp_storage):
        store = self.make_store(temp_storage)
        await store.remove("never-stored")

    # ── Content Type ──────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_media_type_from_signature_not_key(self, temp_storage, sample_image_bytes):
        store = self.make_store(temp_storage)
        # No extension in the key; the PNG signature decides
        await store.put("B", sample_image_bytes)

        assert await store.media_type("B") == "image/png"

    @pytest.mark.asyncio
    async def test_media_type_for_missing_key(self, temp_storage):
        store = self.make_store(temp_storage)

        with pytest.raises(BlobNotFoundError):
            await store.media_type("nothing")

    # ── Locators ──────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_locator_format(self, temp_storage):
        store = self.make_store(temp_storage, ttl=60)
        await store.put("my note", b"x")

        locator = await store.get_locator("my note")

        assert locator.startswith("http://test/api/files/my%20note?")
        path, expires, signature = locator_params(locator)
        assert expires == int(self.clock.now) + 60
        store.verify("my note", expires, signature)

    @pytest.mark.asyncio
    async def test_locator_for_missing_key(self, temp_storage):
        store = self.make_store(temp_storage)

        with pytest.raises(BlobNotFoundError):
            await store.get_locator("nothing")

    @pytest.mark.asyncio
    async def test_expired_locator_rejected(self, temp_storage):
        store = self.make_store(temp_storage, ttl=60)
        await store.put("k", b"x")
        _, expires, signature = locator_params(await store.get_locator("k"))

        self.clock.now += 61

        with pytest.raises(LocatorError):
            store.verify("k", expires, signature)

    @pytest.mark.asyncio
    async def test_signature_bound_to_key(self, temp_storage):
        store = self.make_store(temp_storage)
        await store.put("a", b"x")
        _, expires, signature = locator_params(await store.get_locator("a"))

        with pytest.raises(LocatorError):
            store.verify("b", expires, signature)

    def test_missing_parameters_rejected(self, temp_storage):
        store = self.make_store(temp_storage)

        with pytest.raises(LocatorError):
            store.verify("a", None, None)
