"""
NoteSync Backend — Local Filesystem Blob Store
================================================

What:  Blob store that keeps image bytes on the local filesystem and hands out
       signed, time-bounded locators served by GET /api/files/{key}.
Why:   Gives the client a directly fetchable image URL without exposing the
       storage directory, the same contract a managed object store offers
       through presigned URLs.
How:   Async file I/O via aiofiles; locators signed with HMAC-SHA256;
       content type detected from the stored bytes with python-magic.

Directory Structure:
    storage/
    └── 3f/
        └── 3fa1...e9      (sha256 of the key)

    Keys are note names or ids chosen by users, so they never reach the
    filesystem directly: the object path is the key's SHA-256 digest, sharded
    by its first two hex characters.

Locator Format:
    {public_base_url}/api/files/{quoted key}?expires=<unix ts>&signature=<hex>
    signature = HMAC-SHA256(secret, "{key}:{expires}")
"""

import hashlib
import hmac
import logging
import time
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import quote, urlencode

import aiofiles
import aiofiles.os
import magic

from notesync.exceptions import BlobNotFoundError, BlobStoreError, LocatorError
from notesync.services.blob_store import BlobStore

logger = logging.getLogger(__name__)

# libmagic only needs the leading signature bytes
MAGIC_HEADER_BYTES = 2048


class LocalBlobStore(BlobStore):
    """
    Filesystem-backed blob store.

    put() overwrites an existing object with the same key, so two notes that
    share a name share one image.
    """

    def __init__(
        self,
        storage_root: str,
        secret: str,
        public_base_url: str,
        ttl_seconds: int = 900,
        clock: Callable[[], float] = time.time,
    ):
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        self._secret = secret.encode("utf-8")
        self.public_base_url = public_base_url.rstrip("/")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        logger.info("LocalBlobStore initialized with storage_root=%s", self.storage_root)

    # ── Paths ─────────────────────────────────────────────────────────────

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.storage_root / digest[:2] / digest

    # ── Blob Operations ───────────────────────────────────────────────────

    async def put(self, key: str, content: bytes) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store blob %r at %s: %s", key, path, str(e))
            raise BlobStoreError(
                message="Failed to save uploaded image. Please try again.",
                context={"key": key, "os_error": str(e)},
            ) from e
        logger.info("Blob stored: %r (%d bytes)", key, len(content))

    async def get_locator(self, key: str) -> str:
        if not self.path_for(key).is_file():
            raise BlobNotFoundError(key)
        expires = int(self._clock()) + self.ttl_seconds
        query = urlencode({"expires": expires, "signature": self.sign(key, expires)})
        return f"{self.public_base_url}/api/files/{quote(key, safe='')}?{query}"

    async def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.debug("Remove: blob already gone: %r", key)
            return
        except OSError as e:
            logger.error("Failed to remove blob %r: %s", key, str(e))
            raise BlobStoreError(
                message="Failed to remove the stored image.",
                context={"key": key, "os_error": str(e)},
            ) from e
        logger.info("Blob removed: %r", key)

    async def media_type(self, key: str) -> str:
        """
        Detect the stored object's MIME type from its header bytes.

        Keys are note names or ids, so there is no extension to go by; libmagic
        reads the file signature instead (PNG starts with 89 50 4E 47).

        Raises:
            BlobNotFoundError: nothing stored under this key
        """
        path = self.path_for(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                header = await f.read(MAGIC_HEADER_BYTES)
        except FileNotFoundError as e:
            raise BlobNotFoundError(key) from e
        except OSError as e:
            raise BlobStoreError(context={"key": key, "os_error": str(e)}) from e
        return magic.from_buffer(header, mime=True)

    async def health_check(self) -> bool:
        return self.storage_root.is_dir()

    # ── Locator Signing ───────────────────────────────────────────────────

    def sign(self, key: str, expires: int) -> str:
        message = f"{key}:{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def verify(self, key: str, expires: Optional[int], signature: Optional[str]) -> None:
        """
        Check a locator's signature and expiry.

        Raises:
            LocatorError: missing parameters, bad signature or expired locator
        """
        if expires is None or not signature:
            raise LocatorError(context={"key": key, "reason": "missing parameters"})
        if not hmac.compare_digest(self.sign(key, expires), signature):
            raise LocatorError(context={"key": key, "reason": "bad signature"})
        if expires < self._clock():
            raise LocatorError(context={"key": key, "reason": "expired"})
