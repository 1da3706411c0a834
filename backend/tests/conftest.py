"""
NoteSync Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── record_store: in-memory RecordStore recording every call
    ├── blob_store: in-memory BlobStore recording every call
    ├── workflow: NoteSyncWorkflow over the two fakes (reference options)
    ├── view: empty NoteListView
    ├── temp_storage: empty directory for filesystem blob tests
    ├── sample_image_bytes: a valid 1x1 PNG
    ├── test_settings: Settings isolated from the environment
    └── test_client: HTTPX AsyncClient against an app wired to the fakes
"""

import asyncio
import base64
import os
import tempfile
from typing import Dict, List, Optional, Set

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any notesync imports
os.environ["RECORD_STORE_BACKEND"] = "graphql"
os.environ["GRAPHQL_URL"] = "http://graphql.test/graphql"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="notesync_test_")
os.environ["LOCATOR_SECRET"] = "test-secret-not-real"
os.environ["SESSION_TOKENS"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from notesync.config import Settings  # noqa: E402
from notesync.exceptions import BlobNotFoundError, BlobStoreError, RecordStoreError  # noqa: E402
from notesync.schemas.note import Note, NoteCreateInput  # noqa: E402
from notesync.services.blob_store import BlobStore  # noqa: E402
from notesync.services.note_sync import NoteListView, NoteSyncWorkflow  # noqa: E402
from notesync.services.record_store import RecordStore  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Collaborators
# ══════════════════════════════════════════════════════════════════════════

class FakeRecordStore(RecordStore):
    """
    Record store holding notes in a list.

    Set `fail_on` to operation names ("list", "create", "delete") to make
    them raise RecordStoreError. Every call is appended to `calls`.
    """

    def __init__(self):
        self.notes: List[Note] = []
        self.calls: List[tuple] = []
        self.fail_on: Set[str] = set()
        self._next_id = 1

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RecordStoreError(context={"operation": operation})

    async def list(self) -> List[Note]:
        self.calls.append(("list",))
        self._maybe_fail("list")
        # Copies: callers overwrite `image` in place
        return [note.model_copy() for note in self.notes]

    async def create(self, note_input: NoteCreateInput) -> Note:
        self.calls.append(("create", note_input.model_dump()))
        self._maybe_fail("create")
        note = Note(id=f"note-{self._next_id}", **note_input.model_dump())
        self._next_id += 1
        self.notes.append(note)
        return note.model_copy()

    async def delete(self, note_id: str) -> None:
        self.calls.append(("delete", note_id))
        self._maybe_fail("delete")
        self.notes = [note for note in self.notes if note.id != note_id]


class FakeBlobStore(BlobStore):
    """
    Blob store holding objects in a dict.

    Locators carry an incrementing token, like re-signed URLs do.
    `remove_gate`, when set, makes remove() wait until the event is set.
    """

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.calls: List[tuple] = []
        self.fail_on: Set[str] = set()
        self.fail_locator_keys: Set[str] = set()
        self.remove_gate: Optional[asyncio.Event] = None
        self._token = 0

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise BlobStoreError(context={"operation": operation})

    async def put(self, key: str, content: bytes) -> None:
        self.calls.append(("put", key))
        self._maybe_fail("put")
        self.objects[key] = content

    async def get_locator(self, key: str) -> str:
        self.calls.append(("get_locator", key))
        self._maybe_fail("get_locator")
        if key in self.fail_locator_keys:
            raise BlobStoreError(context={"key": key})
        if key not in self.objects:
            raise BlobNotFoundError(key)
        self._token += 1
        return f"https://blobs.test/{key}?token={self._token}"

    async def remove(self, key: str) -> None:
        self.calls.append(("remove", key))
        if self.remove_gate is not None:
            await self.remove_gate.wait()
        self._maybe_fail("remove")
        self.objects.pop(key, None)

    def fetch(self, locator: str) -> bytes:
        """Resolve a locator issued by this store back to its bytes."""
        key = locator.split("https://blobs.test/", 1)[1].split("?", 1)[0]
        return self.objects[key]


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def record_store():
    return FakeRecordStore()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def view():
    return NoteListView()


@pytest.fixture
def workflow(record_store, blob_store):
    return NoteSyncWorkflow(record_store, blob_store)


@pytest.fixture
def temp_storage(tmp_path):
    """A fresh storage directory for each test (cleaned up by pytest)."""
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """A complete 1x1 PNG, so libmagic recognizes it as image/png."""
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
    )


@pytest.fixture
def test_settings(tmp_path):
    """Settings that ignore the process environment and .env files."""
    return Settings(
        _env_file=None,
        graphql_url="http://graphql.test/graphql",
        storage_root=str(tmp_path / "storage"),
        locator_secret="test-secret-not-real",
        public_base_url="http://test",
        session_tokens="",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def test_client(test_settings, record_store, blob_store):
    """
    HTTPX AsyncClient talking to an app wired to the in-memory stores.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from notesync.main import create_app

    app = create_app(test_settings, record_store=record_store, blob_store=blob_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
