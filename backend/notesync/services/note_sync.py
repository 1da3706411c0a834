"""
NoteSync Backend — Note Synchronization Workflow
==================================================

What:  Orchestrates listing, creating and deleting notes against the record
       store and the blob store, and keeps the session's displayed list.
Who:   Called by the notes route handlers, one workflow per request.

Operations:
    List    record_store.list() → resolve every image to a locator
            (concurrently) → replace the displayed list
    Create  [blob_store.put(name)] → record_store.create() → List
    Delete  remove from displayed list → blob_store.remove(name)
            → record_store.delete(id)

    ┌──────────┐   ┌──────────────┐   ┌──────────────┐
    │  Routes  │──▶│ NoteSync     │──▶│ RecordStore  │
    │          │   │ Workflow     │──▶│ BlobStore    │
    └──────────┘   └──────┬───────┘   └──────────────┘
                          ▼
                   NoteListView (per session)

Consistency:
    Remote failures propagate to the caller; nothing is retried. Two
    inconsistencies are accepted by default:
    - a blob uploaded for a note whose create mutation then failed stays
      orphaned (unless rollback_blob_on_create_failure is set)
    - an optimistic delete that fails remotely is not rolled back locally;
      the next List re-synchronizes the view
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from notesync.exceptions import BlobNotFoundError, BlobStoreError, ValidationError
from notesync.schemas.note import Note, NoteCreateInput, NoteForm
from notesync.services.blob_store import BlobStore
from notesync.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class DeleteStrategy(str, enum.Enum):
    # Remove locally first, never roll back (reference behavior)
    OPTIMISTIC_NO_ROLLBACK = "optimistic"
    # Remove locally only once blob and record deletion both succeeded
    PESSIMISTIC_CONFIRM_FIRST = "pessimistic"


class ImageFailurePolicy(str, enum.Enum):
    FALLBACK = "fallback"
    FAIL = "fail"


class BlobKeyStrategy(str, enum.Enum):
    NAME = "name"
    ID = "id"


@dataclass(frozen=True)
class WorkflowOptions:
    delete_strategy: DeleteStrategy = DeleteStrategy.OPTIMISTIC_NO_ROLLBACK
    image_failure_policy: ImageFailurePolicy = ImageFailurePolicy.FALLBACK
    blob_key_strategy: BlobKeyStrategy = BlobKeyStrategy.NAME
    rollback_blob_on_create_failure: bool = False

    @classmethod
    def from_settings(cls, settings) -> "WorkflowOptions":
        return cls(
            delete_strategy=DeleteStrategy(settings.delete_strategy),
            image_failure_policy=ImageFailurePolicy(settings.image_failure_policy),
            blob_key_strategy=BlobKeyStrategy(settings.blob_key_strategy),
            rollback_blob_on_create_failure=settings.rollback_blob_on_create_failure,
        )


class NoteListView:
    """
    The locally held, displayed list of notes.

    Only ever touched from the event loop thread, so there is no locking.
    Overlapping operations are not serialized: the last List to finish wins.
    """

    def __init__(self, notes: Optional[List[Note]] = None):
        self._notes: List[Note] = list(notes or [])

    def snapshot(self) -> List[Note]:
        return list(self._notes)

    def replace(self, notes: List[Note]) -> None:
        self._notes = list(notes)

    def remove(self, note_id: str) -> None:
        self._notes = [note for note in self._notes if note.id != note_id]

    def find(self, note_id: str) -> Optional[Note]:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def __len__(self) -> int:
        return len(self._notes)


class NoteSyncWorkflow:
    """
    Stateless orchestrator; the displayed list is passed into each operation.

    Every operation returns the resulting displayed list, and raises
    RecordStoreError / BlobStoreError when a remote call fails.
    """

    def __init__(
        self,
        record_store: RecordStore,
        blob_store: BlobStore,
        options: Optional[WorkflowOptions] = None,
    ):
        self.record_store = record_store
        self.blob_store = blob_store
        self.options = options or WorkflowOptions()

    def blob_key(self, note_id: Optional[str], name: str) -> str:
        if self.options.blob_key_strategy is BlobKeyStrategy.ID:
            if not note_id:
                raise ValidationError(message="A note id is required to address its image", field="id")
            return note_id
        return name

    # ── List ──────────────────────────────────────────────────────────────

    async def list_notes(self, view: NoteListView) -> List[Note]:
        """
        Refetch the whole collection and replace the displayed list.

        The view is left untouched if the record store query fails, or if an
        image cannot be resolved under the "fail" policy.
        """
        notes = await self.record_store.list()

        pending = [note for note in notes if note.image]
        results = await asyncio.gather(
            *(self._resolve_image(note) for note in pending),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        view.replace(notes)
        logger.info("Listed %d notes (%d with images)", len(notes), len(pending))
        return view.snapshot()

    async def _resolve_image(self, note: Note) -> None:
        key = self.blob_key(note.id, note.name)
        try:
            note.image = await self.blob_store.get_locator(key)
        except BlobStoreError as e:
            if self.options.image_failure_policy is ImageFailurePolicy.FAIL:
                # Missing object under FAIL surfaces as a store failure of the list
                if isinstance(e, BlobNotFoundError):
                    raise BlobStoreError(
                        message="An image could not be loaded. Please try again later.",
                        context={"note_id": note.id, "key": key, "reason": "missing object"},
                    ) from e
                raise
            logger.warning(
                "Could not resolve image for note %s (key %r): %s; showing it without image",
                note.id, key, e.message,
            )
            note.image = None

    # ── Create ────────────────────────────────────────────────────────────

    async def create_note(self, form: NoteForm, view: NoteListView) -> List[Note]:
        """
        Upload the attachment (if any), create the record, then refetch.

        Sequencing with the default name key: the blob put must succeed before
        the mutation is sent. With the id key the record comes first because
        the key does not exist until the store assigns it.
        """
        if not form.name or not form.description:
            raise ValidationError(message="Name and description are required")

        image_filename = form.image.filename if form.has_image else None
        note_input = NoteCreateInput(
            name=form.name,
            description=form.description,
            image=image_filename,
        )

        if self.options.blob_key_strategy is BlobKeyStrategy.ID:
            await self._create_keyed_by_id(form, note_input)
        else:
            await self._create_keyed_by_name(form, note_input)

        return await self.list_notes(view)

    async def _create_keyed_by_name(self, form: NoteForm, note_input: NoteCreateInput) -> None:
        if form.has_image:
            await self.blob_store.put(form.name, form.image.content)

        try:
            await self.record_store.create(note_input)
        except Exception:
            if form.has_image:
                if self.options.rollback_blob_on_create_failure:
                    await self._discard_blob(form.name)
                else:
                    logger.warning("Create of %r failed after upload; blob left orphaned", form.name)
            raise

    async def _create_keyed_by_id(self, form: NoteForm, note_input: NoteCreateInput) -> None:
        note = await self.record_store.create(note_input)
        if not form.has_image:
            return

        try:
            await self.blob_store.put(note.id, form.image.content)
        except Exception:
            logger.warning("Upload for note %s failed; deleting the record", note.id)
            try:
                await self.record_store.delete(note.id)
            except Exception as cleanup_error:
                logger.error("Could not delete record %s after failed upload: %s", note.id, cleanup_error)
            raise

    async def _discard_blob(self, key: str) -> None:
        try:
            await self.blob_store.remove(key)
            logger.info("Rolled back blob %r after failed create", key)
        except Exception as e:
            logger.error("Rollback of blob %r failed: %s", key, e)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_note(self, note_id: str, name: str, view: NoteListView) -> List[Note]:
        """
        Remove a note from the display, the blob store and the record store.

        Optimistic: the displayed list changes before the first remote call,
        and stays changed whatever the remote calls do.
        Pessimistic: the displayed list changes only after both remote calls
        succeeded.
        """
        key = self.blob_key(note_id, name)
        optimistic = self.options.delete_strategy is DeleteStrategy.OPTIMISTIC_NO_ROLLBACK

        if optimistic:
            view.remove(note_id)

        await self.blob_store.remove(key)
        await self.record_store.delete(note_id)

        if not optimistic:
            view.remove(note_id)
        return view.snapshot()
