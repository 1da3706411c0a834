"""
NoteSync Backend — Abstract Record Store Interface
====================================================

What:  Abstract base class for the structured-data service holding note records.
Why:   The synchronization workflow only depends on this contract, so the
       managed GraphQL API and the self-hosted database are interchangeable.
How:   Concrete implementations inherit from RecordStore and implement
       list(), create() and delete().

Implementations:
    - GraphQLRecordStore: managed GraphQL API (default)
    - DatabaseRecordStore: async SQLAlchemy
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from notesync.schemas.note import Note, NoteCreateInput


class RecordStore(ABC):
    """
    Contract consumed by the Note Synchronization Workflow.

    - list() returns every record in store order; no pagination is used.
    - create() assigns the record's `id`.
    - Implementations wrap their own failures in RecordStoreError.
    - Read-after-write consistency for the caller's own writes is assumed.
    """

    @abstractmethod
    async def list(self) -> List[Note]:
        """Return all note records, ordered as the store returns them."""
        ...

    @abstractmethod
    async def create(self, note_input: NoteCreateInput) -> Note:
        """Create a record and return it with its assigned `id`."""
        ...

    @abstractmethod
    async def delete(self, note_id: str) -> None:
        """Delete the record with the given `id`."""
        ...

    def for_session(self, token: Optional[str]) -> "RecordStore":
        """
        Return a store acting on behalf of the given session token.

        Stores that do not authenticate per caller return themselves.
        """
        return self

    async def health_check(self) -> bool:
        """Lightweight reachability probe used by GET /health."""
        return True

    async def close(self) -> None:
        """Release network or database resources held by the store."""
        return None
