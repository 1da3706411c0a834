"""
NoteSync Backend — Abstract Blob Store Interface
==================================================

What:  Abstract base class for the object storage holding image attachments.
Why:   Lets the synchronization workflow upload, resolve and remove images
       without knowing where the bytes live.

Contract:
    put(key, content)   store bytes under a key (overwrites an existing object)
    get_locator(key)    return a directly fetchable URL for the object
    remove(key)         delete the object; removing a missing key is a no-op

Implementations wrap their failures in BlobStoreError; a locator request for a
missing key raises BlobNotFoundError.
"""

from abc import ABC, abstractmethod


class BlobStore(ABC):
    """Named-object put/get/remove interface."""

    @abstractmethod
    async def put(self, key: str, content: bytes) -> None:
        ...

    @abstractmethod
    async def get_locator(self, key: str) -> str:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        ...

    async def health_check(self) -> bool:
        return True
