"""
NoteSync Backend — Image Locator Route
========================================

What:  GET /api/files/{key} serves a stored image for a signed locator issued
       by LocalBlobStore.get_locator().
Why:   Locators are what the notes list hands out in `image`; this endpoint
       makes them directly fetchable without exposing the storage directory.

No session is required: possession of an unexpired, correctly signed locator
is the authorization.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from notesync.dependencies import get_blob_store
from notesync.exceptions import BlobNotFoundError
from notesync.schemas.note import ErrorResponse
from notesync.services.blob_store import BlobStore
from notesync.services.local_blob_store import LocalBlobStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Files"])


@router.get(
    "/files/{key:path}",
    summary="Fetch an image through a signed locator",
    responses={
        200: {"description": "Image bytes, typed from their file signature"},
        403: {"description": "Invalid or expired locator", "model": ErrorResponse},
        404: {"description": "No image stored under this key", "model": ErrorResponse},
    },
)
async def serve_file(
    key: str,
    expires: Optional[int] = Query(default=None),
    signature: Optional[str] = Query(default=None),
    blob_store: BlobStore = Depends(get_blob_store),
) -> FileResponse:
    if not isinstance(blob_store, LocalBlobStore):
        raise BlobNotFoundError(key)

    blob_store.verify(key, expires, signature)
    media_type = await blob_store.media_type(key)

    return FileResponse(
        path=blob_store.path_for(key),
        media_type=media_type,
        headers={"Cache-Control": "private, max-age=60"},
    )
