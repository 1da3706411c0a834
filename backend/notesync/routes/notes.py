"""
NoteSync Backend — Notes Route Handlers
=========================================

What:  The UI actions of the notes page as HTTP endpoints.
       GET    /api/notes          page load: refetch and display
       GET    /api/notes/view     the currently displayed list, no refetch
       POST   /api/notes          create-note form submit
       DELETE /api/notes/{id}     delete button
How:   Extract form/query data, delegate to NoteSyncWorkflow, return the
       session's resulting list.

Form rules:
    `name` and `description` are required and must be non-empty. A submit
    that violates this is rejected with 422 before any store is contacted.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from notesync.dependencies import get_session, get_workflow
from notesync.exceptions import NotFoundError
from notesync.schemas.note import ErrorResponse, ImageAttachment, NoteForm, NoteListResponse
from notesync.services.note_sync import BlobKeyStrategy, NoteSyncWorkflow
from notesync.services.session import Session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

STORE_ERRORS = {
    401: {"description": "No valid session", "model": ErrorResponse},
    502: {"description": "Record or blob store failure", "model": ErrorResponse},
}


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses=STORE_ERRORS,
    summary="Fetch and display all notes",
)
async def list_notes(
    session: Session = Depends(get_session),
    workflow: NoteSyncWorkflow = Depends(get_workflow),
) -> NoteListResponse:
    """
    Refetch the full collection; images come back as fetchable locators.

    On failure the session's displayed list is left as it was.
    """
    notes = await workflow.list_notes(session.view)
    return NoteListResponse.from_notes(notes)


@router.get(
    "/notes/view",
    response_model=NoteListResponse,
    responses={401: STORE_ERRORS[401]},
    summary="Currently displayed notes (no refetch)",
)
async def current_view(session: Session = Depends(get_session)) -> NoteListResponse:
    return NoteListResponse.from_notes(session.view.snapshot())


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteListResponse,
    responses={
        **STORE_ERRORS,
        422: {"description": "Name or description missing"},
    },
    summary="Create a note",
)
async def create_note(
    name: str = Form(..., min_length=1, description="Note name"),
    description: str = Form(..., min_length=1, description="Note description"),
    image: Optional[UploadFile] = File(default=None, description="Optional image"),
    session: Session = Depends(get_session),
    workflow: NoteSyncWorkflow = Depends(get_workflow),
) -> NoteListResponse:
    """
    Create a note, uploading the image first when one is attached.

    Returns the refreshed list. The response echoes nothing from the form,
    so the client starts from an empty form again.
    """
    attachment = None
    if image is not None:
        try:
            if image.filename:
                attachment = ImageAttachment(
                    filename=image.filename,
                    content=await image.read(),
                )
        finally:
            await image.close()

    logger.info(
        "Create request: name=%r, image=%s",
        name,
        attachment.filename if attachment else "none",
    )
    form = NoteForm(name=name, description=description, image=attachment)
    notes = await workflow.create_note(form, session.view)
    return NoteListResponse.from_notes(notes)


@router.delete(
    "/notes/{note_id}",
    response_model=NoteListResponse,
    responses={
        **STORE_ERRORS,
        404: {"description": "Note not displayed and no name given", "model": ErrorResponse},
    },
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    name: Optional[str] = Query(default=None, description="Note name (its image key)"),
    session: Session = Depends(get_session),
    workflow: NoteSyncWorkflow = Depends(get_workflow),
) -> NoteListResponse:
    """
    Delete a note by id; `name` locates its image.

    When `name` is omitted or empty it is taken from the displayed list.
    """
    if not name and workflow.options.blob_key_strategy is BlobKeyStrategy.NAME:
        displayed = session.view.find(note_id)
        if displayed is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        name = displayed.name

    notes = await workflow.delete_note(note_id, name or "", session.view)
    return NoteListResponse.from_notes(notes)
