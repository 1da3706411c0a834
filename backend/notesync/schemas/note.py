"""
NoteSync Backend — Pydantic Schemas
====================================

What:  Pydantic models for notes, form input and API responses.
Why:   Strict input validation, automatic serialization, and OpenAPI doc generation.
Who:   Used by the record stores (wire shapes), the synchronization workflow
       and the route handlers.

The `image` field changes meaning along the way:
    - In the record store it holds the uploaded file's original filename.
    - In anything returned by a List it holds a resolved, fetchable locator.
    The transformation is one-way; a listed Note never carries the raw key.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Domain Models
# ══════════════════════════════════════════════════════════════════════════


class Note(BaseModel):
    """A note as held by the record store and displayed in the list."""

    id: Optional[str] = Field(default=None, description="Assigned by the record store on creation")
    name: str = Field(description="Display title; default blob key")
    description: Optional[str] = Field(default=None, description="Note body")
    image: Optional[str] = Field(
        default=None,
        description="Stored filename at rest; resolved locator once listed",
    )

    model_config = {"from_attributes": True}


class NoteCreateInput(BaseModel):
    """Variables of the createNote mutation."""

    name: str
    description: str
    image: Optional[str] = None


class ImageAttachment(BaseModel):
    """An uploaded file as handed over by the form collaborator."""

    filename: str
    content: bytes


class NoteForm(BaseModel):
    """
    Submitted create-note form.

    `name` and `description` are required and non-empty; this is the only
    validation performed on note input.
    """

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    image: Optional[ImageAttachment] = None

    @property
    def has_image(self) -> bool:
        # Browsers submit an empty file part when no file was chosen
        return self.image is not None and bool(self.image.filename)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteListResponse(BaseModel):
    """The displayed note collection, in record store order."""

    notes: List[Note] = Field(description="Notes with images resolved to locators")
    count: int = Field(description="Number of notes in the list")

    @classmethod
    def from_notes(cls, notes: List[Note]) -> "NoteListResponse":
        return cls(notes=notes, count=len(notes))


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "record_store_error",
            "message": "The note service is unavailable. Please try again later.",
            "request_id": "1a2b3c4d"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    record_store: str = Field(description="Record store status: reachable, unreachable")
    blob_store: str = Field(description="Blob store status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
