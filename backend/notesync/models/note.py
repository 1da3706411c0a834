"""
NoteSync Backend — Note SQLAlchemy Model
==========================================

What:  ORM model for the `notes` table used by the database record store.
How:   Mirrors the GraphQL Note type (id, name, description, image) plus a
       created_at column that gives list() a stable insertion order.

Table Design:
    - id: UUID4 string; generated client-side so SQLite and PostgreSQL behave alike
    - name: display title, also the default blob key (not unique)
    - image: stored filename of the attachment, NULL when there is none
    - created_at: UTC; indexed because every list() orders by it
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notesync.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class NoteRecord(Base):
    """A persisted note row."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_new_id,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display title and default blob key",
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    image: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Original filename of the attached image",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_notes_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<NoteRecord(id={self.id}, name='{self.name}')>"
