"""
NoteSync Backend — Database Record Store
==========================================

What:  Record store backed by async SQLAlchemy, for self-hosted deployments
       and local development without a managed GraphQL API.
How:   Each operation opens its own session and commits before returning, so
       the caller's next list() observes its own writes.

Behavior parity with the GraphQL API:
    - list() returns every row, oldest first
    - create() assigns a UUID4 string id
    - delete() of an unknown id is a no-op
"""

import logging
from typing import List

from sqlalchemy import delete as sql_delete
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from notesync.exceptions import RecordStoreError
from notesync.models.note import NoteRecord
from notesync.schemas.note import Note, NoteCreateInput
from notesync.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class DatabaseRecordStore(RecordStore):
    """Record store over an async SQLAlchemy session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ):
        self.session_factory = session_factory
        self.engine = engine

    async def list(self) -> List[Note]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(NoteRecord).order_by(NoteRecord.created_at.asc())
                )
                records = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise RecordStoreError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e
        return [Note.model_validate(record) for record in records]

    async def create(self, note_input: NoteCreateInput) -> Note:
        record = NoteRecord(
            name=note_input.name,
            description=note_input.description,
            image=note_input.image,
        )
        try:
            async with self.session_factory() as session:
                session.add(record)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise RecordStoreError(
                message="Could not save the note. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e
        logger.info("Created note %s (%s)", record.id, record.name)
        return Note.model_validate(record)

    async def delete(self, note_id: str) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(sql_delete(NoteRecord).where(NoteRecord.id == note_id))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise RecordStoreError(
                message="Could not delete the note. Please try again.",
                context={"note_id": note_id},
            ) from e
        logger.info("Deleted note %s", note_id)

    async def health_check(self) -> bool:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("Health check: database unreachable: %s", str(e))
            return False
        return True

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
