"""
NoteSync Backend — Store Construction & FastAPI Dependencies
==============================================================

What:  Builds the configured record store / blob store and exposes the
       per-request dependencies used by the route handlers.
How:   Stores live on `app.state` (created once in create_app); each request
       gets a NoteSyncWorkflow bound to its session.

Example usage in a route:
    @router.get("/notes")
    async def list_notes(
        session: Session = Depends(get_session),
        workflow: NoteSyncWorkflow = Depends(get_workflow),
    ):
        return await workflow.list_notes(session.view)
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from notesync.config import Settings
from notesync.database import create_engine_from_url, create_session_factory
from notesync.services.blob_store import BlobStore
from notesync.services.database_record_store import DatabaseRecordStore
from notesync.services.graphql_record_store import GraphQLRecordStore
from notesync.services.local_blob_store import LocalBlobStore
from notesync.services.note_sync import NoteSyncWorkflow
from notesync.services.record_store import RecordStore
from notesync.services.session import Session, SessionRegistry

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Store Factories
# ══════════════════════════════════════════════════════════════════════════

def build_record_store(settings: Settings) -> RecordStore:
    if settings.record_store_backend == "database":
        engine = create_engine_from_url(settings.database_url)
        logger.info("Record store: database")
        return DatabaseRecordStore(create_session_factory(engine), engine=engine)

    logger.info("Record store: graphql at %s", settings.graphql_url or "<unset>")
    return GraphQLRecordStore(
        url=settings.graphql_url,
        api_key=settings.graphql_api_key,
        timeout=settings.graphql_timeout_seconds,
    )


def build_blob_store(settings: Settings) -> BlobStore:
    if settings.blob_store_backend != "local":
        raise ValueError(f"Unsupported blob store backend: {settings.blob_store_backend!r}")

    logger.info("Blob store: local at %s", settings.storage_root)
    return LocalBlobStore(
        storage_root=settings.storage_root,
        secret=settings.locator_secret,
        public_base_url=settings.public_base_url,
        ttl_seconds=settings.locator_ttl_seconds,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Dependencies
# ══════════════════════════════════════════════════════════════════════════

def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_session(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> Session:
    """Authenticate the caller; raises AuthenticationError (401) on failure."""
    registry: SessionRegistry = request.app.state.sessions
    return registry.authenticate(authorization)


def get_workflow(
    request: Request,
    session: Session = Depends(get_session),
) -> NoteSyncWorkflow:
    return NoteSyncWorkflow(
        record_store=get_record_store(request).for_session(session.token),
        blob_store=get_blob_store(request),
        options=request.app.state.workflow_options,
    )
