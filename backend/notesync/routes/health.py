"""
NoteSync Backend — Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Probes the record store and the blob store and returns aggregate status.

Status levels:
    - healthy:   both stores reachable (HTTP 200)
    - unhealthy: a store is unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from notesync import __version__
from notesync.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request):
    record_ok = await request.app.state.record_store.health_check()
    blob_ok = await request.app.state.blob_store.health_check()

    if not record_ok:
        logger.warning("Health check: record store unreachable")
    if not blob_ok:
        logger.warning("Health check: blob store unavailable")

    body = HealthResponse(
        status="healthy" if record_ok and blob_ok else "unhealthy",
        version=__version__,
        record_store="reachable" if record_ok else "unreachable",
        blob_store="available" if blob_ok else "unavailable",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=200 if record_ok and blob_ok else 503,
        content=body.model_dump(),
    )
