"""
NoteSync Backend — Session Route
==================================

What:  POST /api/session/sign-out, the sign-out button.
How:   Drops the caller's session and its displayed list; nothing is returned.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from notesync.dependencies import get_session
from notesync.services.session import Session, SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["Session"])


@router.post("/sign-out", status_code=204, summary="Sign out")
async def sign_out(request: Request, session: Session = Depends(get_session)) -> Response:
    registry: SessionRegistry = request.app.state.sessions
    registry.sign_out(session)
    return Response(status_code=204)
