"""
NoteSync Backend — Session Registry
=====================================

What:  The session/identity gate in front of every notes operation.
How:   A request presents `Authorization: Bearer <token>`; the token must be
       one of the configured SESSION_TOKENS. Each session owns the list of
       notes displayed to it (a NoteListView). Signing out discards that list.

       With no tokens configured the gate is open and every request shares a
       single "anonymous" session (local development).
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from notesync.exceptions import AuthenticationError
from notesync.services.note_sync import NoteListView

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"


@dataclass
class Session:
    session_id: str
    token: Optional[str] = None
    view: NoteListView = field(default_factory=NoteListView)


class SessionRegistry:
    """Maps authenticated sessions to their displayed note lists."""

    def __init__(self, tokens: Iterable[str] = ()):
        self._tokens = frozenset(tokens)
        self._sessions: Dict[str, Session] = {}

    @property
    def auth_enabled(self) -> bool:
        return bool(self._tokens)

    def authenticate(self, authorization: Optional[str]) -> Session:
        """
        Resolve the Authorization header to a session, creating it on first use.

        Raises:
            AuthenticationError: the gate is closed and the header is missing,
                malformed or carries an unknown token
        """
        if not self.auth_enabled:
            return self._get_or_create(ANONYMOUS, None)

        if not authorization:
            raise AuthenticationError()
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise AuthenticationError(message="Expected a bearer token")
        if token not in self._tokens:
            raise AuthenticationError(message="Unknown session token")

        session_id = hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]
        return self._get_or_create(session_id, authorization)

    def _get_or_create(self, session_id: str, token: Optional[str]) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(session_id=session_id, token=token)
            self._sessions[session_id] = session
            logger.info("Session %s started", session_id)
        return session

    def sign_out(self, session: Session) -> None:
        self._sessions.pop(session.session_id, None)
        logger.info("Session %s signed out", session.session_id)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
