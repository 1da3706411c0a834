"""
NoteSync Backend — Session Registry Tests
===========================================

What:  Tests for the bearer-token gate and per-session note lists.
"""

import pytest

from notesync.exceptions import AuthenticationError
from notesync.schemas.note import Note
from notesync.services.session import ANONYMOUS, SessionRegistry


class TestOpenGate:

    def test_no_tokens_means_anonymous_session(self):
        registry = SessionRegistry()

        session = registry.authenticate(None)

        assert registry.auth_enabled is False
        assert session.session_id == ANONYMOUS
        assert session.token is None

    def test_anonymous_session_is_shared(self):
        registry = SessionRegistry()
        assert registry.authenticate(None) is registry.authenticate("Bearer anything")


class TestBearerTokens:

    def setup_method(self):
        self.registry = SessionRegistry(["tok-1", "tok-2"])

    @pytest.mark.parametrize("header", [None, "", "tok-1", "Basic tok-1", "Bearer ", "Bearer nope"])
    def test_rejected_headers(self, header):
        with pytest.raises(AuthenticationError):
            self.registry.authenticate(header)

    def test_same_token_same_session(self):
        first = self.registry.authenticate("Bearer tok-1")
        second = self.registry.authenticate("bearer tok-1")

        assert first is second
        assert first.session_id in self.registry

    def test_token_forwarded_as_header_value(self):
        session = self.registry.authenticate("Bearer tok-2")
        assert session.token == "Bearer tok-2"

    def test_sessions_do_not_share_views(self):
        one = self.registry.authenticate("Bearer tok-1")
        two = self.registry.authenticate("Bearer tok-2")

        one.view.replace([Note(id="1", name="n", description="d")])

        assert len(one.view) == 1
        assert len(two.view) == 0

    def test_sign_out_discards_view(self):
        session = self.registry.authenticate("Bearer tok-1")
        session.view.replace([Note(id="1", name="n", description="d")])

        self.registry.sign_out(session)
        again = self.registry.authenticate("Bearer tok-1")

        assert again is not session
        assert len(again.view) == 0
