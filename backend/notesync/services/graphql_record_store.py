"""
NoteSync Backend — GraphQL Record Store
=========================================

What:  Record store client for a managed GraphQL API exposing the generated
       listNotes / createNote / deleteNote operations.
Why:   This is the default home of note records; the API owns the schema and
       assigns ids.
How:   Plain GraphQL-over-HTTP with httpx: POST {"query", "variables"} and read
       `data` / `errors` from the JSON body.

Authentication:
    - GRAPHQL_API_KEY set   → every call sends `x-api-key`
    - otherwise             → the caller's bearer token is forwarded as
                              `Authorization` (user-pool style auth)

Failure mapping:
    Transport error, non-2xx status, unparseable body or a non-empty `errors`
    list all raise RecordStoreError. There is no retry.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from notesync.exceptions import RecordStoreError
from notesync.schemas.note import Note, NoteCreateInput
from notesync.services.record_store import RecordStore

logger = logging.getLogger(__name__)

# ── GraphQL Documents ─────────────────────────────────────────────────────
LIST_NOTES = """
query ListNotes {
  listNotes {
    items {
      id
      name
      description
      image
    }
  }
}
"""

CREATE_NOTE = """
mutation CreateNote($input: CreateNoteInput!) {
  createNote(input: $input) {
    id
    name
    description
    image
  }
}
"""

DELETE_NOTE = """
mutation DeleteNote($input: DeleteNoteInput!) {
  deleteNote(input: $input) {
    id
  }
}
"""


class GraphQLRecordStore(RecordStore):
    """
    Record store backed by a GraphQL endpoint.

    One httpx.AsyncClient is shared by every session-bound copy of the store
    (see for_session); only the auth token differs between copies.
    """

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: Optional[float] = None,
        auth_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.api_key = api_key
        self.auth_token = auth_token
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def for_session(self, token: Optional[str]) -> "GraphQLRecordStore":
        return GraphQLRecordStore(
            url=self.url,
            api_key=self.api_key,
            auth_token=token,
            client=self._client,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        elif self.auth_token:
            headers["Authorization"] = self.auth_token
        return headers

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation: str = "query",
    ) -> Dict[str, Any]:
        """
        Send one GraphQL document and return its `data` object.

        Raises:
            RecordStoreError: on any transport, HTTP or GraphQL-level failure
        """
        payload: Dict[str, Any] = {"query": query}
        if variables is not None:
            payload["variables"] = variables

        try:
            response = await self._client.post(self.url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error("GraphQL %s transport failure: %s", operation, str(e))
            raise RecordStoreError(
                context={"operation": operation, "error": type(e).__name__}
            ) from e

        if response.status_code >= 400:
            logger.error("GraphQL %s returned HTTP %d", operation, response.status_code)
            raise RecordStoreError(
                context={"operation": operation, "status": response.status_code}
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RecordStoreError(
                context={"operation": operation, "error": "invalid JSON response"}
            ) from e

        errors = body.get("errors")
        if errors:
            messages = [err.get("message", "unknown error") for err in errors]
            logger.error("GraphQL %s errors: %s", operation, "; ".join(messages))
            raise RecordStoreError(
                context={"operation": operation, "errors": messages}
            )

        data = body.get("data")
        if data is None:
            raise RecordStoreError(
                context={"operation": operation, "error": "response carried no data"}
            )
        return data

    async def list(self) -> List[Note]:
        data = await self.execute(LIST_NOTES, operation="listNotes")
        connection = data.get("listNotes") or {}
        items = connection.get("items") or []
        # Deleted records can surface as null items in list connections
        notes = [Note.model_validate(item) for item in items if item]
        logger.debug("listNotes returned %d records", len(notes))
        return notes

    async def create(self, note_input: NoteCreateInput) -> Note:
        data = await self.execute(
            CREATE_NOTE,
            variables={"input": note_input.model_dump()},
            operation="createNote",
        )
        created = data.get("createNote")
        if not created:
            raise RecordStoreError(context={"operation": "createNote", "error": "no record returned"})
        note = Note.model_validate(created)
        logger.info("Created note %s (%s)", note.id, note.name)
        return note

    async def delete(self, note_id: str) -> None:
        await self.execute(
            DELETE_NOTE,
            variables={"input": {"id": note_id}},
            operation="deleteNote",
        )
        logger.info("Deleted note %s", note_id)

    async def health_check(self) -> bool:
        try:
            await self.execute("query Ping { __typename }", operation="ping")
        except RecordStoreError:
            return False
        return True

    async def close(self) -> None:
        await self._client.aclose()
