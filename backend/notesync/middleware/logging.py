"""
NoteSync Backend — Request Logging Middleware
===============================================

What:  One access log line per HTTP request, labelled with the notes-page
       action it corresponds to (list, create, delete, sign-out, image).
How:   Times the downstream call; the level follows the status class.

Never logged: request bodies (note text, image bytes), Authorization headers
and query strings. Locator query strings are bearer credentials for images.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notesync.middleware.request_id import request_id_var

logger = logging.getLogger("notesync.access")

QUIET_PATHS = frozenset({"/health", "/docs", "/openapi.json"})


def describe_action(method: str, path: str) -> Optional[str]:
    """Map a request to the UI action it performs, or None for other routes."""
    if path == "/api/notes":
        return {"GET": "list", "POST": "create"}.get(method)
    if path == "/api/notes/view":
        return "view"
    if path.startswith("/api/notes/") and method == "DELETE":
        return "delete"
    if path.startswith("/api/files/"):
        return "image"
    if path == "/api/session/sign-out":
        return "sign-out"
    return None


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for the notes API; health and docs requests are not logged."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        action = describe_action(request.method, path) or "-"
        rid = request_id_var.get("")
        logger.log(
            level_for_status(response.status_code),
            "[%s] %s %s %s -> %d (%.1fms)",
            rid,
            action,
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            extra={
                "request_id": rid,
                "action": action,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
