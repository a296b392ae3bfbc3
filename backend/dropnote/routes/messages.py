"""
Dropnote Backend — Message Handlers
=====================================

What:  Create, show and delete disposable messages.
How:   Each handler pulls what it needs off the request (raw body, token,
       client host) and hands it to the MessageBackend.
Who:   Bound to POST /, GET /{token}/ and DELETE /{token}/ in
       dropnote.routes.table.
"""

import html
import logging
from typing import Optional

from fastapi.responses import HTMLResponse, JSONResponse
from starlette.requests import Request
from starlette.responses import Response

from dropnote.exceptions import BackendUnavailableError
from dropnote.routes.pages import not_found, render_page
from dropnote.schemas.message import DeleteMessageResponse, NewMessageResponse
from dropnote.services.message_backend import MessageBackend

logger = logging.getLogger(__name__)


def client_host(request: Request) -> str:
    """Remote address of the requester; "unknown" under test transports."""
    return request.client.host if request.client else "unknown"


class MessageActions:
    """
    Message handlers bound to one backend.

    With no backend every handler raises BackendUnavailableError, which the
    application turns into a 503.
    """

    def __init__(self, backend: Optional[MessageBackend] = None):
        self.backend = backend

    def _require_backend(self) -> MessageBackend:
        if self.backend is None:
            raise BackendUnavailableError()
        return self.backend

    async def new_message(self, request: Request) -> Response:
        backend = self._require_backend()
        body = await request.body()
        token = await backend.create_message(
            body, request.headers.get("content-type", "")
        )
        logger.info("Created message (%d bytes)", len(body))
        return JSONResponse(NewMessageResponse(token=token).model_dump())

    async def show_message(self, request: Request) -> Response:
        """Renders the message, or the not-found page if the backend has none."""
        backend = self._require_backend()
        token = request.path_params["token"]
        text = await backend.fetch_message(token, client_host(request))
        if text is None:
            return await not_found(request)

        body = (
            f"<article class=\"message\"><pre>{html.escape(text)}</pre></article>\n"
            f"<button type=\"button\" data-delete=\"/{html.escape(token)}/\">"
            "Destroy now</button>"
        )
        return HTMLResponse(
            render_page("Dropnote", body),
            headers={"Cache-Control": "no-store"},
        )

    async def delete_message(self, request: Request) -> Response:
        backend = self._require_backend()
        token = request.path_params["token"]
        deleted = await backend.delete_message(token, client_host(request))
        if not deleted:
            logger.info("Delete requested for unknown message")
        return JSONResponse(DeleteMessageResponse(success=deleted).model_dump())
