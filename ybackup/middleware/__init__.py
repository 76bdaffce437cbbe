"""HTTP middleware — API key authentication and request IDs.

When YBACKUP_API_KEY is set, all /api/* endpoints require the header:
  Authorization: Bearer <api_key>

Health and docs endpoints are exempt.
"""

from __future__ import annotations

import logging
import secrets
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from ..config import settings

logger = logging.getLogger(__name__)

_PUBLIC_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})

REQUEST_ID_HEADER = "X-Request-ID"


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Require ``Authorization: Bearer <key>`` on ``/api/*`` when a key is configured."""

    def __init__(self, app, api_key: str | None = None) -> None:  # noqa: ANN001
        super().__init__(app)
        self._api_key = api_key if api_key is not None else settings.api_key

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not self._api_key or path in _PUBLIC_PATHS or not path.startswith("/api"):
            return await call_next(request)

        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() == "bearer" and secrets.compare_digest(
            token.strip().encode(), self._api_key.encode()
        ):
            return await call_next(request)

        logger.warning("Rejected %s %s: invalid or missing API key", request.method, path)
        return JSONResponse(
            status_code=401,
            content={"detail": "Invalid or missing API key"},
            headers={"WWW-Authenticate": "Bearer"},
        )


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Echo the caller's X-Request-ID, or generate one, on every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        logger.debug("%s %s request_id=%s", request.method, request.url.path, request_id)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
