from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# HTTP requests carry X-Request-ID; sockets use their connection id
correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="-")

HEADER = "X-Request-ID"


def bind_correlation_id(value: str | None = None) -> Token[str]:
    """Set the id logged for the current task, generating one if absent."""
    return correlation_id_ctx.set(value or uuid.uuid4().hex)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        token = bind_correlation_id(request.headers.get(HEADER))
        try:
            response = await call_next(request)
            response.headers[HEADER] = correlation_id_ctx.get()
            return response
        finally:
            correlation_id_ctx.reset(token)
