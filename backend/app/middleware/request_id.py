"""Request ID middleware: one UUID per request, bound to the structlog context."""

import uuid
from contextvars import ContextVar

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Reuse an incoming X-Request-ID or mint one; echo it on the response."""

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_var.set(rid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=rid)

        client_id = request.headers.get("X-Client-ID")
        if client_id:
            structlog.contextvars.bind_contextvars(client_id=client_id[:128])

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
