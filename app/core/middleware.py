from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import set_event_id


class EventContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        """
        Sets event_id into contextvars for the lifetime of the request,
        taken from the X-Event-Id header when the caller sends one.
        """
        event_id = request.headers.get("X-Event-Id")

        try:
            if event_id:
                set_event_id(str(event_id))
            response = await call_next(request)
            return response
        finally:
            set_event_id(None)
