"""
REQUEST CONTEXT
===============
Expose the current request to helpers that run outside route signatures.
"""

# FLOW:
# - Middleware publishes the request in a ContextVar for the call duration.
# - current_query_params() reads it from templates and helpers.
# - Every request gets an x-request-id for log correlation.
# HOW:
# - contextvars keeps concurrent requests isolated.

from __future__ import annotations

import contextvars
import uuid
from typing import Mapping

from starlette.datastructures import QueryParams
from starlette.middleware.base import BaseHTTPMiddleware


_current_request: contextvars.ContextVar = contextvars.ContextVar("current_request", default=None)


def set_current_request(request):
    return _current_request.set(request)


def clear_current_request(token) -> None:
    _current_request.reset(token)


def current_query_params() -> Mapping[str, str]:
    request = _current_request.get()
    if request is None:
        return QueryParams()
    return request.query_params


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = set_current_request(request)
        try:
            response = await call_next(request)
        finally:
            clear_current_request(token)
        response.headers["x-request-id"] = request_id
        return response
