from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .app_context import templates

logger = logging.getLogger("security.errors")


def _is_html_page_request(request: Request) -> bool:
    accept = (request.headers.get("accept") or "").lower()
    return "text/html" in accept


def _error_title(status_code: int) -> str:
    if status_code == 400:
        return "Bad request"
    if status_code == 404:
        return "Page not found"
    if status_code == 405:
        return "Method not allowed"
    if status_code == 422:
        return "Invalid form data"
    if status_code >= 500:
        return "Internal server error"
    return "Request failed"


def _error_reason(status_code: int) -> str:
    if status_code == 404:
        return "The URL does not match any existing page."
    if status_code == 405:
        return "This page exists, but it does not allow this HTTP method."
    if status_code == 422:
        return "The submitted form data is invalid."
    if status_code >= 500:
        return "The server hit an unexpected condition while processing your request."
    return "The request could not be completed."


def _render_error_page(request: Request, status_code: int):
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "status_code": status_code,
            "error_title": _error_title(status_code),
            "error_reason": _error_reason(status_code),
        },
        status_code=status_code,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        if _is_html_page_request(request):
            return _render_error_page(request, 422)
        return await request_validation_exception_handler(request, exc)

    @app.exception_handler(HTTPException)
    async def fastapi_http_exception_handler(request: Request, exc: HTTPException):
        if _is_html_page_request(request):
            return _render_error_page(request, exc.status_code)
        return await http_exception_handler(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        if _is_html_page_request(request):
            return _render_error_page(request, exc.status_code)
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error path=%s", request.url.path)
        if _is_html_page_request(request):
            return _render_error_page(request, 500)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
