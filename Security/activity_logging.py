"""
ACTIVITY TRACKING
=================
Structured request logging for monitoring.

FLOW:
- Middleware logs each request with its request id and redacted query.
- Added to the FastAPI middleware stack in app/main.py.

WHY:
- Redirect round trips show up as a POST followed by a GET carrying the
  error code; both need to be traceable without leaking the nonce.

HOW:
- Writes structured request logs to logs/security.log.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from starlette.middleware.base import BaseHTTPMiddleware
from Security.secrets_redaction import redact
from Security.metrics import increment_feature_event
from Security.security_config import REDIRECT_ERROR_SETTINGS


def get_security_logger(name: str = "security.activity", filename: str = "security.log") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    log_dir = os.getenv("SECURITY_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(os.path.join(log_dir, filename), maxBytes=2_000_000, backupCount=3)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handler.setFormatter(formatter)

    logger.setLevel(REDIRECT_ERROR_SETTINGS["LOG_LEVEL"])
    logger.addHandler(handler)
    return logger


class ActivityLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        self.logger = get_security_logger()

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        increment_feature_event("activity-logging")
        request_id = getattr(request.state, "request_id", None)
        query = request.url.query
        if query:
            query = redact(query)
        location = response.headers.get("location")
        if location:
            location = redact(location)
        self.logger.info(
            "method=%s path=%s query=%s status=%s location=%s request_id=%s ip=%s",
            request.method,
            request.url.path,
            query or "",
            response.status_code,
            location or "",
            request_id or "",
            request.client.host if request.client else "unknown",
        )
        return response
