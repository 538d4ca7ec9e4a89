"""
Request logging middleware: correlation ids for requests and staging sessions.

The ids are bound with `structlog.contextvars`, so any log line emitted while
the request is handled, from routers or services, carries them.
"""
import logging
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

SESSION_PATH_MARKER = "/preview/sessions/"

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return structlog.contextvars.get_contextvars().get("request_id", "")


def get_session_id() -> str:
    """Get the current staging session ID from context."""
    return structlog.contextvars.get_contextvars().get("session_id", "")


def session_id_from_path(path: str) -> str:
    """Staging session id in /api/preview/sessions/{id}/..., or ''."""
    if SESSION_PATH_MARKER not in path:
        return ""
    return path.split(SESSION_PATH_MARKER, 1)[1].split("/")[0]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that:
    1. Assigns a short request ID to each request
    2. Binds it, and the staging session ID from preview URLs, to the log context
    3. Logs request start/end with timing and echoes both IDs as headers
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        path = request.url.path
        session_id = session_id_from_path(path)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        if session_id:
            structlog.contextvars.bind_contextvars(session_id=session_id)

        start_time = time.time()
        logger.info(f"→ {request.method} {path}")

        try:
            try:
                response = await call_next(request)
            except Exception as e:
                duration_ms = (time.time() - start_time) * 1000
                logger.error(f"✗ Error: {str(e)[:100]} ({duration_ms:.0f}ms)", exc_info=True)
                raise

            duration_ms = (time.time() - start_time) * 1000
            log_level = logging.INFO if response.status_code < 400 else logging.WARNING
            logger.log(log_level, f"← {response.status_code} ({duration_ms:.0f}ms)")
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["X-Request-ID"] = request_id
        if session_id:
            response.headers["X-Staging-Session"] = session_id
        return response
