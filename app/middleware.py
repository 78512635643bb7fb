"""HTTP middleware: JSON content-type enforcement and request logging."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Methods whose body must be JSON when a Content-Type is sent at all.
JSON_BODY_METHODS = frozenset({"POST", "PUT"})


class JSONContentTypeMiddleware(BaseHTTPMiddleware):
    """Reject POST/PUT requests that declare a non-JSON Content-Type with 400."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method in JSON_BODY_METHODS:
            content_type = request.headers.get("content-type", "")
            media_type = content_type.split(";", 1)[0].strip().lower()
            if media_type and media_type != "application/json":
                return JSONResponse(
                    status_code=400,
                    content={"error": "Content-Type must be application/json"},
                )
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and latency of every request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        latency_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            "%s %s -> %s (%sms)",
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
        )
        return response
