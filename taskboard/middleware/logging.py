"""
Request Logging Middleware

Logs every API request with its status and duration, and tags the
response with a request id for correlation.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from taskboard.core.logging import get_logger

logger = get_logger(__name__)

SKIPPED_PATHS = ["/", "/health", "/docs", "/openapi.json"]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API access.

    Captures:
    - Request details (method, path, client IP)
    - Response status
    - Duration, with a warning above `slow_request_ms`
    """

    def __init__(self, app: ASGIApp, enabled: bool = True, slow_request_ms: int = 1000):
        """
        Initialize the middleware.

        Args:
            app: FastAPI application
            enabled: Whether logging is enabled
            slow_request_ms: Threshold above which a request is logged as slow
        """
        super().__init__(app)
        self.enabled = enabled
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        if not self.enabled or request.url.path in SKIPPED_PATHS:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start_time) * 1000)

        message = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration_ms}ms [ip={self._get_client_ip(request)} request_id={request_id}]"
        )
        if duration_ms >= self.slow_request_ms:
            logger.warning(f"Slow request: {message}")
        elif response.status_code >= 500:
            logger.error(message)
        else:
            logger.info(message)

        response.headers["X-Request-ID"] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """
        Extract client IP address from request.

        Checks X-Forwarded-For first (proxied requests), then the direct client.
        """
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
