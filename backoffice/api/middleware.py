# =============================================================================
# BACKOFFICE SERVICE - HTTP MIDDLEWARE
# =============================================================================
# File: backoffice/api/middleware.py
# Description: Request logging middleware
# =============================================================================

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from backoffice.logger import fields


logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    LOGGING MIDDLEWARE                                    │
    │  Logs request/response details for monitoring and debugging             │
    └─────────────────────────────────────────────────────────────────────────┘
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """Log request and response details."""
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        client_ip = self._get_client_ip(request)

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(
                "Request failed",
                extra=fields(
                    method=method,
                    path=path,
                    duration_ms=duration_ms,
                    ip=client_ip,
                    error=str(e),
                ),
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            "Request handled",
            extra=fields(
                method=method,
                path=path,
                status=response.status_code,
                duration_ms=duration_ms,
                ip=client_ip,
            ),
        )
        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP from request."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

        return request.client.host if request.client else "unknown"
