"""Request logging middleware"""

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("appconfig.api")

CORRELATION_HEADER = "X-Correlation-ID"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with a correlation ID.

    An incoming ``X-Correlation-ID`` header is reused so calls can be traced
    across services; otherwise a new one is generated. The ID is echoed back
    on the response.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {e}",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": self._elapsed_ms(start_time),
                },
                exc_info=True,
            )
            raise

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} - {response.status_code}",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": self._elapsed_ms(start_time),
            },
        )

        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)
