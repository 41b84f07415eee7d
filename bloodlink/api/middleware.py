"""
Request timing and logging middleware
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log request timing and user id for performance monitoring
    """
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        user_id = request.headers.get('X-User-ID', 'anonymous')

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "[TIMING] %s %s | user_id=%s | duration=%.2fms | status=%s",
            request.method, request.url.path, user_id, duration_ms, response.status_code,
        )

        return response
