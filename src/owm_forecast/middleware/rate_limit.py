"""Rate limiting middleware."""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from owm_forecast.config import RATE_LIMIT_ENABLED
from owm_forecast.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Keeps forecast lookups within the upstream API quota.

    Only forecast requests count; the page, static assets, docs and
    health/info endpoints never touch the upstream API.
    """

    LIMITED_PREFIX = "/weather"
    BYPASS_PATHS = {
        "/weather/health",
        "/weather/info",
    }

    def __init__(self, app, rate_limiter: Optional[RateLimiter] = None, enabled: bool = RATE_LIMIT_ENABLED):
        """Initialize rate limit middleware.

        Args:
            app: FastAPI application instance
            rate_limiter: Limiter to use (creates default if None)
            enabled: Whether limiting is active
        """
        super().__init__(app)
        self.rate_limiter = rate_limiter or RateLimiter()
        self.enabled = enabled
        logger.info(
            f"Rate limit enabled: {self.enabled}, limit: {self.rate_limiter.max_requests} "
            f"req/{self.rate_limiter.window_seconds:g}s"
        )

    def is_limited(self, path: str) -> bool:
        return path.startswith(self.LIMITED_PREFIX) and path.rstrip("/") not in self.BYPASS_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request through rate limiting check.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/endpoint in chain

        Returns:
            HTTP response (either rate limit error or continued response)
        """
        if not self.enabled or not self.is_limited(request.url.path):
            return await call_next(request)

        is_allowed, retry_after = await self.rate_limiter.is_allowed()

        if not is_allowed:
            request_host = request.client.host if request.client else "unknown"
            logger.warning(f"Rate limit exceeded for {request_host} accessing {request.method} {request.url.path}")

            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded. Please try again later.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self.rate_limiter.max_requests)
        response.headers["X-RateLimit-Window"] = f"{self.rate_limiter.window_seconds:g}"

        return response
