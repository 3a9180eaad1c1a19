"""Sliding-window rate limiting for upstream API calls."""

import logging
import math
import time
from typing import Callable, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from owm_forecast.config import (
    REDIS_URL,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    RATE_LIMIT_REDIS_KEY_PREFIX
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Rate limiter using a Redis sorted set as a sliding window.

    Every request under the same scope shares one budget. Requests are
    allowed if Redis is unavailable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Requests allowed per window
            window_seconds: Length of the sliding window
            clock: Wall-clock time source
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock

    def key_for(self, scope: str) -> str:
        return f"{RATE_LIMIT_REDIS_KEY_PREFIX}:{scope}"

    async def is_allowed(self, scope: str = "global") -> Tuple[bool, int]:
        """Record a request and check it against the limit.

        Args:
            scope: Budget the request counts against

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        key = self.key_for(scope)
        try:
            now = self.clock()
            member = int(now * 1_000_000)
            window_start = (now - self.window_seconds) * 1_000_000

            pipe = self.redis_client.pipeline()
            pipe.zadd(key, {str(member): member})
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.expire(key, math.ceil(self.window_seconds * 2))
            _, _, request_count, _ = await pipe.execute()

            if request_count > self.max_requests:
                retry_after = max(1, math.ceil(self.window_seconds / self.max_requests))
                logger.debug(f"Rate limited {key}: count={request_count}, max={self.max_requests}")
                return False, retry_after

            logger.debug(f"Not rate limited {key}: count={request_count}, max={self.max_requests}")
            return True, 0

        except RedisError as e:
            # Fail open
            logger.error(f"Rate limiter error: {e}")
            return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
