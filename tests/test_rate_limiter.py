import asyncio

from fastapi import FastAPI
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from owm_forecast.middleware.rate_limit import RateLimitMiddleware
from owm_forecast.rate_limiter import RateLimiter


class FakePipeline:
    def __init__(self, redis):
        self.redis = redis

    def zadd(self, key, mapping):
        self.redis.keys.append(key)

    def zremrangebyscore(self, key, low, high):
        self.redis.window_starts.append(high)

    def zcard(self, key):
        pass

    def expire(self, key, seconds):
        self.redis.expiries.append(seconds)

    async def execute(self):
        if self.redis.error:
            raise self.redis.error
        return [1, 0, self.redis.count, True]


class FakeRedis:
    def __init__(self, count=1, error=None):
        self.count = count
        self.error = error
        self.keys = []
        self.window_starts = []
        self.expiries = []

    def pipeline(self):
        return FakePipeline(self)


def test_allowed_under_limit():
    redis = FakeRedis(count=60)
    limiter = RateLimiter(redis, max_requests=60, window_seconds=60, clock=lambda: 1000.0)

    assert asyncio.run(limiter.is_allowed()) == (True, 0)
    assert redis.keys[0].endswith(":global")
    assert redis.window_starts == [940.0 * 1_000_000]
    assert redis.expiries == [120]


def test_denied_over_limit():
    limiter = RateLimiter(FakeRedis(count=61), max_requests=60, window_seconds=60)

    assert asyncio.run(limiter.is_allowed()) == (False, 1)


def test_retry_after_spreads_over_window():
    limiter = RateLimiter(FakeRedis(count=11), max_requests=10, window_seconds=60)

    assert asyncio.run(limiter.is_allowed("upstream")) == (False, 6)


def test_fails_open_without_redis():
    limiter = RateLimiter(FakeRedis(error=RedisConnectionError("down")), max_requests=1)

    assert asyncio.run(limiter.is_allowed()) == (True, 0)


class FakeLimiter:
    max_requests = 60
    window_seconds = 60.0

    def __init__(self, allowed):
        self.allowed = allowed
        self.calls = 0

    async def is_allowed(self, scope="global"):
        self.calls += 1
        return (True, 0) if self.allowed else (False, 7)


def make_app(limiter, enabled=True):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, rate_limiter=limiter, enabled=enabled)

    @app.get("/weather/")
    async def weather():
        return {"ok": True}

    @app.get("/weather/health")
    async def health():
        return {"status": "healthy"}

    return app


def test_middleware_rejects_when_limited():
    client = TestClient(make_app(FakeLimiter(allowed=False)))

    response = client.get("/weather/")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "7"
    assert response.json()["retry_after"] == 7


def test_middleware_adds_limit_headers():
    client = TestClient(make_app(FakeLimiter(allowed=True)))

    response = client.get("/weather/")

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "60"
    assert response.headers["X-RateLimit-Window"] == "60"


def test_health_bypasses_limit():
    limiter = FakeLimiter(allowed=False)
    client = TestClient(make_app(limiter))

    assert client.get("/weather/health").status_code == 200
    assert limiter.calls == 0


def test_disabled_middleware_never_checks():
    limiter = FakeLimiter(allowed=False)
    client = TestClient(make_app(limiter, enabled=False))

    assert client.get("/weather/").status_code == 200
    assert limiter.calls == 0
