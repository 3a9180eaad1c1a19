"""Main FastAPI application for the forecast service."""

import logging
import os
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from fastapi_cache import FastAPICache
from fastapi_cache.backends.redis import RedisBackend

from owm_forecast.api.endpoints import router as weather_router
from owm_forecast.config import HOST, PORT, DEBUG, LOG_LEVEL, REDIS_URL, CACHE_PREFIX, USE_MOCK_DATA
from owm_forecast.logging_config import configure_logging
from owm_forecast.middleware.rate_limit import RateLimitMiddleware

configure_logging()
logger = logging.getLogger(__name__)

STATIC_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    redis_client = None
    try:
        logger.info(f"Connecting to Redis at {REDIS_URL}")
        redis_client = redis.from_url(REDIS_URL)
        FastAPICache.init(RedisBackend(redis_client), prefix=CACHE_PREFIX)
        logger.info(f"Cache backend active: {FastAPICache.get_backend()}")

        source = "fixture data" if USE_MOCK_DATA else "OpenWeatherMap API"
        logger.info(f"Starting OpenWeatherMap Forecast Service using {source}")
        yield
    except Exception as e:
        logger.error(f"Startup error: {e}")
        logger.error(traceback.format_exc())
        raise
    finally:
        logger.info("Shutting down OpenWeatherMap Forecast Service")
        if redis_client is not None:
            await redis_client.aclose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="OpenWeatherMap Forecast Service",
        description="Current conditions and 5-day forecasts by city name or device location",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RateLimitMiddleware)

    app.include_router(weather_router)
    app.mount("/static", StaticFiles(directory=STATIC_PATH), name="static")

    @app.get("/", tags=["root"])
    async def root():
        """Serve the web page."""
        return FileResponse(os.path.join(STATIC_PATH, "index.html"))

    @app.get("/api", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint.

        Returns:
            Basic service information
        """
        return {
            "message": "OpenWeatherMap Forecast Service",
            "docs": "/docs",
            "redoc": "/redoc",
            "weather": "/weather",
            "health": "/weather/health"
        }

    return app


app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "owm_forecast.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level=LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
