"""Multi-service sample app: a visit counter backed by Redis.

Used by the orchestration walkthrough to show two containers (web + redis)
that need service discovery, restarts and scaling.
"""

from __future__ import annotations

import socket
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import redis.asyncio as redis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from aksdemo.config.settings import VisitsAppSettings, get_settings
from aksdemo.observability.logging import get_logger
from aksdemo.version import __version__


log = get_logger(__name__)

VISITS_KEY = "visits"


def _now() -> str:
    return datetime.now(UTC).isoformat()


def create_app(
    redis_client: Any | None = None,
    settings: VisitsAppSettings | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        redis_client: Async Redis client; created from settings when omitted.
        settings: Redis connection settings; the cached application
            settings when omitted.
    """
    settings = settings or get_settings().visits
    owns_client = redis_client is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.redis is None:
            app.state.redis = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                decode_responses=True,
            )
            log.info("redis_client_created", host=settings.redis_host, port=settings.redis_port)
        yield
        if owns_client and app.state.redis is not None:
            await app.state.redis.aclose()

    app = FastAPI(
        title="Multi-Service App",
        description="Visit counter used by the container orchestration walkthrough",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.redis = redis_client

    @app.get("/")
    async def index(request: Request) -> JSONResponse:
        try:
            visits = await request.app.state.redis.incr(VISITS_KEY)
        except RedisError as e:
            log.warning("redis_unavailable", error=str(e))
            return JSONResponse(status_code=500, content={"error": str(e)})

        return JSONResponse(
            content={
                "message": "Hello from Multi-Service App!",
                "visits": int(visits),
                "timestamp": _now(),
                "hostname": socket.gethostname(),
            }
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "timestamp": _now()}

    return app


def serve(
    host: str = "0.0.0.0",  # noqa: S104
    port: int | None = None,
    settings: VisitsAppSettings | None = None,
) -> int:
    """Run the app with uvicorn until interrupted."""
    import uvicorn

    settings = settings or get_settings().visits
    listen_port = port or settings.port
    log.info("visits_app_starting", host=host, port=listen_port)
    uvicorn.run(create_app(settings=settings), host=host, port=listen_port, log_level="info")
    return 0


__all__ = ["VISITS_KEY", "create_app", "serve"]
