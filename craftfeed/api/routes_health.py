"""Liveness and readiness endpoints for the feed service."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError

from craftfeed.config import get_settings
from craftfeed.content.source import ContentSource, ContentSourceError

from .dependencies import get_content_source, get_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def health_check():
    """Liveness: the process is up and serving requests."""
    return {"ok": True}


@router.get("/readyz")
async def readiness_check(
    source: ContentSource = Depends(get_content_source),
    redis: Redis = Depends(get_redis),
):
    """
    Readiness: feeds can actually be generated.

    Checks that the content snapshot is readable and, when the Redis cache
    backend is configured, that Redis answers a ping.

    Returns:
        200 with ``{"ok": true, "checks": {...}}`` when every check passes,
        503 with the failing checks marked ``false`` otherwise
    """
    checks = {}

    try:
        await source.check()
        checks["content"] = True
    except ContentSourceError as exc:
        logger.warning(f"Readiness check failed for content source: {exc}")
        checks["content"] = False

    if get_settings().cache_backend == "redis":
        try:
            checks["redis"] = bool(await redis.ping())
        except (RedisError, OSError) as exc:
            logger.warning(f"Readiness check failed for Redis: {exc}")
            checks["redis"] = False

    ok = all(checks.values())
    return JSONResponse(
        status_code=200 if ok else 503, content={"ok": ok, "checks": checks}
    )
