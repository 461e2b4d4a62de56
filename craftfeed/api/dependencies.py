"""FastAPI dependencies for API routers."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from redis.asyncio import Redis

from craftfeed.config import get_settings
from craftfeed.content.source import ContentSource, JsonFileContentSource
from craftfeed.feed.cache import FeedCache, InMemoryFeedCache, RedisFeedCache
from craftfeed.feed.service import FeedService
from craftfeed.websub.notifier import WebSubNotifier

_redis_client: Redis | None = None
_memory_cache: InMemoryFeedCache | None = None


def _get_redis_client() -> Redis:
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        _redis_client = Redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=False,
        )
    return _redis_client


async def get_redis() -> AsyncGenerator[Redis, None]:
    """Dependency for FastAPI routes to get an async Redis connection.

    Yields:
        Async Redis client instance
    """
    yield _get_redis_client()


async def get_feed_cache() -> FeedCache:
    """Feed cache for the configured backend (process-wide singleton for memory)."""
    global _memory_cache

    settings = get_settings()
    if settings.cache_backend == "redis":
        return RedisFeedCache(_get_redis_client())

    if _memory_cache is None:
        _memory_cache = InMemoryFeedCache()
    return _memory_cache


async def get_content_source() -> ContentSource:
    """Content adapter reading the exported CMS snapshot."""
    return JsonFileContentSource(get_settings().content_path)


async def get_feed_service(
    source: ContentSource = Depends(get_content_source),
    cache: FeedCache = Depends(get_feed_cache),
) -> FeedService:
    """Feed pipeline wired to the configured source and cache."""
    return FeedService(source, cache, get_settings())


async def get_notifier() -> WebSubNotifier:
    """WebSub notifier for the configured hub."""
    settings = get_settings()
    return WebSubNotifier(
        hub_url=settings.websub_hub_url, timeout=settings.websub_timeout_seconds
    )
