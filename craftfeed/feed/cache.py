"""Feed document caching with TTL expiry and tag-based invalidation."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Iterable

from redis.asyncio import Redis

from .models import FeedDocument

logger = logging.getLogger(__name__)

SITE_FEED_KEY = "feed:site"
FEED_TAGS = ("feed", "posts")
CATEGORY_FEED_TAGS = ("feed", "posts", "category")


def category_feed_key(slug: str) -> str:
    """Cache key for a category feed."""
    return f"feed:category:{slug}"


def category_tag(slug: str) -> str:
    """Tag carried only by the feed of one category."""
    return f"category:{slug}"


class FeedCache(ABC):
    """Cache of built feed documents keyed by feed identity."""

    @abstractmethod
    async def get(self, key: str) -> FeedDocument | None:
        """
        Return the cached document, or None on a miss or after expiry.

        Args:
            key: Feed identity, see SITE_FEED_KEY and category_feed_key()
        """
        pass

    @abstractmethod
    async def set(
        self, key: str, value: FeedDocument, ttl: int, tags: Iterable[str] = ()
    ) -> None:
        """
        Store a document for ``ttl`` seconds under the given tags.

        Args:
            key: Feed identity
            value: Built feed document
            ttl: Time to live in seconds
            tags: Tags that invalidate() can later drop this entry by
        """
        pass

    @abstractmethod
    async def invalidate(self, tag: str) -> int:
        """
        Drop every entry stored under ``tag``, regardless of remaining TTL.

        Returns:
            Number of entries removed
        """
        pass


class InMemoryFeedCache(FeedCache):
    """Process-local cache for a single worker and for tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, FeedDocument, frozenset[str]]] = {}

    async def get(self, key: str) -> FeedDocument | None:
        """Return an unexpired document."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value, _ = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(
        self, key: str, value: FeedDocument, ttl: int, tags: Iterable[str] = ()
    ) -> None:
        """Store a document with its expiry time and tags."""
        self._entries[key] = (self._clock() + ttl, value, frozenset(tags))

    async def invalidate(self, tag: str) -> int:
        """Remove all entries carrying the tag."""
        keys = [k for k, (_, _, tags) in self._entries.items() if tag in tags]
        for key in keys:
            del self._entries[key]
        return len(keys)


class RedisFeedCache(FeedCache):
    """Redis-backed cache shared by all workers.

    Documents are stored as JSON with SETEX; each tag is a Redis set holding
    the keys stored under it.
    """

    def __init__(self, redis: Redis, prefix: str = "craft:"):
        self.redis = redis
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _tag_key(self, tag: str) -> str:
        return f"{self.prefix}tag:{tag}"

    async def get(self, key: str) -> FeedDocument | None:
        """Fetch and decode a cached document."""
        if cached_data := await self.redis.get(self._key(key)):
            return FeedDocument.model_validate_json(cached_data)
        return None

    async def set(
        self, key: str, value: FeedDocument, ttl: int, tags: Iterable[str] = ()
    ) -> None:
        """Store a document and register its key under each tag."""
        full_key = self._key(key)
        await self.redis.setex(full_key, ttl, value.model_dump_json())
        for tag in tags:
            await self.redis.sadd(self._tag_key(tag), full_key)

    async def invalidate(self, tag: str) -> int:
        """Delete every key registered under the tag, then the tag itself."""
        tag_key = self._tag_key(tag)
        keys = await self.redis.smembers(tag_key)
        if keys:
            await self.redis.delete(*keys)
        await self.redis.delete(tag_key)
        logger.info(f"Invalidated {len(keys)} cached feed(s) for tag '{tag}'")
        return len(keys)
