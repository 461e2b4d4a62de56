"""Feed generation pipeline: content source -> normalizer -> builder -> cache."""

import logging
from datetime import datetime, timezone

from craftfeed.config import Settings
from craftfeed.content.source import ContentSource

from .builder import NotFoundError, build_category_feed, build_feed
from .cache import (
    CATEGORY_FEED_TAGS,
    FEED_TAGS,
    SITE_FEED_KEY,
    FeedCache,
    category_feed_key,
    category_tag,
)
from .models import ChannelMeta, FeedAuthor, FeedDocument, FeedEntry, FeedLinks
from .normalizer import normalize

logger = logging.getLogger(__name__)


def site_channel_meta(settings: Settings, page_size: int | None = None) -> ChannelMeta:
    """Channel metadata for the site-wide feeds, built from settings."""
    site_url = settings.site_url.rstrip("/")
    return ChannelMeta(
        title=settings.site_title,
        description=settings.site_description,
        site_url=site_url,
        feed_id=site_url,
        feed_links=FeedLinks(
            rss=f"{site_url}/rss.xml",
            atom=f"{site_url}/atom.xml",
            json_feed=f"{site_url}/feed.json",
        ),
        language=settings.site_language,
        author=FeedAuthor(
            name=settings.author_name, email=settings.author_email, profile_url=site_url
        ),
        hub_url=settings.websub_hub_url if settings.websub_enabled else None,
        image=f"{site_url}/images/logo.png",
        favicon=f"{site_url}/favicon.ico",
        copyright=(
            f"All rights reserved {datetime.now(timezone.utc).year}, {settings.site_title}"
        ),
        page_size=page_size or settings.feed_page_size,
        categories_url=f"{site_url}/categories",
    )


class FeedService:
    """Builds and caches feed documents from the current CMS snapshot.

    Each call works on a fresh snapshot and shares no mutable state with
    other requests apart from the injected cache.
    """

    def __init__(self, source: ContentSource, cache: FeedCache, settings: Settings):
        self.source = source
        self.cache = cache
        self.settings = settings

    async def load_entries(self) -> list[FeedEntry]:
        """Fetch all published posts and normalize them.

        A post that cannot be normalized is logged and left out; it never
        aborts the whole feed.

        Raises:
            ContentSourceError: If the content source is unavailable
        """
        posts = await self.source.fetch_all_published_posts()
        entries = []
        for post in posts:
            try:
                entries.append(
                    normalize(post, self.settings.site_url, self.settings.author_email)
                )
            except Exception:
                logger.exception(
                    f"Skipping post {post.id} ({post.slug}): normalization failed",
                    extra={"post_id": post.id},
                )
                continue
        return entries

    async def get_site_feed(self) -> FeedDocument:
        """Return the site-wide feed document, from cache when possible."""
        if (cached := await self.cache.get(SITE_FEED_KEY)) is not None:
            return cached

        logger.info("Generating fresh site feed")
        doc = build_feed(await self.load_entries(), site_channel_meta(self.settings))
        await self.cache.set(
            SITE_FEED_KEY, doc, self.settings.feed_cache_ttl_seconds, FEED_TAGS
        )
        return doc

    async def get_category_feed(self, slug: str) -> FeedDocument:
        """
        Return the feed for one category, from cache when possible.

        Raises:
            NotFoundError: If no category has this slug
            ContentSourceError: If the content source is unavailable
        """
        key = category_feed_key(slug)
        if (cached := await self.cache.get(key)) is not None:
            return cached

        category = await self.source.fetch_category_by_slug(slug)
        if category is None:
            raise NotFoundError(f"Category not found: {slug}")

        logger.info(f"Generating fresh feed for category: {slug}")
        meta = site_channel_meta(self.settings, self.settings.category_page_size)
        doc = build_category_feed(slug, await self.load_entries(), meta, [category])
        await self.cache.set(
            key,
            doc,
            self.settings.feed_cache_ttl_seconds,
            (*CATEGORY_FEED_TAGS, category_tag(slug)),
        )
        return doc
