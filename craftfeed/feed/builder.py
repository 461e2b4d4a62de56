"""Assemble normalized entries into ordered, capped feed documents."""

from datetime import datetime, timezone
from typing import Iterable, Sequence

from craftfeed.content.models import CategoryRecord

from .models import ChannelMeta, FeedCategory, FeedDocument, FeedEntry, FeedLinks


class NotFoundError(Exception):
    """Raised when a feed is requested for a category that does not exist."""


def sort_entries(entries: Iterable[FeedEntry]) -> list[FeedEntry]:
    """Order entries newest first, breaking ties by id ascending.

    The order must be fully deterministic: the ETag is a hash of the
    serialized feed, so any reordering would invalidate client caches.
    """
    return sorted(entries, key=lambda e: (-e.published_at.timestamp(), e.id))


def _last_updated(entries: Sequence[FeedEntry], meta: ChannelMeta) -> datetime:
    stamps = [e.updated_at or e.published_at for e in entries]
    if stamps:
        return max(stamps)
    if meta.updated_at is not None:
        return meta.updated_at
    return datetime.now(timezone.utc).replace(microsecond=0)


def _document(
    entries: Sequence[FeedEntry],
    meta: ChannelMeta,
    category: FeedCategory | None = None,
) -> FeedDocument:
    page = sort_entries(entries)[: meta.page_size]
    return FeedDocument(
        title=meta.title,
        description=meta.description,
        site_url=meta.site_url,
        feed_id=meta.feed_id,
        feed_links=meta.feed_links,
        language=meta.language,
        updated_at=_last_updated(page, meta),
        author=meta.author,
        entries=tuple(page),
        hub_url=meta.hub_url,
        image=meta.image,
        favicon=meta.favicon,
        copyright=meta.copyright,
        generator=meta.generator,
        docs=meta.docs,
        ttl=meta.ttl,
        category=category,
        categories_url=meta.categories_url or f"{meta.site_url.rstrip('/')}/categories",
    )


def build_feed(posts: Iterable[FeedEntry], channel_meta: ChannelMeta) -> FeedDocument:
    """Build the site-wide feed.

    Args:
        posts: Normalized entries, in any order
        channel_meta: Channel metadata including the page-size cap

    Returns:
        FeedDocument with at most ``channel_meta.page_size`` entries, newest first
    """
    return _document(list(posts), channel_meta)


def category_channel(meta: ChannelMeta, category: CategoryRecord) -> ChannelMeta:
    """Derive channel metadata for a single category's feed."""
    site_url = meta.site_url.rstrip("/")
    name = category.name or category.slug
    return meta.model_copy(
        update={
            "title": f"{meta.title} - {name}",
            "description": f"{name} posts from {meta.title}",
            "feed_id": f"{site_url}/categories/{category.slug}",
            "site_url": f"{site_url}/blog/{category.slug}",
            "feed_links": FeedLinks(rss=f"{site_url}/feeds/category/{category.slug}.xml"),
            "categories_url": meta.categories_url or f"{site_url}/categories",
        }
    )


def build_category_feed(
    category_slug: str,
    posts: Iterable[FeedEntry],
    channel_meta: ChannelMeta,
    categories: Iterable[CategoryRecord],
) -> FeedDocument:
    """Build the feed for a single category.

    Entries are filtered into a new list; ``posts`` is left untouched so a
    shared entry cache can be passed in directly. A known category without
    posts yields an empty (valid) feed.

    Args:
        category_slug: Slug of the requested category
        posts: Normalized entries for the whole site
        channel_meta: Site channel metadata; title and links are derived from it
        categories: Known categories to resolve the slug against

    Returns:
        FeedDocument limited to entries in the category

    Raises:
        NotFoundError: If no category has this slug
    """
    category = next((c for c in categories if c.slug == category_slug), None)
    if category is None:
        raise NotFoundError(f"Category not found: {category_slug}")

    members = [p for p in posts if p.category is not None and p.category.slug == category_slug]
    feed_category = FeedCategory(name=category.name or category.slug, slug=category.slug)
    return _document(members, category_channel(channel_meta, category), feed_category)
