"""Convert raw CMS posts into canonical feed entries."""

import re
from datetime import datetime, timezone

from craftfeed.content.models import Broken, RawPost, Resolved, Unresolved
from craftfeed.content.richtext import absolute_url, as_html, as_text

from .models import FeedAuthor, FeedCategory, FeedEntry

UNTITLED = "Untitled"
ANONYMOUS = "Anonymous"
UNCATEGORIZED = "uncategorized"
DEFAULT_AUTHOR_EMAIL = "noreply@100daysofcraft.com"
EXCERPT_LENGTH = 160
ELLIPSIS = "..."

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def make_excerpt(
    content: str, max_length: int = EXCERPT_LENGTH, is_html: bool = True
) -> str:
    """Build a plain-text excerpt of at most ``max_length`` characters.

    Whitespace is collapsed and, for HTML input, tags are stripped. Truncated
    text ends in ``...`` (counted in ``max_length``); the cut may fall
    mid-word.

    Args:
        content: HTML or plain text
        max_length: Maximum excerpt length, ellipsis included
        is_html: False when ``content`` is already plain text, so literal
            ``<`` and ``>`` survive

    Returns:
        The excerpt, possibly empty
    """
    if is_html:
        content = _TAG_RE.sub("", content)
    text = _WS_RE.sub(" ", content).strip()
    if len(text) <= max_length:
        return text
    return text[: max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS


def _utc(value: datetime) -> datetime:
    # The CMS exports naive timestamps in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _category(post: RawPost) -> FeedCategory | None:
    relation = post.category
    if isinstance(relation, (Unresolved, Broken)):
        return None
    if isinstance(relation, Resolved) and relation.value.slug:
        category = relation.value
        return FeedCategory(name=category.name or category.slug, slug=category.slug)
    return None


def _author(post: RawPost, site_url: str, email: str) -> FeedAuthor:
    relation = post.author
    if isinstance(relation, Resolved):
        author = relation.value
        profile = None
        if author.slug:
            profile = absolute_url(f"/authors/{author.slug}", site_url)
        return FeedAuthor(name=author.name or ANONYMOUS, email=email, profile_url=profile)

    # Unresolved or Broken
    return FeedAuthor(name=ANONYMOUS, email=email)


def entry_url(site_url: str, category_slug: str | None, post_slug: str) -> str:
    """Canonical, permanent URL of a post; used as the entry id."""
    return f"{site_url.rstrip('/')}/blog/{category_slug or UNCATEGORIZED}/{post_slug}"


def normalize(
    raw_post: RawPost, site_url: str, author_email: str = DEFAULT_AUTHOR_EMAIL
) -> FeedEntry:
    """Turn a raw CMS post into an immutable FeedEntry.

    Missing optional data degrades to defaults instead of failing: no title
    becomes "Untitled", a missing or broken author becomes "Anonymous" and a
    missing or broken category is dropped (the URL then uses
    ``uncategorized``).

    Args:
        raw_post: Post record from the content adapter
        site_url: Absolute site root for links and URL rewriting
        author_email: Privacy-safe address published for every author

    Returns:
        The normalized feed entry
    """
    category = _category(raw_post)
    url = entry_url(site_url, category.slug if category else None, raw_post.slug)

    content_html = as_html(raw_post.body, site_url)
    if raw_post.excerpt and raw_post.excerpt.strip():
        summary = make_excerpt(raw_post.excerpt)
    else:
        summary = make_excerpt(as_text(raw_post.body), is_html=False)

    published_at = _utc(raw_post.published_at or raw_post.first_published_at)
    updated_at = None
    if raw_post.last_published_at is not None:
        last = _utc(raw_post.last_published_at)
        if last > published_at:
            updated_at = last

    title = (raw_post.title or "").strip() or UNTITLED

    return FeedEntry(
        id=url,
        title=title,
        link=url,
        summary=summary,
        content_html=content_html,
        author=_author(raw_post, site_url, author_email),
        published_at=published_at,
        updated_at=updated_at,
        category=category,
        image=absolute_url(raw_post.image_url, site_url) if raw_post.image_url else None,
    )
