"""Pydantic models for syndication feeds."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FeedAuthor(BaseModel):
    """Author credited on a feed or an entry."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    profile_url: str | None = None


class FeedCategory(BaseModel):
    """Category an entry is filed under."""

    model_config = ConfigDict(frozen=True)

    name: str
    slug: str


class FeedEntry(BaseModel):
    """A single syndicated blog post.

    ``id`` is the post's canonical URL and doubles as RSS guid, Atom id and
    JSON Feed id; it must never change once published.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    link: str
    summary: str
    content_html: str
    author: FeedAuthor
    published_at: datetime
    updated_at: datetime | None = None
    category: FeedCategory | None = None
    image: str | None = None


class FeedLinks(BaseModel):
    """Self URLs of a feed, one per published format."""

    model_config = ConfigDict(frozen=True)

    rss: str
    atom: str | None = None
    json_feed: str | None = None


class ChannelMeta(BaseModel):
    """Channel-level metadata handed to the feed builder."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    site_url: str
    feed_id: str
    feed_links: FeedLinks
    language: str = "en"
    author: FeedAuthor
    hub_url: str | None = None
    image: str | None = None
    favicon: str | None = None
    copyright: str | None = None
    generator: str = "craftfeed"
    docs: str = "https://www.rssboard.org/rss-specification"
    ttl: int = 60  # minutes
    page_size: int = 30
    updated_at: datetime | None = None
    # Category taxonomy root; derived from site_url when unset
    categories_url: str | None = None


class FeedDocument(BaseModel):
    """A complete feed: channel metadata plus ordered entries."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    site_url: str
    feed_id: str
    feed_links: FeedLinks
    language: str
    updated_at: datetime
    author: FeedAuthor
    entries: tuple[FeedEntry, ...] = ()
    hub_url: str | None = None
    image: str | None = None
    favicon: str | None = None
    copyright: str | None = None
    generator: str = "craftfeed"
    docs: str = "https://www.rssboard.org/rss-specification"
    ttl: int = 60
    category: FeedCategory | None = None
    categories_url: str | None = None


class ValidationResult(BaseModel):
    """Outcome of checking a serialized feed against its format."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
