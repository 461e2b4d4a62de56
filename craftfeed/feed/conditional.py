"""Conditional GET handling (ETag / Last-Modified) for feed responses."""

import hashlib
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Mapping
from xml.sax.saxutils import escape

from pydantic import BaseModel, Field

# Serve stale for up to two hours while revalidating in the background
CACHE_CONTROL = "public, max-age=600, s-maxage=3600, stale-while-revalidate=7200"

CONTENT_TYPES = {
    "rss": "application/rss+xml",
    "atom": "application/atom+xml",
    "json": "application/feed+json",
}


class ConditionalCacheDescriptor(BaseModel):
    """Cache validators derived from a serialized feed."""

    etag: str
    last_modified: datetime


class FeedResponse(BaseModel):
    """Framework-agnostic HTTP response."""

    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = ""


def compute_etag(content: str) -> str:
    """
    Compute a strong ETag for serialized feed content.

    The ETag is the quoted MD5 hex digest of the UTF-8 bytes. It is a cache
    validator only, never a security control.

    Args:
        content: Serialized feed

    Returns:
        Quoted opaque validator, e.g. ``"5d41402abc4b2a76b9719d911017c592"``
    """
    digest = hashlib.md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()
    return f'"{digest}"'


def http_date(value: datetime) -> str:
    """Format a timestamp as an IMF-fixdate (``Mon, 15 Jan 2024 10:30:00 GMT``)."""
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, val in headers.items():
        if key.lower() == lowered:
            return val
    return None


def _parse_http_date(value: str) -> datetime | None:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def describe(content: str, last_modified: datetime) -> ConditionalCacheDescriptor:
    """Derive the cache validators for a serialized feed."""
    return ConditionalCacheDescriptor(
        etag=compute_etag(content), last_modified=last_modified
    )


def should_return_304(
    request_headers: Mapping[str, str], etag: str, last_modified: datetime
) -> bool:
    """
    Decide whether a conditional request can be answered with 304.

    ``If-None-Match`` must equal the ETag exactly, quotes included.
    Otherwise ``If-Modified-Since`` wins when it is not earlier than
    ``last_modified`` at HTTP-date (one second) resolution. Unparseable
    dates are ignored.

    Args:
        request_headers: Request headers (case-insensitive lookup)
        etag: ETag of the current representation
        last_modified: Modification time of the current representation

    Returns:
        True if the client's cached copy is still current
    """
    if_none_match = _header(request_headers, "If-None-Match")
    if if_none_match is not None and if_none_match.strip() == etag:
        return True

    if_modified_since = _header(request_headers, "If-Modified-Since")
    if if_modified_since:
        client_date = _parse_http_date(if_modified_since)
        if client_date is not None:
            current = last_modified.astimezone(timezone.utc).replace(microsecond=0)
            return client_date >= current

    return False


def build_feed_response(
    request_headers: Mapping[str, str],
    content: str,
    content_type: str,
    last_modified: datetime,
    extra_headers: Mapping[str, str] | None = None,
) -> FeedResponse:
    """
    Build the full or 304 response for a serialized feed.

    A 304 carries the same ``ETag``, ``Last-Modified`` and ``Cache-Control``
    a 200 would, so clients can re-validate freshness from headers alone.

    Args:
        request_headers: Incoming request headers
        content: Serialized feed body
        content_type: MIME type without charset, e.g. ``application/rss+xml``
        last_modified: Modification time of the feed
        extra_headers: Additional headers for the response (CORS, category, ...)

    Returns:
        FeedResponse with status 200 or 304
    """
    descriptor = describe(content, last_modified)
    headers = {
        "ETag": descriptor.etag,
        "Last-Modified": http_date(descriptor.last_modified),
        "Cache-Control": CACHE_CONTROL,
    }
    if extra_headers:
        headers.update(extra_headers)

    if should_return_304(request_headers, descriptor.etag, descriptor.last_modified):
        return FeedResponse(status=304, headers=headers)

    headers.update(
        {
            "Content-Type": f"{content_type}; charset=utf-8",
            "Content-Length": str(len(content.encode("utf-8"))),
            "X-Robots-Tag": "noindex",
            "X-Content-Type-Options": "nosniff",
        }
    )
    return FeedResponse(status=200, headers=headers, body=content)


def feed_error_response(slug: str) -> FeedResponse:
    """Minimal RSS document returned when a category feed cannot be built.

    Feed readers expect XML even on failure.
    """
    body = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0">\n'
        "    <channel>\n"
        "        <title>Feed Error</title>\n"
        f"        <description>Unable to generate feed for category: {escape(slug)}</description>\n"
        "    </channel>\n"
        "</rss>\n"
    )
    return FeedResponse(
        status=500,
        headers={
            "Content-Type": "application/rss+xml; charset=utf-8",
            "Cache-Control": "no-cache",
            "X-Content-Type-Options": "nosniff",
        },
        body=body,
    )
