"""Syndication feed endpoints (RSS, Atom, JSON Feed, category RSS)."""

import logging
import re

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from craftfeed.feed.analytics import track_feed_access
from craftfeed.feed.builder import NotFoundError
from craftfeed.feed.conditional import (
    CONTENT_TYPES,
    FeedResponse,
    build_feed_response,
    feed_error_response,
)
from craftfeed.feed.serializers import SERIALIZERS
from craftfeed.feed.service import FeedService

from .dependencies import get_feed_service

logger = logging.getLogger(__name__)

# Category slugs as generated by the CMS
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,99}$")

JSON_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
}

router = APIRouter(tags=["feeds"])


def _to_response(feed_response: FeedResponse) -> Response:
    return Response(
        content=feed_response.body,
        status_code=feed_response.status,
        headers=feed_response.headers,
    )


async def _site_feed(
    request: Request, service: FeedService, feed_format: str
) -> Response:
    track_feed_access(request.headers, feed_format)

    try:
        doc = await service.get_site_feed()
        content = SERIALIZERS[feed_format](doc)
    except Exception:
        logger.exception(
            f"Error generating {feed_format} feed", extra={"feed_type": feed_format}
        )
        return PlainTextResponse("Error generating feed", status_code=500)

    extra = JSON_CORS_HEADERS if feed_format == "json" else None
    return _to_response(
        build_feed_response(
            request.headers,
            content,
            CONTENT_TYPES[feed_format],
            doc.updated_at,
            extra_headers=extra,
        )
    )


@router.get("/rss.xml")
async def rss_feed(request: Request, service: FeedService = Depends(get_feed_service)):
    """Site-wide RSS 2.0 feed."""
    return await _site_feed(request, service, "rss")


@router.get("/atom.xml")
async def atom_feed(request: Request, service: FeedService = Depends(get_feed_service)):
    """Site-wide Atom 1.0 feed."""
    return await _site_feed(request, service, "atom")


@router.get("/feed.json")
async def json_feed(request: Request, service: FeedService = Depends(get_feed_service)):
    """Site-wide JSON Feed 1.1, readable cross-origin."""
    return await _site_feed(request, service, "json")


@router.get("/feeds/category/{slug}.xml")
async def category_feed(
    slug: str,
    request: Request,
    service: FeedService = Depends(get_feed_service),
):
    """
    RSS 2.0 feed for a single category.

    Failures (unknown category included) return a 500 with a minimal RSS
    error document, since feed readers expect XML even on error.
    """
    track_feed_access(request.headers, f"category-{slug}")

    if not SLUG_PATTERN.match(slug):
        logger.warning(f"Rejected category feed request with invalid slug: {slug!r}")
        return _to_response(feed_error_response(slug))

    try:
        doc = await service.get_category_feed(slug)
        content = SERIALIZERS["rss"](doc)
    except NotFoundError:
        logger.warning(f"Category feed requested for unknown category: {slug}")
        return _to_response(feed_error_response(slug))
    except Exception:
        logger.exception(
            f"Error generating category feed for {slug}",
            extra={"feed_type": "rss", "category": slug},
        )
        return _to_response(feed_error_response(slug))

    return _to_response(
        build_feed_response(
            request.headers,
            content,
            CONTENT_TYPES["rss"],
            doc.updated_at,
            extra_headers={"X-Feed-Category": slug},
        )
    )
