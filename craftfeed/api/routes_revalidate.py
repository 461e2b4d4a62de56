"""CMS webhook endpoints: cache revalidation and WebSub status."""

import hashlib
import hmac
import json
import logging
import re
import time

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from craftfeed.config import get_settings
from craftfeed.feed.cache import FeedCache, category_tag
from craftfeed.websub.notifier import WebSubNotifier

from .dependencies import get_feed_cache, get_notifier

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")
SIGNATURE_HEADER = "X-Webhook-Signature"

router = APIRouter(prefix="/api", tags=["webhooks"])
limiter = Limiter(key_func=get_remote_address)


def verify_signature(body: bytes, signature: str | None, secret: str) -> bool:
    """Check a hex HMAC-SHA256 signature of the raw request body."""
    if not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature.strip(), expected)


@router.post("/revalidate")
@limiter.limit("10/minute")
async def revalidate(
    request: Request,
    background_tasks: BackgroundTasks,
    tag: str | None = Query(default=None, description="Cache tag to invalidate"),
    category: list[str] = Query(default=[], description="Changed category slugs"),
    cache: FeedCache = Depends(get_feed_cache),
    notifier: WebSubNotifier = Depends(get_notifier),
):
    """
    Invalidate cached feeds after a CMS publish event.

    When a webhook secret is configured the raw body must carry a valid
    ``X-Webhook-Signature``. The WebSub hub is notified in the background so
    the webhook caller is answered without waiting on the hub.

    Query Parameters:
        - tag: Cache tag to invalidate (default "feed")
        - category: Category slugs whose feeds changed (repeatable)

    Returns:
        JSON with revalidated, tag, invalidated count and timestamp
    """
    settings = get_settings()
    body = await request.body()

    if settings.webhook_secret:
        signature = request.headers.get(SIGNATURE_HEADER)
        if not verify_signature(body, signature, settings.webhook_secret):
            logger.warning("Rejected revalidation webhook with invalid signature")
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

    if body:
        try:
            payload = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid webhook payload")
        if isinstance(payload, dict):
            logger.info(
                f"CMS webhook received: type={payload.get('type')} domain={payload.get('domain')}"
            )

    if tag is not None and not TAG_PATTERN.match(tag):
        raise HTTPException(status_code=400, detail="Invalid tag format")
    for slug in category:
        if not TAG_PATTERN.match(slug):
            raise HTTPException(status_code=400, detail="Invalid category format")

    revalidated_tag = tag or "feed"
    invalidated = await cache.invalidate(revalidated_tag)
    for slug in category:
        invalidated += await cache.invalidate(category_tag(slug))

    logger.info(
        f"Cache revalidated: tag={revalidated_tag} entries={invalidated} "
        f"ip={get_remote_address(request)}"
    )

    if settings.websub_enabled:
        background_tasks.add_task(
            notifier.on_content_published, settings.site_url, list(category)
        )

    return {
        "revalidated": True,
        "tag": revalidated_tag,
        "invalidated": invalidated,
        "timestamp": int(time.time() * 1000),
    }


@router.get("/websub/status")
async def websub_status(notifier: WebSubNotifier = Depends(get_notifier)):
    """
    Report whether the configured WebSub hub is reachable.

    Returns:
        JSON with hub_url and reachable
    """
    return {"hub_url": notifier.hub_url, "reachable": await notifier.test_hub()}
