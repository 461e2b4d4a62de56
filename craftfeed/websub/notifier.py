"""Notify a WebSub hub that feeds have new content."""

import asyncio
import logging
from typing import Iterable, Sequence

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_HUB_URL = "https://pubsubhubbub.appspot.com/"
USER_AGENT = "100DaysOfCraft/1.0"


class NotificationResult(BaseModel):
    """Outcome of one publish notification."""

    feed_url: str
    success: bool
    error: str | None = None


def site_feed_urls(site_url: str) -> list[str]:
    """Self URLs of the site-wide RSS, Atom and JSON feeds."""
    site_url = site_url.rstrip("/")
    return [f"{site_url}/rss.xml", f"{site_url}/atom.xml", f"{site_url}/feed.json"]


def category_feed_url(site_url: str, slug: str) -> str:
    """Self URL of a category's RSS feed."""
    return f"{site_url.rstrip('/')}/feeds/category/{slug}.xml"


class WebSubNotifier:
    """Best-effort publisher for a WebSub hub.

    Every feed URL is notified independently and concurrently. Failures are
    logged and reported per URL; nothing is retried and nothing is raised.
    """

    def __init__(
        self,
        hub_url: str = DEFAULT_HUB_URL,
        timeout: float = 10.0,
        user_agent: str = USER_AGENT,
    ):
        self.hub_url = hub_url
        self.timeout = timeout
        self.user_agent = user_agent

    async def _publish(self, client: httpx.AsyncClient, feed_url: str) -> NotificationResult:
        try:
            response = await client.post(
                self.hub_url,
                data={"hub.mode": "publish", "hub.url": feed_url},
                headers={"User-Agent": self.user_agent},
            )
        except httpx.HTTPError as exc:
            error = str(exc) or exc.__class__.__name__
            logger.error(f"WebSub notification error for {feed_url}: {error}")
            return NotificationResult(feed_url=feed_url, success=False, error=error)

        if not 200 <= response.status_code < 300:
            logger.error(
                f"WebSub notification failed for {feed_url}. Status: {response.status_code}"
            )
            return NotificationResult(
                feed_url=feed_url, success=False, error=f"HTTP {response.status_code}"
            )

        logger.info(f"WebSub notification sent successfully for {feed_url}")
        return NotificationResult(feed_url=feed_url, success=True)

    async def notify_hub(self, feed_urls: Sequence[str]) -> list[NotificationResult]:
        """
        Send a ``hub.mode=publish`` notification for each feed URL.

        Args:
            feed_urls: Absolute feed URLs that have changed

        Returns:
            One NotificationResult per URL, in input order
        """
        if not feed_urls:
            return []

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            results = await asyncio.gather(
                *(self._publish(client, url) for url in feed_urls)
            )
        return list(results)

    async def test_hub(self) -> bool:
        """
        Check that the hub is reachable.

        Returns:
            True on a 2xx response, False on any other status or network error
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.hub_url, headers={"User-Agent": self.user_agent}
                )
        except httpx.HTTPError as exc:
            logger.error(f"WebSub hub test failed: {exc}")
            return False

        return 200 <= response.status_code < 300

    async def on_content_published(
        self, site_url: str, category_slugs: Iterable[str] = ()
    ) -> list[NotificationResult]:
        """Notify the hub for the site feeds and any affected category feeds."""
        feed_urls = site_feed_urls(site_url)
        feed_urls.extend(category_feed_url(site_url, slug) for slug in category_slugs)

        results = await self.notify_hub(feed_urls)
        failed = [r for r in results if not r.success]
        if failed:
            logger.warning(
                f"WebSub hub notified for {len(results) - len(failed)}/{len(results)} feeds"
            )
        return results
