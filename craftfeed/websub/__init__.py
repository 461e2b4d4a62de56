"""WebSub (PubSubHubbub) publisher notifications."""

from .notifier import NotificationResult, WebSubNotifier, category_feed_url, site_feed_urls

__all__ = ["NotificationResult", "WebSubNotifier", "category_feed_url", "site_feed_urls"]
