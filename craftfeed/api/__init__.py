"""API routers for the feed service."""

from craftfeed.api.routes_feed import router as feed_router
from craftfeed.api.routes_health import router as health_router
from craftfeed.api.routes_revalidate import router as webhook_router

__all__ = [
    "feed_router",
    "health_router",
    "webhook_router",
]
