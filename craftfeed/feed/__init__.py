"""Feed construction, serialization, validation and conditional delivery."""

from .builder import NotFoundError, build_category_feed, build_feed
from .conditional import (
    CACHE_CONTROL,
    build_feed_response,
    compute_etag,
    feed_error_response,
    should_return_304,
)
from .models import ChannelMeta, FeedDocument, FeedEntry, ValidationResult
from .normalizer import normalize
from .serializers import to_atom1, to_json_feed1, to_rss2
from .validator import validate_feed

__all__ = [
    "CACHE_CONTROL",
    "ChannelMeta",
    "FeedDocument",
    "FeedEntry",
    "NotFoundError",
    "ValidationResult",
    "build_category_feed",
    "build_feed",
    "build_feed_response",
    "compute_etag",
    "feed_error_response",
    "normalize",
    "should_return_304",
    "to_atom1",
    "to_json_feed1",
    "to_rss2",
    "validate_feed",
]
