"""CMS content records and the adapter that loads them."""

from .models import (
    AuthorRecord,
    Broken,
    CategoryRecord,
    RawPost,
    Resolved,
    RichTextBlock,
    RichTextSpan,
    Unresolved,
)
from .source import ContentSource, ContentSourceError, JsonFileContentSource

__all__ = [
    "AuthorRecord",
    "Broken",
    "CategoryRecord",
    "ContentSource",
    "ContentSourceError",
    "JsonFileContentSource",
    "RawPost",
    "Resolved",
    "RichTextBlock",
    "RichTextSpan",
    "Unresolved",
]
