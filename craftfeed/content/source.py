"""Content adapter abstraction over the headless CMS."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import AuthorRecord, Broken, CategoryRecord, RawPost, Unresolved

logger = logging.getLogger(__name__)


class ContentSourceError(Exception):
    """Raised when the CMS (or its exported snapshot) cannot be read."""


class ContentSource(ABC):
    """Read-only access to published CMS documents."""

    @abstractmethod
    async def fetch_all_published_posts(self) -> list[RawPost]:
        """
        Fetch every published post with its category and author links.

        Returns:
            List of RawPost records in no particular order

        Raises:
            ContentSourceError: If the CMS cannot be reached
        """
        pass

    async def check(self) -> None:
        """
        Confirm the CMS can be read.

        Raises:
            ContentSourceError: If the CMS cannot be reached
        """
        await self.fetch_all_published_posts()

    @abstractmethod
    async def fetch_category_by_slug(self, slug: str) -> CategoryRecord | None:
        """
        Look up a category by its slug.

        Returns:
            The category, or None if no category has this slug
        """
        pass

    @abstractmethod
    async def fetch_author_by_id(self, author_id: str) -> AuthorRecord | None:
        """
        Look up an author by document id.

        Returns:
            The author, or None if no author has this id
        """
        pass


class JsonFileContentSource(ContentSource):
    """Content source backed by a JSON snapshot exported from the CMS.

    The snapshot holds ``posts``, ``categories`` and ``authors`` lists. Posts
    reference their category and author by document id; references are
    resolved into ``Resolved``/``Unresolved``/``Broken`` relations on load.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        try:
            snapshot = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ContentSourceError(
                f"Unable to read content snapshot {self.path}: {exc}"
            ) from exc

        if not isinstance(snapshot, dict):
            raise ContentSourceError(f"Content snapshot {self.path} is not an object")
        return snapshot

    def _categories(self, snapshot: dict[str, Any]) -> dict[str, CategoryRecord]:
        try:
            records = [CategoryRecord(**c) for c in snapshot.get("categories", [])]
        except (TypeError, ValidationError) as exc:
            raise ContentSourceError(f"Invalid category record: {exc}") from exc
        return {c.id: c for c in records}

    def _authors(self, snapshot: dict[str, Any]) -> dict[str, AuthorRecord]:
        try:
            records = [AuthorRecord(**a) for a in snapshot.get("authors", [])]
        except (TypeError, ValidationError) as exc:
            raise ContentSourceError(f"Invalid author record: {exc}") from exc
        return {a.id: a for a in records}

    @staticmethod
    def _relation(ref: str | None, documents: dict[str, Any]) -> dict[str, Any]:
        if not ref:
            return Unresolved().model_dump()
        if ref not in documents:
            return Broken(id=ref).model_dump()
        return {"state": "resolved", "value": documents[ref].model_dump()}

    async def check(self) -> None:
        """Confirm the snapshot file exists and parses."""
        self._load()

    async def fetch_all_published_posts(self) -> list[RawPost]:
        """Load all posts from the snapshot, resolving their relationships."""
        snapshot = self._load()
        categories = self._categories(snapshot)
        authors = self._authors(snapshot)

        posts = []
        for record in snapshot.get("posts", []):
            try:
                data = dict(record)
                data["category"] = self._relation(data.pop("category_id", None), categories)
                data["author"] = self._relation(data.pop("author_id", None), authors)
                posts.append(RawPost(**data))
            except (TypeError, ValueError, ValidationError):
                # One unreadable record must not take the whole feed down
                record_id = record.get("id") if isinstance(record, dict) else None
                logger.warning("Skipping unreadable post record %s", record_id or "<no id>")
                continue

        return posts

    async def fetch_category_by_slug(self, slug: str) -> CategoryRecord | None:
        """Find a category in the snapshot by slug."""
        for category in self._categories(self._load()).values():
            if category.slug == slug:
                return category
        return None

    async def fetch_author_by_id(self, author_id: str) -> AuthorRecord | None:
        """Find an author in the snapshot by id."""
        return self._authors(self._load()).get(author_id)
