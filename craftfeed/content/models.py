"""Pydantic models for records returned by the CMS content adapter."""

from datetime import datetime
from typing import Annotated, Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class CategoryRecord(BaseModel):
    """A blog category as stored in the CMS."""

    id: str
    slug: str
    name: str = ""


class AuthorRecord(BaseModel):
    """A post author as stored in the CMS."""

    id: str
    slug: str
    name: str = ""


class Resolved(BaseModel, Generic[T]):
    """Relationship whose target document was fetched."""

    state: Literal["resolved"] = "resolved"
    value: T


class Unresolved(BaseModel):
    """Relationship that is empty or whose target data was not fetched."""

    state: Literal["unresolved"] = "unresolved"
    id: str | None = None


class Broken(BaseModel):
    """Relationship pointing at a deleted or unpublished document."""

    state: Literal["broken"] = "broken"
    id: str


CategoryRelation = Annotated[
    Resolved[CategoryRecord] | Unresolved | Broken, Field(discriminator="state")
]
AuthorRelation = Annotated[
    Resolved[AuthorRecord] | Unresolved | Broken, Field(discriminator="state")
]


class RichTextSpan(BaseModel):
    """Inline formatting over a character range of a block's text."""

    start: int
    end: int
    type: str  # strong, em, hyperlink, label
    data: dict[str, Any] = Field(default_factory=dict)


class RichTextBlock(BaseModel):
    """A single structured rich-text block (paragraph, heading, image, ...)."""

    type: str
    text: str = ""
    spans: list[RichTextSpan] = Field(default_factory=list)

    # image blocks
    url: str | None = None
    alt: str | None = None

    # embed blocks
    oembed: dict[str, Any] | None = None


class RawPost(BaseModel):
    """A blog post record exactly as the content adapter hands it over."""

    id: str
    slug: str
    title: str | None = None
    excerpt: str | None = None
    body: list[RichTextBlock] = Field(default_factory=list)
    published_at: datetime | None = None
    first_published_at: datetime
    last_published_at: datetime | None = None
    category: CategoryRelation = Field(default_factory=Unresolved)
    author: AuthorRelation = Field(default_factory=Unresolved)
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
