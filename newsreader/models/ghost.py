"""Pydantic models for Ghost Content API payloads and reader requests."""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

DEFAULT_POSTS_LIMIT = 10

# Characters that would let a slug leave or extend its route segment
_UNSAFE_SLUG_CHARS = re.compile(r"[/\\?#%\s\x00-\x1f\x7f]")
# A single Ghost tag slug; NQL operators such as , + : ( ) never appear in one
_TAG_SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def is_path_safe_slug(value: object) -> bool:
    """True when value can be used verbatim as one URL path segment."""
    if not isinstance(value, str) or value in ("", ".", ".."):
        return False
    return _UNSAFE_SLUG_CHARS.search(value) is None


class ArticleReference(BaseModel):
    """Canonical identifier used to open one article."""

    model_config = ConfigDict(frozen=True)

    slug: str

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        if not v:
            raise ValueError("slug must not be empty")
        if not is_path_safe_slug(v):
            raise ValueError(f"slug is not a path-safe token: {v!r}")
        return v


class FeedQuery(BaseModel):
    """One request for a page of the feed."""

    model_config = ConfigDict(frozen=True)

    limit: PositiveInt = DEFAULT_POSTS_LIMIT
    tag: str | None = None

    @field_validator("tag")
    @classmethod
    def validate_tag(cls, v: str | None) -> str | None:
        if not v:
            return None
        if not _TAG_SLUG_PATTERN.match(v):
            raise ValueError(f"tag must be a single tag slug: {v!r}")
        return v


class Tag(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    slug: str
    description: str | None = None


class Post(BaseModel):
    """A published Ghost post. Read-only once retrieved."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    uuid: str
    slug: str
    title: str
    excerpt: str | None = None
    html: str | None = None
    plaintext: str | None = None
    feature_image: str | None = None
    featured: bool = False
    published_at: datetime
    updated_at: datetime
    tags: list[Tag] = Field(default_factory=list)
    primary_tag: Tag | None = None
    url: str
    canonical_url: str | None = None


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    page: int
    limit: int
    pages: int
    total: int
    next: int | None = None
    prev: int | None = None


class FeedPage(BaseModel):
    """Posts in backend order plus optional pagination metadata."""

    model_config = ConfigDict(frozen=True)

    posts: list[Post] = Field(default_factory=list)
    pagination: Pagination | None = None

    def __len__(self) -> int:
        return len(self.posts)

    def __iter__(self) -> Iterator[Post]:  # type: ignore[override]
        return iter(self.posts)

    def __getitem__(self, index: int) -> Post:
        return self.posts[index]

    @property
    def has_more(self) -> bool:
        return self.pagination is not None and self.pagination.next is not None
