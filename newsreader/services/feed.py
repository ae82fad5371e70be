"""Screen-level loaders for the feed and article views.

The content client gives no ordering guarantee between overlapping requests,
so the feed loader numbers each request and only the newest one may update
the visible state.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace

from newsreader.constants import RECENT_POSTS_FETCH_LIMIT, RECENT_POSTS_SHOWN
from newsreader.core.logging import get_logger
from newsreader.models.ghost import DEFAULT_POSTS_LIMIT, FeedQuery, Post
from newsreader.services.ghost_api import GhostApiError, GhostContentClient

logger = get_logger(__name__)

FEED_ERROR_FALLBACK = "Failed to load articles"
ARTICLE_ERROR_FALLBACK = "Failed to load article"


@dataclass(frozen=True)
class FeedState:
    tag: str | None = None
    posts: list[Post] = field(default_factory=list)
    loading: bool = False
    refreshing: bool = False
    error: str | None = None


@dataclass(frozen=True)
class ArticleState:
    slug: str | None = None
    missing: bool = False
    post: Post | None = None
    recent_posts: list[Post] = field(default_factory=list)
    error: str | None = None


class FeedLoader:
    """Loads the feed for the selected tag; the latest request wins."""

    def __init__(self, client: GhostContentClient, limit: int = DEFAULT_POSTS_LIMIT) -> None:
        self.client = client
        self.limit = limit
        self.state = FeedState()
        self._generation = 0

    async def load(self, tag: str | None = None, *, refresh: bool = False) -> bool:
        """Fetch one page for tag.

        Returns True when this load's outcome (posts or error) became the
        visible state, False when a newer load started while this one was in
        flight and the outcome was discarded.
        """
        query = FeedQuery(limit=self.limit, tag=tag)
        self._generation += 1
        generation = self._generation
        self.state = replace(
            self.state,
            tag=tag,
            loading=not refresh,
            refreshing=refresh,
            error=None,
        )

        try:
            page = await self.client.list_posts(query)
        except GhostApiError as e:
            if generation != self._generation:
                return False
            logger.warning("Feed load failed for tag %s: %s", tag, e)
            self.state = FeedState(tag=tag, posts=[], error=str(e) or FEED_ERROR_FALLBACK)
            return True

        if generation != self._generation:
            logger.debug("Discarding stale feed response for tag %s", tag)
            return False
        self.state = FeedState(tag=tag, posts=list(page.posts))
        return True

    async def refresh(self) -> bool:
        return await self.load(self.state.tag, refresh=True)


class ArticleLoader:
    """Loads one article together with a short list of other recent posts."""

    def __init__(self, client: GhostContentClient) -> None:
        self.client = client

    async def load(self, slug: str | None) -> ArticleState:
        if not slug:
            return ArticleState(slug=slug, missing=True)

        try:
            post, recent = await asyncio.gather(
                self.client.get_post(slug),
                self.client.list_posts(FeedQuery(limit=RECENT_POSTS_FETCH_LIMIT)),
            )
        except GhostApiError as e:
            logger.warning("Article load failed for %s: %s", slug, e)
            return ArticleState(slug=slug, error=str(e) or ARTICLE_ERROR_FALLBACK)

        recent_posts = [p for p in recent.posts if p.slug != slug][:RECENT_POSTS_SHOWN]
        return ArticleState(slug=slug, post=post, recent_posts=recent_posts)
