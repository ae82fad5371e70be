"""
Deep link parsing for opening articles from external links (e.g. Facebook)
or from push notifications. Supports the app scheme and the Ghost site URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from urllib.parse import unquote

from newsreader.config import ClientConfig, get_client_config
from newsreader.models.ghost import ArticleReference, is_path_safe_slug
from newsreader.utils.url_utils import path_segments, split_url, url_host

# Path segments on the Ghost site that prefix a slug rather than name one
RESERVED_WEB_SEGMENTS = frozenset({"posts", "p"})


@dataclass(frozen=True)
class ArticleLink:
    slug: str
    type: Literal["article"] = "article"

    def to_reference(self) -> ArticleReference:
        return ArticleReference(slug=self.slug)


def _article_link(segment: str | None) -> ArticleLink | None:
    # Escaped and unescaped spellings of a link resolve to the same slug
    if not segment:
        return None
    slug = unquote(segment)
    return ArticleLink(slug=slug) if is_path_safe_slug(slug) else None


def parse_article_link(url: object, config: ClientConfig | None = None) -> ArticleLink | None:
    """
    Return the article a URL points to, or None when it is not an article link.

    - App scheme: mattelevizion://article/<slug> ("article" parses as the host,
      so the slug is the first path segment)
    - Ghost site: https://<ghost-host>/<slug>/ or /posts/<slug>/ or /p/<slug>/
      (slug is the last path segment)

    Percent-escapes in the slug are decoded, and a slug that is not a single
    path-safe segment once decoded is rejected. Never raises; malformed input
    is simply not an article.
    """
    if not isinstance(url, str):
        return None
    parts = split_url(url)
    if parts is None:
        return None

    config = config or get_client_config()

    if parts.scheme == config.app_scheme.lower():
        segments = path_segments(parts.path)
        return _article_link(segments[0] if segments else None)

    ghost_host = config.host
    if parts.scheme == "https" and ghost_host and url_host(parts) == ghost_host:
        segments = path_segments(parts.path)
        slug = segments[-1] if segments else None
        if slug and slug not in RESERVED_WEB_SEGMENTS:
            return _article_link(slug)

    return None
