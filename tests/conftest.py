import os
import sys
from collections.abc import Callable
from typing import Any

import httpx
import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from newsreader.config import ClientConfig  # noqa: E402

GHOST_URL = "https://your-ghost-site.com"
GHOST_KEY = "test-content-key"


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(base_url=GHOST_URL, api_key=GHOST_KEY, api_version="v6.0")


@pytest.fixture
def unconfigured_config() -> ClientConfig:
    return ClientConfig(base_url=GHOST_URL, api_key="")


def make_tag_payload(slug: str = "sport", name: str | None = None) -> dict[str, Any]:
    return {"id": f"tag-{slug}", "name": name or slug.title(), "slug": slug, "description": None}


def make_post_payload(slug: str = "my-article", **overrides: Any) -> dict[str, Any]:
    tag = make_tag_payload()
    payload: dict[str, Any] = {
        "id": f"id-{slug}",
        "uuid": f"uuid-{slug}",
        "slug": slug,
        "title": slug.replace("-", " ").title(),
        "excerpt": "Short excerpt",
        "feature_image": None,
        "featured": False,
        "published_at": "2026-10-01T08:30:00.000+00:00",
        "updated_at": "2026-10-01T09:00:00.000+00:00",
        "tags": [tag],
        "primary_tag": tag,
        "url": f"{GHOST_URL}/{slug}/",
        "canonical_url": None,
        "visibility": "public",
    }
    payload.update(overrides)
    return payload


def make_posts_response(*slugs: str, page: int = 1, pages: int = 1) -> dict[str, Any]:
    return {
        "posts": [make_post_payload(slug) for slug in slugs],
        "meta": {
            "pagination": {
                "page": page,
                "limit": 10,
                "pages": pages,
                "total": len(slugs),
                "next": page + 1 if page < pages else None,
                "prev": page - 1 if page > 1 else None,
            }
        },
    }


class RecordingTransport:
    """httpx transport stand-in that records requests and replies via a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    return RecordingTransport


@pytest.fixture
def post_payload() -> Callable[..., dict[str, Any]]:
    return make_post_payload


@pytest.fixture
def posts_response() -> Callable[..., dict[str, Any]]:
    return make_posts_response
