"""Ghost Content API client: the single module for all post fetching."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from newsreader.config import ClientConfig, get_client_config
from newsreader.core.logging import get_logger
from newsreader.core.settings import get_settings
from newsreader.models.ghost import FeedPage, FeedQuery, Pagination, Post
from newsreader.utils.error_logger import log_http_error

logger = get_logger(__name__)

POSTS_INCLUDE = "tags"
POST_FORMATS = ("html", "plaintext")


class GhostApiError(Exception):
    """Base class for content client failures."""


class NotConfiguredError(GhostApiError):
    """Raised when the client is used without a base URL or API key."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Ghost API not configured. Set GHOST_URL and GHOST_CONTENT_API_KEY."
        )


class NotFoundError(GhostApiError):
    """Raised when no post matches the requested slug."""

    def __init__(self, slug: str, message: str | None = None) -> None:
        super().__init__(message or f"Post not found: {slug}")
        self.slug = slug


class BackendError(GhostApiError):
    """Transport or backend failure, carrying the backend's message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _extract_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        errors = payload.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            message = errors[0].get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
    text = response.text.strip()
    return text[:200] if text else f"HTTP {response.status_code}"


class GhostContentClient:
    """Async wrapper over the Ghost Content API posts endpoints.

    Each call is a single fetch-and-shape; retry, refresh and caching
    policy belong to the caller.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self.config = config
        self._timeout = timeout if timeout is not None else get_settings().http_timeout_seconds
        self._client = http_client
        self._owns_client = http_client is None

    def is_configured(self) -> bool:
        """Return True when both base URL and API key are set."""
        return self.config.is_configured

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._client is not None and self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> GhostContentClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def list_posts(self, query: FeedQuery | None = None) -> FeedPage:
        """Fetch the latest posts for the feed, optionally scoped to one tag.

        Args:
            query: Page size and optional tag slug (defaults to 10 posts, no tag).

        Returns:
            FeedPage in backend order.

        Raises:
            NotConfiguredError: Client has no base URL or API key.
            BackendError: Transport failure or unexpected backend response.
        """
        if not self.is_configured():
            raise NotConfiguredError()

        query = query or FeedQuery()
        params: dict[str, Any] = {"limit": query.limit, "include": POSTS_INCLUDE}
        if query.tag:
            params["filter"] = f"tag:{query.tag}"

        payload = await self._request_json("/posts/", params, operation="list_posts")
        return self._shape_page(payload)

    async def get_post(self, slug: str | None) -> Post | None:
        """Fetch a single post by slug with rendered and plain-text bodies.

        An empty slug is the "missing article" case and returns None without
        contacting the backend.

        Raises:
            NotConfiguredError: Client has no base URL or API key.
            NotFoundError: No post has this slug.
            BackendError: Transport failure or unexpected backend response.
        """
        if not slug:
            return None
        if not self.is_configured():
            raise NotConfiguredError()

        params = {"include": POSTS_INCLUDE, "formats": ",".join(POST_FORMATS)}
        try:
            payload = await self._request_json(
                f"/posts/slug/{quote(slug, safe='')}/", params, operation="get_post"
            )
        except BackendError as e:
            if e.status_code == 404:
                raise NotFoundError(slug, str(e)) from e
            raise

        posts = payload.get("posts")
        if not isinstance(posts, list) or not posts:
            raise NotFoundError(slug)
        try:
            return Post.model_validate(posts[0])
        except ValidationError as e:
            raise BackendError(f"Unexpected post payload for {slug}: {e}") from e

    async def _request_json(
        self,
        path: str,
        params: dict[str, Any],
        *,
        operation: str,
    ) -> dict[str, Any]:
        url = f"{self.config.api_root}{path}"
        request_params = {"key": self.config.api_key, **params}
        headers = {
            "Accept": "application/json",
            "Accept-Version": self.config.api_version,
        }

        logger.debug(
            "Ghost request %s %s",
            operation,
            path,
            extra={"component": "ghost_api", "operation": operation},
        )
        try:
            response = await self._get_client().get(url, params=request_params, headers=headers)
        except httpx.HTTPError as e:
            log_http_error("ghost_api", url, error=e, operation=operation)
            raise BackendError(str(e) or type(e).__name__) from e

        if response.status_code >= 400:
            message = _extract_error_message(response)
            if response.status_code != 404:
                log_http_error(
                    "ghost_api",
                    url,
                    response=response,
                    operation=operation,
                    context={"status_code": response.status_code},
                )
            raise BackendError(message, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            log_http_error("ghost_api", url, response=response, error=e, operation=operation)
            raise BackendError(f"Malformed JSON from Ghost API: {e}") from e
        if not isinstance(payload, dict):
            raise BackendError("Unexpected Ghost API response payload")
        return payload

    @staticmethod
    def _shape_page(payload: dict[str, Any]) -> FeedPage:
        posts = payload.get("posts")
        if not isinstance(posts, list):
            raise BackendError("Ghost API response missing posts")

        pagination = None
        meta = payload.get("meta")
        if isinstance(meta, dict) and isinstance(meta.get("pagination"), dict):
            try:
                pagination = Pagination.model_validate(meta["pagination"])
            except ValidationError:
                logger.warning("Ignoring malformed pagination metadata: %s", meta["pagination"])

        try:
            return FeedPage(
                posts=[Post.model_validate(item) for item in posts],
                pagination=pagination,
            )
        except ValidationError as e:
            raise BackendError(f"Unexpected posts payload: {e}") from e


_ghost_client: GhostContentClient | None = None


def get_ghost_client() -> GhostContentClient:
    """Return a cached client built from the process-wide configuration."""
    global _ghost_client
    if _ghost_client is None:
        config = get_client_config()
        _ghost_client = GhostContentClient(config)
        if not config.is_configured:
            logger.warning("Ghost API not configured, content requests will fail")
    return _ghost_client
