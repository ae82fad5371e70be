"""Tests for the Ghost Content API client."""

import httpx
import pytest
from pydantic import ValidationError

from newsreader.config import ClientConfig
from newsreader.models.ghost import FeedQuery
from newsreader.services.ghost_api import (
    BackendError,
    GhostContentClient,
    NotConfiguredError,
    NotFoundError,
)


def _json(payload, status_code=200):
    return lambda request: httpx.Response(status_code, json=payload)


class TestIsConfigured:
    @pytest.mark.parametrize(
        "base_url,api_key,expected",
        [
            ("https://your-ghost-site.com", "key", True),
            ("https://your-ghost-site.com", "", False),
            ("", "key", False),
            ("", "", False),
            ("https://your-ghost-site.com", "   ", False),
        ],
    )
    def test_requires_url_and_key(self, base_url, api_key, expected):
        client = GhostContentClient(ClientConfig(base_url=base_url, api_key=api_key), timeout=1.0)
        assert client.is_configured() is expected
        assert client.is_configured() is expected


class TestListPosts:
    @pytest.mark.asyncio
    async def test_default_query(self, client_config, make_transport, posts_response):
        transport = make_transport(_json(posts_response("first", "second")))
        client = GhostContentClient(client_config, http_client=transport.client())

        page = await client.list_posts()

        assert transport.call_count == 1
        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/ghost/api/content/posts/"
        assert request.url.params["key"] == "test-content-key"
        assert request.url.params["limit"] == "10"
        assert request.url.params["include"] == "tags"
        assert "filter" not in request.url.params
        assert request.headers["accept-version"] == "v6.0"

        assert [post.slug for post in page] == ["first", "second"]
        assert page.pagination is not None and page.pagination.total == 2
        assert page[0].tags[0].slug == "sport"

    @pytest.mark.asyncio
    async def test_tag_filter_scopes_to_single_tag(
        self, client_config, make_transport, posts_response
    ):
        transport = make_transport(_json(posts_response("match")))
        client = GhostContentClient(client_config, http_client=transport.client())

        await client.list_posts(FeedQuery(tag="sport", limit=5))

        assert transport.call_count == 1
        params = transport.requests[0].url.params
        assert params["filter"] == "tag:sport"
        assert params["limit"] == "5"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tag", ["sport,ekonomi", "sport+featured:true"])
    async def test_combined_tag_filters_never_reach_backend(
        self, client_config, make_transport, posts_response, tag
    ):
        transport = make_transport(_json(posts_response("match")))
        client = GhostContentClient(client_config, http_client=transport.client())

        with pytest.raises(ValidationError):
            await client.list_posts(FeedQuery(tag=tag))

        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_empty_tag_means_no_filter(self, client_config, make_transport, posts_response):
        transport = make_transport(_json(posts_response()))
        client = GhostContentClient(client_config, http_client=transport.client())

        page = await client.list_posts(FeedQuery(tag=""))

        assert "filter" not in transport.requests[0].url.params
        assert len(page) == 0

    @pytest.mark.asyncio
    async def test_preserves_backend_order(self, client_config, make_transport, posts_response):
        transport = make_transport(_json(posts_response("c", "a", "b", page=1, pages=3)))
        client = GhostContentClient(client_config, http_client=transport.client())

        page = await client.list_posts()

        assert [post.slug for post in page.posts] == ["c", "a", "b"]
        assert page.has_more is True

    @pytest.mark.asyncio
    async def test_missing_meta_is_tolerated(self, client_config, make_transport, post_payload):
        transport = make_transport(_json({"posts": [post_payload("only")]}))
        client = GhostContentClient(client_config, http_client=transport.client())

        page = await client.list_posts()

        assert page.pagination is None
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_not_configured_fails_before_network(self, unconfigured_config, make_transport):
        transport = make_transport(_json({"posts": []}))
        client = GhostContentClient(unconfigured_config, http_client=transport.client())

        with pytest.raises(NotConfiguredError):
            await client.list_posts(FeedQuery(tag="sport"))

        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_backend_error_carries_message(self, client_config, make_transport):
        transport = make_transport(
            _json({"errors": [{"message": "Unknown Content API Key", "type": "UnauthorizedError"}]}, 401)
        )
        client = GhostContentClient(client_config, http_client=transport.client())

        with pytest.raises(BackendError) as excinfo:
            await client.list_posts()

        assert str(excinfo.value) == "Unknown Content API Key"
        assert excinfo.value.status_code == 401
        assert transport.call_count == 1

    @pytest.mark.asyncio
    async def test_transport_error_is_backend_error(self, client_config, make_transport):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        transport = make_transport(handler)
        client = GhostContentClient(client_config, http_client=transport.client())

        with pytest.raises(BackendError, match="Connection refused"):
            await client.list_posts()

        # No retries
        assert transport.call_count == 1

    @pytest.mark.asyncio
    async def test_malformed_json_is_backend_error(self, client_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(200, text="<html>oops</html>"))
        client = GhostContentClient(client_config, http_client=transport.client())

        with pytest.raises(BackendError):
            await client.list_posts()

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_backend_error(self, client_config, make_transport):
        transport = make_transport(_json({"posts": [{"slug": "incomplete"}]}))
        client = GhostContentClient(client_config, http_client=transport.client())

        with pytest.raises(BackendError):
            await client.list_posts()


class TestGetPost:
    @pytest.mark.asyncio
    async def test_reads_by_slug_with_formats(self, client_config, make_transport, post_payload):
        payload = post_payload("my-article", html="<p>Body</p>", plaintext="Body")
        transport = make_transport(_json({"posts": [payload]}))
        client = GhostContentClient(client_config, http_client=transport.client())

        post = await client.get_post("my-article")

        request = transport.requests[0]
        assert request.url.path == "/ghost/api/content/posts/slug/my-article/"
        assert request.url.params["include"] == "tags"
        assert request.url.params["formats"] == "html,plaintext"
        assert request.url.params["key"] == "test-content-key"
        assert post is not None
        assert post.slug == "my-article"
        assert post.html == "<p>Body</p>"
        assert post.plaintext == "Body"
        assert post.primary_tag is not None and post.primary_tag.slug == "sport"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["", None])
    async def test_missing_slug_short_circuits(self, client_config, make_transport, slug):
        transport = make_transport(_json({"posts": []}))
        client = GhostContentClient(client_config, http_client=transport.client())

        assert await client.get_post(slug) is None
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_not_configured_fails_before_network(self, unconfigured_config, make_transport):
        transport = make_transport(_json({"posts": []}))
        client = GhostContentClient(unconfigured_config, http_client=transport.client())

        with pytest.raises(NotConfiguredError):
            await client.get_post("my-article")

        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_404_is_not_found(self, client_config, make_transport):
        transport = make_transport(
            _json(
                {"errors": [{"message": "Resource not found error, cannot read post.", "type": "NotFoundError"}]},
                404,
            )
        )
        client = GhostContentClient(client_config, http_client=transport.client())

        with pytest.raises(NotFoundError) as excinfo:
            await client.get_post("gone")

        assert excinfo.value.slug == "gone"
        assert "not found" in str(excinfo.value).lower()

    @pytest.mark.asyncio
    async def test_empty_posts_is_not_found(self, client_config, make_transport):
        transport = make_transport(_json({"posts": []}))
        client = GhostContentClient(client_config, http_client=transport.client())

        with pytest.raises(NotFoundError):
            await client.get_post("gone")

    @pytest.mark.asyncio
    async def test_server_error_is_backend_error(self, client_config, make_transport):
        transport = make_transport(lambda request: httpx.Response(503, text="Service Unavailable"))
        client = GhostContentClient(client_config, http_client=transport.client())

        with pytest.raises(BackendError) as excinfo:
            await client.get_post("my-article")

        assert not isinstance(excinfo.value, NotFoundError)
        assert excinfo.value.status_code == 503
        assert str(excinfo.value) == "Service Unavailable"


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, client_config, make_transport):
        http_client = make_transport(_json({"posts": []})).client()

        async with GhostContentClient(client_config, http_client=http_client):
            pass

        assert http_client.is_closed is False
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self, client_config):
        client = GhostContentClient(client_config, timeout=1.0)
        http_client = client._get_client()

        await client.aclose()

        assert http_client.is_closed is True

    def test_get_ghost_client_is_cached(self, mocker, client_config):
        from newsreader.services import ghost_api as module

        mocker.patch.object(module, "_ghost_client", None)
        mocker.patch.object(module, "get_client_config", return_value=client_config)

        first = module.get_ghost_client()
        second = module.get_ghost_client()

        assert first is second
        assert first.config is client_config
