"""Tests for the Supabase push token store."""

import json

import httpx
import pytest

from newsreader.core.settings import Settings
from newsreader.services.push_tokens import PushTokenStore, get_push_token_store

SUPABASE_URL = "https://abc.supabase.co/"
ANON_KEY = "anon-key"


@pytest.mark.asyncio
async def test_register_upserts_token(make_transport):
    transport = make_transport(lambda request: httpx.Response(201))
    store = PushTokenStore(SUPABASE_URL, ANON_KEY, http_client=transport.client())

    assert await store.register("ExponentPushToken[abc]") is True

    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url).startswith("https://abc.supabase.co/rest/v1/push_tokens")
    assert request.url.params["on_conflict"] == "token"
    assert request.headers["apikey"] == ANON_KEY
    assert request.headers["authorization"] == f"Bearer {ANON_KEY}"
    assert "resolution=merge-duplicates" in request.headers["prefer"]

    row = json.loads(request.content)
    assert row["token"] == "ExponentPushToken[abc]"
    assert row["platform"] == "expo"
    assert "updated_at" in row


@pytest.mark.asyncio
async def test_unregister_deactivates_token(make_transport):
    transport = make_transport(lambda request: httpx.Response(204))
    store = PushTokenStore(SUPABASE_URL, ANON_KEY, http_client=transport.client())

    assert await store.unregister("ExponentPushToken[abc]") is True

    request = transport.requests[0]
    assert request.method == "PATCH"
    assert request.url.params["token"] == "eq.ExponentPushToken[abc]"
    assert json.loads(request.content) == {"active": False}


@pytest.mark.asyncio
async def test_backend_rejection_returns_false(make_transport):
    transport = make_transport(
        lambda request: httpx.Response(401, json={"message": "Invalid API key"})
    )
    store = PushTokenStore(SUPABASE_URL, ANON_KEY, http_client=transport.client())

    assert await store.register("token") is False


@pytest.mark.asyncio
async def test_transport_failure_returns_false(make_transport):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    store = PushTokenStore(SUPABASE_URL, ANON_KEY, http_client=make_transport(handler).client())

    assert await store.register("token") is False


@pytest.mark.asyncio
async def test_unconfigured_store_skips_network(make_transport):
    transport = make_transport(lambda request: httpx.Response(201))
    store = PushTokenStore("", "", http_client=transport.client())

    assert store.is_configured() is False
    assert await store.register("token") is False
    assert transport.call_count == 0


def test_store_is_built_from_settings(mocker):
    settings = Settings(
        _env_file=None,
        supabase_url=" https://project.supabase.co/ ",
        supabase_anon_key="anon",
    )
    mocker.patch("newsreader.services.push_tokens.get_settings", return_value=settings)

    store = get_push_token_store()

    assert store.is_configured() is True
    assert store.table_url == "https://project.supabase.co/rest/v1/push_tokens"
