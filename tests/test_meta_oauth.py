"""
Tests for the Meta OAuth service and the shared OAuth state store.
"""

from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.services.auth.meta_oauth import (
    META_ADS_SCOPE,
    STATE_KEY,
    MetaOAuthService,
    ad_account_from_row,
)
from app.services.auth.oauth_state import OAuthStateStore
from app.utils.error_handlers import CacheError, ConfigurationError, ProviderError, ValidationError


def make_cache(stored=None, set_ok=True):
    cache = MagicMock()
    cache.set = AsyncMock(return_value=set_ok)
    cache.pop = AsyncMock(return_value=stored)
    return cache


def graph_handler(request: httpx.Request) -> httpx.Response:
    assert request.url.host == "graph.facebook.com"
    if request.url.path.endswith("/oauth/access_token"):
        form = parse_qs(request.content.decode())
        if form["code"] == ["bad-code"]:
            return httpx.Response(400, json={"error": {"message": "Invalid verification code format."}})
        if form["code"] == ["empty-code"]:
            return httpx.Response(200, json={"token_type": "bearer"})
        return httpx.Response(200, json={"access_token": "meta-token", "token_type": "bearer"})

    if request.url.path.endswith("/me/adaccounts"):
        assert request.headers["Authorization"] == "Bearer meta-token"
        assert request.url.params["fields"] == "id,name,account_id"
        return httpx.Response(200, json={"data": [
            {"id": "act_111", "account_id": "111", "name": "Acme Main"},
            {"id": "act_222"},
        ]})

    return httpx.Response(404, json={"error": {"message": "Unknown path"}})


def make_service(mock_http, cache=None, app_id="app-id", app_secret="app-secret", handler=graph_handler):
    return MetaOAuthService(
        client=mock_http(handler),
        cache=cache or make_cache(),
        app_id=app_id,
        app_secret=app_secret,
    )


class TestOAuthStateStore:

    async def test_issue_and_consume(self):
        cache = make_cache(stored={"user_id": "user-1"})
        store = OAuthStateStore(cache, "test:{state}", ttl=30)

        state = await store.issue({"user_id": "user-1"})

        cache.set.assert_awaited_once_with(f"test:{state}", {"user_id": "user-1"}, ttl=30)
        assert await store.consume(state) == {"user_id": "user-1"}
        cache.pop.assert_awaited_once_with(f"test:{state}")

    async def test_unstored_state_raises(self):
        store = OAuthStateStore(make_cache(set_ok=False), "test:{state}")
        with pytest.raises(CacheError):
            await store.issue({})

    async def test_reused_state_rejected(self):
        store = OAuthStateStore(make_cache(stored=None), "test:{state}")
        with pytest.raises(ValidationError, match="Invalid or expired"):
            await store.consume("already-used")


class TestMetaAuthorizationUrl:

    async def test_dialog_url(self, mock_http):
        cache = make_cache()
        service = make_service(mock_http, cache)

        result = await service.build_authorization_url("https://app.example.com/", "user-1")

        parsed = urlparse(result["url"])
        params = parse_qs(parsed.query)
        assert parsed.netloc == "www.facebook.com"
        assert parsed.path.endswith("/dialog/oauth")
        assert result["redirect_uri"] == "https://app.example.com/meta-callback"
        assert params["client_id"] == ["app-id"]
        assert params["scope"] == [META_ADS_SCOPE]
        assert params["state"] == [result["state"]]

        key, value = cache.set.call_args.args
        assert key == STATE_KEY.format(state=result["state"])
        assert value == {"user_id": "user-1", "redirect_uri": result["redirect_uri"]}

    async def test_missing_app_id(self, mock_http):
        service = make_service(mock_http, app_id="")
        with pytest.raises(ConfigurationError):
            await service.build_authorization_url("https://app.example.com", "user-1")


class TestMetaTokenExchange:

    async def test_exchange_code(self, mock_http):
        token = await make_service(mock_http).exchange_code("good-code", "https://app.example.com/meta-callback")
        assert token["access_token"] == "meta-token"

    async def test_exchange_error_message(self, mock_http):
        with pytest.raises(ProviderError) as exc_info:
            await make_service(mock_http).exchange_code("bad-code", "https://app.example.com/meta-callback")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid verification code format."

    async def test_response_without_token(self, mock_http):
        with pytest.raises(ProviderError, match="Failed to get access token"):
            await make_service(mock_http).exchange_code("empty-code", "https://app.example.com/meta-callback")

    async def test_missing_secret(self, mock_http):
        service = make_service(mock_http, app_secret="")
        with pytest.raises(ConfigurationError):
            await service.exchange_code("good-code", "https://app.example.com/meta-callback")

    async def test_missing_code(self, mock_http):
        with pytest.raises(ValidationError):
            await make_service(mock_http).exchange_code("", "https://app.example.com/meta-callback")


class TestMetaAdAccounts:

    def test_account_from_row(self):
        assert ad_account_from_row({"id": "act_42", "name": "Shop"}) == {
            "account_id": "42", "account_name": "Shop",
        }

    async def test_list_ad_accounts(self, mock_http):
        accounts = await make_service(mock_http).list_ad_accounts("meta-token")

        assert accounts == [
            {"account_id": "111", "account_name": "Acme Main"},
            {"account_id": "222", "account_name": "Meta Ad Account act_222"},
        ]

    async def test_list_error_raises(self, mock_http):
        service = make_service(
            mock_http,
            handler=lambda request: httpx.Response(400, json={"error": {"message": "Invalid OAuth access token"}}),
        )
        with pytest.raises(ProviderError):
            await service.list_ad_accounts("expired")
