"""
Tests for the Google OAuth service and token storage.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.services.auth.google_oauth import (
    ADS_SCOPE,
    STATE_KEY,
    TOKEN_URL,
    GoogleOAuthService,
)
from app.services.storage.base import utcnow
from app.services.storage.token_repository import TokenRepository, is_expired
from app.utils.error_handlers import CacheError, ConfigurationError, ProviderError, ValidationError


def make_cache(stored=None, set_ok=True):
    cache = MagicMock()
    cache.set = AsyncMock(return_value=set_ok)
    cache.pop = AsyncMock(return_value=stored)
    return cache


def token_handler(request: httpx.Request) -> httpx.Response:
    assert str(request.url) == TOKEN_URL
    form = parse_qs(request.content.decode())
    if form["grant_type"] == ["authorization_code"]:
        if form["code"] == ["bad-code"]:
            return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Bad Request"})
        return httpx.Response(200, json={
            "access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3599,
        })
    return httpx.Response(200, json={"access_token": "access-2", "expires_in": 3599})


def make_service(mock_http, cache=None, client_id="client-id", client_secret="secret"):
    return GoogleOAuthService(
        client=mock_http(token_handler),
        cache=cache or make_cache(),
        client_id=client_id,
        client_secret=client_secret,
    )


class TestAuthorizationUrl:

    async def test_consent_url(self, mock_http):
        cache = make_cache()
        service = make_service(mock_http, cache)

        result = await service.build_authorization_url("https://app.example.com/", ADS_SCOPE, "user-1")

        params = parse_qs(urlparse(result["url"]).query)
        assert result["redirect_uri"] == "https://app.example.com/google-callback"
        assert params["client_id"] == ["client-id"]
        assert params["redirect_uri"] == ["https://app.example.com/google-callback"]
        assert params["scope"] == [ADS_SCOPE]
        assert params["response_type"] == ["code"]
        assert params["access_type"] == ["offline"]
        assert params["prompt"] == ["consent"]
        assert params["state"] == [result["state"]]

        key, value = cache.set.call_args.args
        assert key == STATE_KEY.format(state=result["state"])
        assert value == {"user_id": "user-1", "redirect_uri": result["redirect_uri"]}

    async def test_states_are_unique(self, mock_http):
        service = make_service(mock_http)
        first = await service.build_authorization_url("https://app.example.com", ADS_SCOPE)
        second = await service.build_authorization_url("https://app.example.com", ADS_SCOPE)
        assert first["state"] != second["state"]

    async def test_missing_client_id(self, mock_http):
        service = make_service(mock_http, client_id="")
        with pytest.raises(ConfigurationError):
            await service.build_authorization_url("https://app.example.com", ADS_SCOPE)

    async def test_state_not_stored(self, mock_http):
        service = make_service(mock_http, make_cache(set_ok=False))
        with pytest.raises(CacheError):
            await service.build_authorization_url("https://app.example.com", ADS_SCOPE)


class TestStateVerification:

    async def test_valid_state_consumed(self, mock_http):
        cache = make_cache(stored={"user_id": "user-1", "redirect_uri": "https://app/google-callback"})
        service = make_service(mock_http, cache)

        stored = await service.verify_state("abc")

        assert stored["user_id"] == "user-1"
        cache.pop.assert_awaited_once_with(STATE_KEY.format(state="abc"))

    async def test_unknown_state(self, mock_http):
        service = make_service(mock_http, make_cache(stored=None))
        with pytest.raises(ValidationError, match="Invalid or expired"):
            await service.verify_state("abc")

    async def test_missing_state(self, mock_http):
        service = make_service(mock_http)
        with pytest.raises(ValidationError, match="Missing OAuth state"):
            await service.verify_state(None)


class TestTokenExchange:

    async def test_exchange_code(self, mock_http):
        service = make_service(mock_http)
        tokens = await service.exchange_code("good-code", "https://app/google-callback")
        assert tokens["access_token"] == "access-1"
        assert tokens["refresh_token"] == "refresh-1"

    async def test_exchange_failure(self, mock_http):
        service = make_service(mock_http)
        with pytest.raises(ProviderError) as exc_info:
            await service.exchange_code("bad-code", "https://app/google-callback")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Bad Request"

    async def test_missing_code(self, mock_http):
        service = make_service(mock_http)
        with pytest.raises(ValidationError):
            await service.exchange_code("", "https://app/google-callback")

    async def test_missing_secret(self, mock_http):
        service = make_service(mock_http, client_secret="")
        with pytest.raises(ConfigurationError):
            await service.exchange_code("good-code", "https://app/google-callback")

    async def test_refresh(self, mock_http):
        service = make_service(mock_http)
        tokens = await service.refresh_access_token("refresh-1")
        assert tokens["access_token"] == "access-2"


class TestTokenRepository:

    def test_is_expired(self):
        now = utcnow()
        assert is_expired({"expires_at": now + timedelta(seconds=30)}, now)
        assert not is_expired({"expires_at": now + timedelta(minutes=10)}, now)
        assert not is_expired({}, now)
        assert is_expired({"expires_at": (now - timedelta(minutes=1)).isoformat()}, now)

    async def test_upsert_keeps_existing_refresh_token(self, mongo):
        db, collections = mongo
        repository = TokenRepository(db)

        await repository.upsert("user-1", {"access_token": "a", "expires_in": 3600})

        filter_, update = collections["api_tokens"].update_one.call_args.args
        assert filter_ == {"user_id": "user-1", "provider": "google"}
        assert "refresh_token" not in update["$set"]
        assert update["$set"]["access_token"] == "a"
        assert collections["api_tokens"].update_one.call_args.kwargs["upsert"] is True

    async def test_upsert_default_expiry_per_provider(self, mongo):
        db, collections = mongo
        before = utcnow()

        await TokenRepository(db).upsert(
            "user-1", {"access_token": "m"}, provider="meta", default_expires_in=60 * 24 * 60 * 60
        )

        filter_, update = collections["api_tokens"].update_one.call_args.args
        assert filter_ == {"user_id": "user-1", "provider": "meta"}
        assert update["$set"]["expires_at"] - before >= timedelta(days=59)

    async def test_valid_token_returned_without_refresh(self, mongo):
        db, _ = mongo
        db["api_tokens"].find_one.return_value = {
            "_id": "x", "access_token": "a", "expires_at": utcnow() + timedelta(hours=1),
        }
        oauth = MagicMock()
        oauth.refresh_access_token = AsyncMock()

        assert await TokenRepository(db).get_valid_access_token("user-1", oauth) == "a"
        oauth.refresh_access_token.assert_not_called()

    async def test_expired_token_refreshed(self, mongo):
        db, collections = mongo
        db["api_tokens"].find_one.return_value = {
            "_id": "x", "access_token": "old", "refresh_token": "r",
            "expires_at": utcnow() - timedelta(minutes=5),
        }
        oauth = MagicMock()
        oauth.refresh_access_token = AsyncMock(return_value={"access_token": "new", "expires_in": 3600})

        assert await TokenRepository(db).get_valid_access_token("user-1", oauth) == "new"
        oauth.refresh_access_token.assert_awaited_once_with("r")
        update = collections["api_tokens"].update_one.call_args.args[1]
        assert update["$set"]["access_token"] == "new"

    async def test_expired_without_refresh_token(self, mongo):
        db, _ = mongo
        db["api_tokens"].find_one.return_value = {
            "_id": "x", "access_token": "old", "expires_at": utcnow() - timedelta(minutes=5),
        }
        assert await TokenRepository(db).get_valid_access_token("user-1", MagicMock()) is None

    async def test_no_token(self, mongo):
        db, _ = mongo
        assert await TokenRepository(db).get_valid_access_token("user-1", MagicMock()) is None
