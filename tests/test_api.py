"""
Tests for the HTTP surface.

Routers run under FastAPI's TestClient with dependency overrides; the
lifespan hook is not started, so no MongoDB or Redis is needed.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core import dependencies
from app.main import app
from app.models.seo import SerpResult
from app.services.aggregators.seo_aggregator import SEOAggregator
from app.services.aggregators.seo_session import SessionRegistry
from app.services.auth.google_oauth import ADS_SCOPE, SEARCH_CONSOLE_SCOPE, GoogleOAuthService
from app.services.auth.meta_oauth import MetaOAuthService
from app.services.events.notification_bus import NotificationBus
from app.services.providers.google_ads import GoogleAdsProvider
from app.services.providers.search_console import SearchConsoleProvider
from app.services.providers.serp_api import DEMO_DATA_NOTE, SerpApiProvider
from app.utils.error_handlers import ProviderError


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def offline_client() -> httpx.AsyncClient:
    def fail(request):
        raise AssertionError(f"unexpected request to {request.url}")

    return httpx.AsyncClient(transport=httpx.MockTransport(fail))


class TestSystem:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"
        assert "X-Process-Time" in response.headers


class TestSeoEndpoints:

    def test_serp_demo_data(self, client):
        app.dependency_overrides[dependencies.get_serp_provider] = lambda: SerpApiProvider(
            client=offline_client(), api_key=""
        )

        response = client.post("/api/v1/seo/serp", json={"website_url": "acme.com", "enhanced": True})

        body = response.json()
        assert response.status_code == 200
        assert body["note"] == DEMO_DATA_NOTE
        assert body["keywords"][0]["difficulty_level"] in ("Low", "Medium", "High")
        assert body["stats"]["total_keywords"] == len(body["keywords"])

    def test_serp_requires_website(self, client):
        app.dependency_overrides[dependencies.get_serp_provider] = lambda: SerpApiProvider(
            client=offline_client(), api_key="key"
        )

        response = client.post("/api/v1/seo/serp", json={"website_url": ""})

        assert response.status_code == 400
        assert response.json()["message"] == "Website URL is required"

    def test_stats(self, client):
        response = client.post("/api/v1/seo/stats", json={"keywords": [
            {"keyword": "a", "position": 2, "estimated_visits": 10},
            {"keyword": "b", "position": 45, "estimated_visits": 5},
        ]})

        body = response.json()
        assert body["stats"]["visibility_score"] == 50
        assert body["stats"]["avg_position"] == "23.5"
        assert body["rankings"]["top_3"] == 1
        assert body["rankings"]["top_50"] == 1

    def test_stats_empty(self, client):
        response = client.post("/api/v1/seo/stats", json={"keywords": []})
        assert response.json()["stats"]["avg_position"] == "0.0"

    def test_meta_data_requires_list(self, client):
        response = client.post("/api/v1/seo/meta-data", json={"urls": "https://acme.com"})
        assert response.status_code == 400
        assert response.json()["message"] == "URLs array is required"

    def test_competitor_analysis(self, client):
        response = client.get("/api/v1/seo/competitors/analysis", params={"url": "rival.com", "limit": 20})

        body = response.json()
        assert body["domain"] == "rival.com"
        assert len(body["keywords"]) == 20
        assert body["overview"]["organic_keywords"] == 20


def override_seo(serp_result=None, serp_error=None):
    search_console = MagicMock()
    search_console.name = "google_search_console"
    search_console.fetch = AsyncMock()
    serp = MagicMock()
    serp.fetch = AsyncMock(return_value=serp_result, side_effect=serp_error)
    scraper = MagicMock()
    scraper.fetch = AsyncMock(return_value=[])

    registry = SessionRegistry(SEOAggregator(search_console, serp, scraper))
    app.dependency_overrides[dependencies.get_session_registry] = lambda: registry
    app.dependency_overrides[dependencies.get_optional_token_repository] = lambda: None
    app.dependency_overrides[dependencies.get_oauth_service] = lambda: MagicMock()
    return registry


class TestSeoDashboard:

    def test_refresh_without_google_uses_serp(self, client):
        override_seo(serp_result=SerpResult(keywords=[{"keyword": "acme", "position": 4}]))

        response = client.post("/api/v1/seo/refresh", json={"user_id": "user-1", "website": "acme.com"})

        body = response.json()
        assert response.status_code == 200
        assert body["selected_website"] == "acme.com"
        assert body["result"]["source"] == "serp_api"
        assert body["result"]["keywords"][0]["keyword"] == "acme"

        state = client.get("/api/v1/seo/state", params={"user_id": "user-1"}).json()
        assert state["result"]["source"] == "serp_api"
        assert state["request_token"] == 1

    def test_both_sources_fail(self, client):
        override_seo(serp_error=ProviderError("serp_api", "quota exceeded", 429))

        response = client.post("/api/v1/seo/refresh", json={"user_id": "user-1", "website": "acme.com"})

        body = response.json()
        assert response.status_code == 502
        assert body["provider"] == "serp_api"
        assert body["upstream_status"] == 429

        state = client.get("/api/v1/seo/state", params={"user_id": "user-1"}).json()
        assert state["result"] is None
        assert "quota exceeded" in state["last_error"]

    def test_blank_website_rejected(self, client):
        override_seo()
        response = client.post("/api/v1/seo/website", json={"user_id": "user-1", "website": " "})
        assert response.status_code == 400

    def test_start_after_end_rejected(self, client):
        override_seo()
        response = client.post("/api/v1/seo/refresh", json={
            "user_id": "user-1", "website": "acme.com",
            "start_date": "2024-02-01", "end_date": "2024-01-01",
        })
        assert response.status_code == 400


def token_handler(request):
    token = {"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3599}
    if b"code=gsc-code" in request.content:
        token["scope"] = f"{ADS_SCOPE} {SEARCH_CONSOLE_SCOPE}"
    return httpx.Response(200, json=token)


def ads_handler(request):
    if request.url.path.endswith("customers:listAccessibleCustomers"):
        return httpx.Response(200, json={"resourceNames": ["customers/111"]})
    return httpx.Response(200, json={"descriptiveName": "Main Account"})


def sites_handler(request):
    assert request.url.path.endswith("/webmasters/v3/sites")
    return httpx.Response(200, json={"siteEntry": [{"siteUrl": "https://acme.com/"}]})


class TestGoogleAuth:

    @pytest.fixture
    def wiring(self, mongo):
        db, collections = mongo
        cache = MagicMock()
        cache.set = AsyncMock(return_value=True)
        cache.pop = AsyncMock(return_value={"user_id": "user-1", "redirect_uri": "https://app/google-callback"})
        oauth = GoogleOAuthService(
            client=httpx.AsyncClient(transport=httpx.MockTransport(token_handler)),
            cache=cache,
            client_id="client-id",
            client_secret="secret",
        )
        ads = GoogleAdsProvider(
            client=httpx.AsyncClient(transport=httpx.MockTransport(ads_handler)),
            developer_token="dev-token",
        )
        bus = NotificationBus()
        for name in ("api_tokens", "ad_accounts"):
            db[name]

        app.dependency_overrides[dependencies.get_db] = lambda: db
        app.dependency_overrides[dependencies.get_oauth_service] = lambda: oauth
        app.dependency_overrides[dependencies.get_google_ads_provider] = lambda: ads
        app.dependency_overrides[dependencies.get_search_console] = lambda: SearchConsoleProvider(
            client=httpx.AsyncClient(transport=httpx.MockTransport(sites_handler))
        )
        app.dependency_overrides[dependencies.get_events] = lambda: bus
        return collections, bus

    def test_get_client_id(self, client, wiring):
        response = client.post("/api/v1/ads/google/auth", json={"action": "get_client_id"})
        assert response.json() == {"client_id": "client-id"}

    def test_exchange_code(self, client, wiring):
        collections, bus = wiring

        response = client.post("/api/v1/ads/google/auth", json={
            "action": "exchange_code", "code": "auth-code", "state": "abc",
        })

        body = response.json()
        assert response.status_code == 200
        assert body["accounts"] == [{"account_id": "111", "account_name": "Main Account"}]
        assert body["sites"] == []

        token_filter, token_update = collections["api_tokens"].update_one.call_args.args
        assert token_filter == {"user_id": "user-1", "provider": "google"}
        assert token_update["$set"]["refresh_token"] == "refresh-1"
        assert collections["ad_accounts"].update_one.await_count == 1

        assert [event.type.value for event in bus.recent("user-1")] == [
            "google-oauth-success",
            "google-ads-connected",
            "google-ads-accounts-loaded",
        ]

    def test_exchange_syncs_search_console_sites(self, client, wiring):
        collections, _ = wiring

        response = client.post("/api/v1/ads/google/auth", json={
            "action": "exchange_code", "code": "gsc-code", "state": "abc",
        })

        assert response.json()["sites"] == [{"account_id": "https://acme.com/", "account_name": "acme.com"}]
        platforms = [call.args[0]["platform"] for call in collections["ad_accounts"].update_one.call_args_list]
        assert platforms == ["google", "google_search_console"]

    def test_exchange_requires_state(self, client, wiring):
        response = client.post("/api/v1/ads/google/auth", json={"action": "exchange_code", "code": "auth-code"})
        assert response.status_code == 400

    def test_authorize_unknown_scope(self, client, wiring):
        response = client.get("/api/v1/ads/google/authorize", params={
            "redirect_origin": "https://app", "user_id": "user-1", "scope": "gmail",
        })
        assert response.status_code == 400

    def test_select_unknown_account(self, client, wiring):
        _, bus = wiring

        response = client.post("/api/v1/ads/accounts/select", json={"user_id": "user-1", "account_id": "999"})
        assert response.status_code == 400
        assert bus.recent("user-1") == []

    def test_select_account(self, client, wiring):
        collections, bus = wiring
        collections["ad_accounts"].find_one.return_value = {
            "_id": "doc-1", "user_id": "user-1", "platform": "google", "account_id": "111",
        }

        response = client.post("/api/v1/ads/accounts/select", json={"user_id": "user-1", "account_id": "111"})

        assert response.json()["account"]["is_selected"] is True
        event = bus.recent("user-1")[0]
        assert event.type.value == "google-ads-account-selected"
        assert event.payload["account_id"] == "111"


def graph_handler(request):
    if request.url.path.endswith("/oauth/access_token"):
        return httpx.Response(200, json={"access_token": "meta-token", "token_type": "bearer"})
    if request.url.path.endswith("/me/adaccounts"):
        return httpx.Response(200, json={"data": [{"id": "act_555", "account_id": "555", "name": "Shop Ads"}]})
    return httpx.Response(400, json={"error": {"message": "(#100) Unsupported request"}})


class TestMetaAuth:

    @pytest.fixture
    def wiring(self, mongo):
        db, collections = mongo
        cache = MagicMock()
        cache.set = AsyncMock(return_value=True)
        cache.pop = AsyncMock(return_value={"user_id": "user-1", "redirect_uri": "https://app/meta-callback"})
        oauth = MetaOAuthService(
            client=httpx.AsyncClient(transport=httpx.MockTransport(graph_handler)),
            cache=cache,
            app_id="app-id",
            app_secret="app-secret",
        )
        for name in ("api_tokens", "ad_accounts"):
            db[name]

        app.dependency_overrides[dependencies.get_db] = lambda: db
        app.dependency_overrides[dependencies.get_meta_oauth_service] = lambda: oauth
        return collections, cache

    def test_authorize(self, client, wiring):
        response = client.get("/api/v1/ads/meta/authorize", params={
            "redirect_origin": "https://app", "user_id": "user-1",
        })

        body = response.json()
        assert response.status_code == 200
        assert body["redirect_uri"] == "https://app/meta-callback"
        assert "facebook.com" in body["url"]

    def test_exchange_stores_token_and_accounts(self, client, wiring):
        collections, _ = wiring

        response = client.post("/api/v1/ads/meta/auth", json={"code": "auth-code", "state": "abc"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "accounts": [{"account_id": "555", "account_name": "Shop Ads"}],
        }

        token_filter, token_update = collections["api_tokens"].update_one.call_args.args
        assert token_filter == {"user_id": "user-1", "provider": "meta"}
        assert token_update["$set"]["access_token"] == "meta-token"

        account_filter = collections["ad_accounts"].update_one.call_args.args[0]
        assert account_filter == {"user_id": "user-1", "platform": "meta", "account_id": "555"}

    def test_invalid_state_rejected(self, client, wiring):
        collections, cache = wiring
        cache.pop.return_value = None

        response = client.post("/api/v1/ads/meta/auth", json={"code": "auth-code", "state": "reused"})

        assert response.status_code == 400
        collections["api_tokens"].update_one.assert_not_called()

    def test_connected_meta_accounts_listed(self, client, wiring):
        collections, _ = wiring
        collections["ad_accounts"].find.return_value.to_list.return_value = [
            {"_id": "doc-1", "user_id": "user-1", "platform": "meta", "account_id": "555", "account_name": "Shop Ads"},
        ]

        response = client.get("/api/v1/ads/accounts", params={"user_id": "user-1", "platform": "meta"})

        assert response.json()["total"] == 1
        assert collections["ad_accounts"].find.call_args.args[0] == {"user_id": "user-1", "platform": "meta"}


def override_store(forms=None, leads=None):
    forms = forms or MagicMock()
    leads = leads or MagicMock()
    app.dependency_overrides[dependencies.get_form_repository] = lambda: forms
    app.dependency_overrides[dependencies.get_lead_repository] = lambda: leads
    return forms, leads


class TestFormWebhook:

    def test_creates_mapped_lead(self, client):
        forms = MagicMock()
        forms.find_by_form_id = AsyncMock(return_value={
            "id": "f-doc", "user_id": "user-1", "form_id": "contact", "website_url": "https://acme.com",
            "field_mappings": [
                {"website_field": "your-name", "lead_field": "name"},
                {"website_field": "your-email", "lead_field": "email"},
                {"website_field": "newsletter", "lead_field": "none"},
                {"website_field": "phone", "lead_field": "phone"},
            ],
        })
        leads = MagicMock()
        leads.create = AsyncMock(return_value={"id": "lead-1"})
        override_store(forms, leads)

        form_data = {"your-name": "Ann", "your-email": "ann@example.com", "newsletter": "yes", "phone": ""}
        response = client.post("/api/v1/forms/webhook", json={"form_id": "contact", "form_data": form_data})

        assert response.json() == {"success": True, "lead_id": "lead-1"}
        lead = leads.create.call_args.args[0]
        assert lead["name"] == "Ann"
        assert lead["email"] == "ann@example.com"
        assert "none" not in lead
        assert "phone" not in lead
        assert lead["user_id"] == "user-1"
        assert lead["source"] == "website_form"
        assert lead["status"] == "New"
        assert lead["raw_data"] == form_data
        assert lead["website_url"] == "https://acme.com"

    def test_missing_fields(self, client):
        override_store()
        response = client.post("/api/v1/forms/webhook", json={"form_id": "contact"})
        assert response.status_code == 400

    def test_unknown_form(self, client):
        forms = MagicMock()
        forms.find_by_form_id = AsyncMock(return_value=None)
        override_store(forms)

        response = client.post("/api/v1/forms/webhook", json={"form_id": "ghost", "form_data": {"a": 1}})

        assert response.status_code == 404


class TestLeads:

    def test_invalid_status(self, client):
        leads = MagicMock()
        leads.update = AsyncMock()
        override_store(leads=leads)

        response = client.patch("/api/v1/leads/l1", json={"user_id": "user-1", "status": "Maybe"})

        assert response.status_code == 400
        leads.update.assert_not_called()

    def test_unassign(self, client):
        leads = MagicMock()
        leads.update = AsyncMock(return_value=True)
        leads.get = AsyncMock(return_value={"id": "l1", "assigned_to": None})
        override_store(leads=leads)

        response = client.patch("/api/v1/leads/l1", json={"user_id": "user-1", "assigned_to": ""})

        assert response.status_code == 200
        leads.update.assert_awaited_once_with("l1", "user-1", {"assigned_to": ""})

    def test_update_missing_lead(self, client):
        leads = MagicMock()
        leads.update = AsyncMock(return_value=False)
        override_store(leads=leads)

        response = client.patch("/api/v1/leads/l1", json={"user_id": "user-1", "status": "Lost"})

        assert response.status_code == 404

    def test_list_with_filters(self, client):
        leads = MagicMock()
        leads.list = AsyncMock(return_value=[{"id": "l1"}])
        override_store(leads=leads)

        response = client.get("/api/v1/leads", params={"user_id": "user-1", "assigned_to": "Unassigned"})

        assert response.json()["total"] == 1
        leads.list.assert_awaited_once_with("user-1", status=None, assigned_to="Unassigned", website=None)


class TestExports:

    ROWS = [
        {"keyword": "acme tools", "position": 3.0, "tags": ["brand"]},
        {"keyword": "acme, inc", "position": 12.5},
    ]

    def test_csv(self, client):
        response = client.post("/api/v1/exports/csv", json={"title": "Top Keywords", "rows": self.ROWS})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="top-keywords.csv"' in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == "keyword,position,tags"
        assert lines[1] == 'acme tools,3,"[""brand""]"'
        assert lines[2] == '"acme, inc",12.50,'

    def test_pdf(self, client):
        response = client.post("/api/v1/exports/pdf", json={"title": "Leads", "rows": self.ROWS})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_no_rows(self, client):
        response = client.post("/api/v1/exports/csv", json={"title": "Empty", "rows": []})
        assert response.status_code == 400


class TestInsights:

    PAYLOAD = {"website": "acme.com", "seo_data": {"keywords": [{"keyword": "acme", "position": 3}]}}

    def override(self, cached=None):
        cache = MagicMock()
        cache.get = AsyncMock(return_value=cached)
        cache.set = AsyncMock(return_value=True)
        engine = MagicMock()
        engine.analyze = AsyncMock(return_value={"success": True, "insights": [], "website": "acme.com"})
        app.dependency_overrides[dependencies.get_redis] = lambda: cache
        app.dependency_overrides[dependencies.get_insights_engine] = lambda: engine
        return cache, engine

    def test_generates_and_caches(self, client):
        cache, engine = self.override()

        response = client.post("/api/v1/insights/analyze", json=self.PAYLOAD)

        assert response.json()["success"] is True
        engine.analyze.assert_awaited_once()
        key, value = cache.set.call_args.args
        assert key.startswith("insights:")
        assert cache.set.call_args.kwargs["ttl"] == 900

    def test_cached_response(self, client):
        _, engine = self.override(cached={"success": True, "insights": ["cached"]})

        response = client.post("/api/v1/insights/analyze", json=self.PAYLOAD)

        assert response.json()["insights"] == ["cached"]
        engine.analyze.assert_not_called()

    def test_requires_website(self, client):
        self.override()
        response = client.post("/api/v1/insights/analyze", json={"seo_data": {}})
        assert response.status_code == 400
