"""
Google Auth - OAuth consent and code exchange for Google Ads and Search Console
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, List
import logging

from app.core.dependencies import (
    get_ad_account_repository,
    get_events,
    get_google_ads_provider,
    get_oauth_service,
    get_search_console,
    get_token_repository,
)
from app.models.requests import GoogleAuthRequest
from app.services.auth.google_oauth import (
    ADS_SCOPE,
    SEARCH_CONSOLE_SCOPE,
    GoogleOAuthService,
)
from app.services.events.notification_bus import Event, EventType, NotificationBus
from app.services.providers.google_ads import GoogleAdsProvider
from app.services.providers.search_console import SearchConsoleProvider
from app.services.storage import AdAccountRepository, TokenRepository
from app.utils.error_handlers import ConfigurationError, ProviderError, ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)

SCOPES = {
    "ads": ADS_SCOPE,
    "search_console": SEARCH_CONSOLE_SCOPE,
    "all": f"{ADS_SCOPE} {SEARCH_CONSOLE_SCOPE}",
}


@router.get("/google/authorize")
async def authorize(
    redirect_origin: str = Query(..., description="Front-end origin, e.g. https://app.example.com"),
    user_id: str = Query(...),
    scope: str = Query("all", description="Scope set: ads, search_console, all"),
    oauth: GoogleOAuthService = Depends(get_oauth_service)
) -> Dict[str, str]:
    """
    Google consent URL with a single-use CSRF state
    """
    if scope not in SCOPES:
        raise ValidationError(f"Unknown scope '{scope}'. Use one of: {', '.join(SCOPES)}")
    return await oauth.build_authorization_url(redirect_origin, SCOPES[scope], user_id)


@router.post("/google/auth")
async def google_auth(
    request: GoogleAuthRequest,
    oauth: GoogleOAuthService = Depends(get_oauth_service),
    tokens: TokenRepository = Depends(get_token_repository),
    accounts: AdAccountRepository = Depends(get_ad_account_repository),
    ads: GoogleAdsProvider = Depends(get_google_ads_provider),
    search_console: SearchConsoleProvider = Depends(get_search_console),
    events: NotificationBus = Depends(get_events)
) -> Dict[str, Any]:
    """
    Client id lookup and authorization-code exchange

    `get_client_id` returns the configured client id. `exchange_code`
    verifies the state and stores the tokens. The reachable Google Ads
    accounts are synced, and so are the Search Console sites when the
    webmasters scope was granted.
    """
    if request.action == "get_client_id":
        return {"client_id": oauth.require_client_id()}

    stored_state = await oauth.verify_state(request.state)
    user_id = request.user_id or stored_state.get("user_id")
    if not user_id:
        raise ValidationError("User ID is required")
    if stored_state.get("user_id") and stored_state["user_id"] != user_id:
        raise ValidationError("OAuth state belongs to a different user")

    redirect_uri = request.redirect_uri or stored_state.get("redirect_uri")
    token_data = await oauth.exchange_code(request.code, redirect_uri)
    await tokens.upsert(user_id, token_data)

    await events.publish(Event(EventType.GOOGLE_OAUTH_SUCCESS, user_id))

    connected_accounts = await _load_ads_accounts(user_id, token_data["access_token"], ads, accounts)
    await events.publish(Event(
        EventType.GOOGLE_ADS_CONNECTED, user_id, {"account_count": len(connected_accounts)}
    ))
    await events.publish(Event(
        EventType.GOOGLE_ADS_ACCOUNTS_LOADED, user_id, {"accounts": connected_accounts}
    ))

    sites = []
    if SEARCH_CONSOLE_SCOPE in (token_data.get("scope") or "").split():
        sites = await _load_search_console_sites(user_id, token_data["access_token"], search_console, accounts)

    return {
        "success": True,
        "accounts": connected_accounts,
        "sites": sites,
    }


async def _load_ads_accounts(
    user_id: str,
    access_token: str,
    ads: GoogleAdsProvider,
    accounts: AdAccountRepository
) -> List[Dict[str, str]]:
    """Sync reachable accounts; the connection stands even when listing them fails"""
    try:
        found = await ads.list_accessible_customers(access_token)
    except (ConfigurationError, ProviderError) as e:
        logger.warning(f"Could not list Google Ads accounts for user {user_id}: {str(e)}")
        return []

    await accounts.sync(user_id, "google", found)
    return found


async def _load_search_console_sites(
    user_id: str,
    access_token: str,
    search_console: SearchConsoleProvider,
    accounts: AdAccountRepository
) -> List[Dict[str, str]]:
    try:
        found = await search_console.list_sites(access_token)
    except ProviderError as e:
        logger.warning(f"Could not list Search Console sites for user {user_id}: {str(e)}")
        return []

    await accounts.sync(user_id, "google_search_console", found)
    return found
