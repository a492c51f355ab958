"""
Meta OAuth - Facebook Login consent, token exchange and ad account listing
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode
import logging

import httpx

from app.core.config import settings
from app.services.auth.oauth_state import OAuthStateStore
from app.services.cache.redis_service import RedisService
from app.services.providers.base import BaseProvider
from app.utils.error_handlers import ConfigurationError, ProviderError, ValidationError

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.facebook.com"
DIALOG_BASE_URL = "https://www.facebook.com"
CALLBACK_PATH = "/meta-callback"

META_ADS_SCOPE = "ads_read,business_management"

# Meta sends no refresh token; a long-lived token without expires_in lasts ~60 days
DEFAULT_TOKEN_TTL_SECONDS = 60 * 24 * 60 * 60

STATE_KEY = "oauth:meta:state:{state}"


def ad_account_from_row(row: Dict[str, Any]) -> Dict[str, str]:
    """Graph API ad account -> {"account_id", "account_name"}"""
    account_id = row.get("account_id") or str(row.get("id", "")).replace("act_", "", 1)
    return {
        "account_id": account_id,
        "account_name": row.get("name") or f"Meta Ad Account {row.get('id') or account_id}",
    }


class MetaOAuthService(BaseProvider):
    """
    Authorization-code flow against the Meta Graph API
    """

    name = "meta_oauth"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[RedisService] = None,
        app_id: Optional[str] = None,
        app_secret: Optional[str] = None
    ):
        super().__init__(client)
        self.states = OAuthStateStore(cache or RedisService(), STATE_KEY)
        self.app_id = settings.META_APP_ID if app_id is None else app_id
        self.app_secret = settings.META_APP_SECRET if app_secret is None else app_secret
        self.graph_url = f"{GRAPH_BASE_URL}/{settings.META_GRAPH_API_VERSION}"

    def require_app_id(self) -> str:
        if not self.app_id:
            raise ConfigurationError(
                "Meta App ID not configured in environment variables",
                remediation="Set META_APP_ID in the backend environment.",
            )
        return self.app_id

    def _require_secret(self) -> str:
        self.require_app_id()
        if not self.app_secret:
            raise ConfigurationError(
                "Meta App Secret not configured in environment variables",
                remediation="Set META_APP_SECRET in the backend environment.",
            )
        return self.app_secret

    async def build_authorization_url(
        self,
        redirect_origin: str,
        user_id: Optional[str] = None
    ) -> Dict[str, str]:
        """
        Facebook Login dialog URL for the ads scopes

        Returns:
            {"url", "state", "redirect_uri"}
        """
        app_id = self.require_app_id()
        redirect_uri = redirect_origin.rstrip("/") + CALLBACK_PATH
        state = await self.states.issue({"user_id": user_id, "redirect_uri": redirect_uri})

        params = {
            "client_id": app_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": META_ADS_SCOPE,
            "state": state,
        }
        return {
            "url": f"{DIALOG_BASE_URL}/{settings.META_GRAPH_API_VERSION}/dialog/oauth?{urlencode(params)}",
            "state": state,
            "redirect_uri": redirect_uri,
        }

    async def verify_state(self, state: Optional[str]) -> Dict[str, Any]:
        return await self.states.consume(state)

    async def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """Exchange an authorization code for a Meta access token"""
        if not code:
            raise ValidationError("Missing authorization code")
        if not redirect_uri:
            raise ValidationError("Missing redirect URI")

        response = await self.client.post(
            f"{self.graph_url}/oauth/access_token",
            data={
                "code": code,
                "client_id": self.require_app_id(),
                "client_secret": self._require_secret(),
                "redirect_uri": redirect_uri,
            },
        )
        try:
            token_data = response.json()
        except ValueError:
            token_data = {}

        if not response.is_success or not token_data.get("access_token"):
            error = token_data.get("error")
            message = (error.get("message") if isinstance(error, dict) else error) or "Failed to get access token"
            logger.error(f"Meta OAuth token error ({response.status_code}): {message}")
            raise ProviderError(self.name, message, response.status_code)

        logger.info("Successfully obtained Meta access token")
        return token_data

    async def list_ad_accounts(self, access_token: str) -> List[Dict[str, str]]:
        """Ad accounts reachable with the token"""
        response = await self.client.get(
            f"{self.graph_url}/me/adaccounts",
            params={"fields": "id,name,account_id"},
            headers=self._bearer(access_token),
        )
        self._check_response(response, "me/adaccounts")

        accounts = [ad_account_from_row(row) for row in response.json().get("data") or []]
        logger.info(f"Found {len(accounts)} Meta ad accounts")
        return accounts
