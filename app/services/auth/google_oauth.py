"""
Google OAuth - Consent URLs, CSRF state and token exchange for Google APIs
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode
import logging

import httpx

from app.core.config import settings
from app.services.auth.oauth_state import OAuthStateStore
from app.services.cache.redis_service import RedisService
from app.services.providers.base import BaseProvider
from app.utils.error_handlers import ConfigurationError, ProviderError, ValidationError

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
CALLBACK_PATH = "/google-callback"

ADS_SCOPE = "https://www.googleapis.com/auth/adwords"
SEARCH_CONSOLE_SCOPE = "https://www.googleapis.com/auth/webmasters.readonly"

STATE_KEY = "oauth:state:{state}"


class GoogleOAuthService(BaseProvider):
    """
    Authorization-code flow against Google's OAuth endpoints

    The random `state` of each consent URL is kept in Redis until the
    callback consumes it.
    """

    name = "google_oauth"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[RedisService] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None
    ):
        super().__init__(client)
        self.cache = cache or RedisService()
        self.states = OAuthStateStore(self.cache, STATE_KEY)
        self.client_id = settings.GOOGLE_CLIENT_ID if client_id is None else client_id
        self.client_secret = settings.GOOGLE_CLIENT_SECRET if client_secret is None else client_secret

    def require_client_id(self) -> str:
        if not self.client_id:
            raise ConfigurationError(
                "Google Client ID not configured in environment variables",
                remediation="Set GOOGLE_CLIENT_ID in the backend environment.",
            )
        return self.client_id

    def _require_secret(self) -> str:
        self.require_client_id()
        if not self.client_secret:
            raise ConfigurationError(
                "Google Client Secret not configured in environment variables",
                remediation="Set GOOGLE_CLIENT_SECRET in the backend environment.",
            )
        return self.client_secret

    async def build_authorization_url(
        self,
        redirect_origin: str,
        scope: str = ADS_SCOPE,
        user_id: Optional[str] = None
    ) -> Dict[str, str]:
        """
        Consent URL for the given scope

        Returns:
            {"url", "state", "redirect_uri"}
        """
        client_id = self.require_client_id()
        redirect_uri = redirect_origin.rstrip("/") + CALLBACK_PATH
        state = await self.states.issue({"user_id": user_id, "redirect_uri": redirect_uri})

        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": scope,
            "state": state,
            "access_type": "offline",
            "prompt": "consent",
            "include_granted_scopes": "true",
        }
        return {
            "url": f"{AUTHORIZE_URL}?{urlencode(params)}",
            "state": state,
            "redirect_uri": redirect_uri,
        }

    async def verify_state(self, state: Optional[str]) -> Dict[str, Any]:
        """Consume a stored state; unknown, expired or reused states are rejected"""
        return await self.states.consume(state)

    async def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """Exchange an authorization code for access and refresh tokens"""
        if not code:
            raise ValidationError("Missing authorization code")
        if not redirect_uri:
            raise ValidationError("Missing redirect URI")

        logger.info(f"Exchanging code for tokens using redirect URI: {redirect_uri}")
        return await self._token_request({
            "code": code,
            "client_id": self.require_client_id(),
            "client_secret": self._require_secret(),
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        })

    async def refresh_access_token(self, refresh_token: str) -> Dict[str, Any]:
        return await self._token_request({
            "refresh_token": refresh_token,
            "client_id": self.require_client_id(),
            "client_secret": self._require_secret(),
            "grant_type": "refresh_token",
        })

    async def _token_request(self, form: Dict[str, str]) -> Dict[str, Any]:
        response = await self.client.post(TOKEN_URL, data=form)
        try:
            token_data = response.json()
        except ValueError:
            token_data = {}

        if not response.is_success or not token_data.get("access_token"):
            message = (
                token_data.get("error_description")
                or token_data.get("error")
                or "Failed to get access token"
            )
            logger.error(f"Google OAuth token error ({response.status_code}): {message}")
            raise ProviderError(self.name, message, response.status_code)

        logger.info(f"Successfully obtained access token ({form['grant_type']})")
        return token_data
