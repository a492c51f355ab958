"""
Meta Auth - Facebook Login consent and code exchange for Meta Ads
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, List
import logging

from app.core.dependencies import (
    get_ad_account_repository,
    get_meta_oauth_service,
    get_token_repository,
)
from app.models.requests import MetaAuthRequest
from app.services.auth.meta_oauth import DEFAULT_TOKEN_TTL_SECONDS, MetaOAuthService
from app.services.storage import AdAccountRepository, TokenRepository
from app.utils.error_handlers import ProviderError, ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/meta/authorize")
async def authorize(
    redirect_origin: str = Query(..., description="Front-end origin, e.g. https://app.example.com"),
    user_id: str = Query(...),
    oauth: MetaOAuthService = Depends(get_meta_oauth_service)
) -> Dict[str, str]:
    return await oauth.build_authorization_url(redirect_origin, user_id)


@router.post("/meta/auth")
async def meta_auth(
    request: MetaAuthRequest,
    oauth: MetaOAuthService = Depends(get_meta_oauth_service),
    tokens: TokenRepository = Depends(get_token_repository),
    accounts: AdAccountRepository = Depends(get_ad_account_repository)
) -> Dict[str, Any]:
    """
    Exchange a Meta authorization code, store the token and sync ad accounts
    """
    stored_state = await oauth.verify_state(request.state)
    user_id = request.user_id or stored_state.get("user_id")
    if not user_id:
        raise ValidationError("User ID is required")
    if stored_state.get("user_id") and stored_state["user_id"] != user_id:
        raise ValidationError("OAuth state belongs to a different user")

    redirect_uri = request.redirect_uri or stored_state.get("redirect_uri")
    token_data = await oauth.exchange_code(request.code, redirect_uri)
    await tokens.upsert(user_id, token_data, provider="meta", default_expires_in=DEFAULT_TOKEN_TTL_SECONDS)

    connected_accounts = await _load_meta_accounts(user_id, token_data["access_token"], oauth, accounts)
    return {
        "success": True,
        "accounts": connected_accounts,
    }


async def _load_meta_accounts(
    user_id: str,
    access_token: str,
    oauth: MetaOAuthService,
    accounts: AdAccountRepository
) -> List[Dict[str, str]]:
    try:
        found = await oauth.list_ad_accounts(access_token)
    except ProviderError as e:
        logger.warning(f"Could not list Meta ad accounts for user {user_id}: {str(e)}")
        return []

    await accounts.sync(user_id, "meta", found)
    return found
