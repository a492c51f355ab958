"""
SEO Dashboard - Website selection and refresh of the per-user SEO state
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
import logging

from app.core.dependencies import (
    get_oauth_service,
    get_optional_token_repository,
    get_session_registry,
)
from app.models.requests import WebsiteRequest
from app.models.seo import SEODashboardState
from app.services.aggregators.seo_session import SessionRegistry
from app.services.auth.google_oauth import GoogleOAuthService
from app.services.storage import TokenRepository
from app.utils.date_helpers import resolve_date_range
from app.utils.error_handlers import ConfigurationError, DatabaseError, ProviderError
from app.utils.validators import require_website

router = APIRouter()
logger = logging.getLogger(__name__)


async def search_console_token(
    user_id: str,
    tokens: Optional[TokenRepository],
    oauth: GoogleOAuthService
) -> Optional[str]:
    """
    Stored Google token of the user, or None

    Without a token the refresh uses the SERP source, so lookup failures are
    logged rather than raised.
    """
    if tokens is None:
        return None
    try:
        return await tokens.get_valid_access_token(user_id, oauth)
    except (ConfigurationError, DatabaseError, ProviderError) as e:
        logger.warning(f"No usable Google token for user {user_id}: {str(e)}")
        return None


@router.post("/website", response_model=SEODashboardState)
async def select_website(
    request: WebsiteRequest,
    registry: SessionRegistry = Depends(get_session_registry),
    tokens: Optional[TokenRepository] = Depends(get_optional_token_repository),
    oauth: GoogleOAuthService = Depends(get_oauth_service)
) -> SEODashboardState:
    """
    Select a website and load its SEO data

    Search Console data is used when the user has connected Google;
    otherwise, or when Search Console fails, SERP keywords are shown.
    """
    website = require_website(request.website)
    date_range = resolve_date_range(request.start_date, request.end_date)
    session = registry.get(request.user_id)
    access_token = await search_console_token(request.user_id, tokens, oauth)
    return await session.select_website(website, date_range, access_token)


@router.post("/refresh", response_model=SEODashboardState)
async def refresh(
    request: WebsiteRequest,
    registry: SessionRegistry = Depends(get_session_registry),
    tokens: Optional[TokenRepository] = Depends(get_optional_token_repository),
    oauth: GoogleOAuthService = Depends(get_oauth_service)
) -> SEODashboardState:
    """
    Reload SEO data for the posted website

    A refresh superseded by a newer one returns the newer state unchanged.
    When both sources fail the previous state stays visible and the error
    is returned.
    """
    website = require_website(request.website)
    date_range = resolve_date_range(request.start_date, request.end_date)
    session = registry.get(request.user_id)
    access_token = await search_console_token(request.user_id, tokens, oauth)
    return await session.refresh(website, date_range, access_token)


@router.get("/state", response_model=SEODashboardState)
async def get_state(
    user_id: str = Query(...),
    registry: SessionRegistry = Depends(get_session_registry)
) -> SEODashboardState:
    """Current SEO dashboard state of a user"""
    return registry.get(user_id).state()


@router.delete("/state")
async def reset_state(
    user_id: str = Query(...),
    registry: SessionRegistry = Depends(get_session_registry)
):
    registry.reset(user_id)
    return {"success": True}
