"""
SEO Search Console - Raw Google Search Console data for a property
"""

from fastapi import APIRouter, Depends
import logging

from app.core.dependencies import (
    get_oauth_service,
    get_search_console,
    get_token_repository,
    require_google_token,
)
from app.models.requests import SearchConsoleRequest
from app.models.seo import AggregatedResult
from app.services.auth.google_oauth import GoogleOAuthService
from app.services.providers.search_console import SearchConsoleProvider
from app.services.storage import TokenRepository
from app.utils.date_helpers import resolve_date_range
from app.utils.validators import require_website

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/search-console", response_model=AggregatedResult)
async def get_search_console_data(
    request: SearchConsoleRequest,
    provider: SearchConsoleProvider = Depends(get_search_console),
    tokens: TokenRepository = Depends(get_token_repository),
    oauth: GoogleOAuthService = Depends(get_oauth_service)
) -> AggregatedResult:
    """
    Keywords, pages, URL inspections and stats straight from Search Console

    Unlike the dashboard refresh there is no SERP fallback here; upstream
    failures are returned as errors.
    """
    website = require_website(request.website_url)
    date_range = resolve_date_range(request.start_date, request.end_date)
    access_token = await require_google_token(request.user_id, tokens, oauth)
    return await provider.fetch(website, date_range, access_token)
