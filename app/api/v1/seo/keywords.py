"""
SEO Keywords - SERP keyword rankings and keyword statistics
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict
import logging

from app.core.dependencies import get_serp_provider
from app.models.requests import SerpRequest, StatsRequest
from app.models.seo import OverviewStats, SerpResult
from app.services.analytics.seo_analytics import (
    calculate_keyword_rankings,
    compute_stats,
)
from app.services.providers.serp_api import SerpApiProvider

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/serp", response_model=SerpResult, response_model_exclude_none=True)
async def get_serp_keywords(
    request: SerpRequest,
    serp: SerpApiProvider = Depends(get_serp_provider)
) -> SerpResult:
    """
    Keyword rankings of a website from the SERP API

    Without a configured SERP API key, demo keywords generated from the
    domain are returned together with a `note`.
    """
    return await serp.fetch(request.website_url, enhanced=request.enhanced)


@router.post("/stats")
async def get_keyword_stats(request: StatsRequest) -> Dict[str, Any]:
    """
    Overview statistics and ranking distribution of the posted keywords
    """
    stats: OverviewStats = compute_stats(request.keywords)
    return {
        "stats": stats,
        "rankings": calculate_keyword_rankings(request.keywords),
    }
