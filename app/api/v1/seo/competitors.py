"""
SEO Competitors - Competitor keyword and traffic analysis
"""

from fastapi import APIRouter, Query
import logging

from app.models.seo import CompetitorAnalysis
from app.services.analytics.keyword_generator import MAX_KEYWORDS, generate_competitor_analysis
from app.utils.validators import require_website

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/competitors/analysis", response_model=CompetitorAnalysis)
async def analyze_competitor(
    url: str = Query(..., description="Competitor website or domain"),
    limit: int = Query(MAX_KEYWORDS, ge=1, le=MAX_KEYWORDS)
) -> CompetitorAnalysis:
    """
    Estimated keywords, traffic profile and stats of a competitor domain

    The figures are generated deterministically from the domain, so the
    same competitor always shows the same analysis.
    """
    website = require_website(url)
    logger.info(f"Analyzing competitor: {website}")
    return generate_competitor_analysis(website, limit=limit)
