"""
AI Insights API - LLM recommendations from SEO, ads and lead data
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict
import hashlib
import json
import logging

from app.core.dependencies import get_insights_engine, get_redis
from app.models.requests import InsightsRequest
from app.services.ai.insights_engine import InsightsEngine
from app.services.cache.redis_service import RedisService
from app.utils.validators import require_website

router = APIRouter()
logger = logging.getLogger(__name__)

INSIGHTS_CACHE_TTL = 900


def insights_cache_key(request: InsightsRequest) -> str:
    payload = json.dumps(request.model_dump(mode="json"), sort_keys=True)
    return f"insights:{hashlib.sha256(payload.encode('utf-8')).hexdigest()}"


@router.post("/analyze")
async def analyze(
    request: InsightsRequest,
    engine: InsightsEngine = Depends(get_insights_engine),
    redis_service: RedisService = Depends(get_redis)
) -> Dict[str, Any]:
    """
    Prioritized SEO recommendations for a website

    Identical payloads are answered from cache for 15 minutes.
    """
    website = require_website(request.website)

    cache_key = insights_cache_key(request)
    cached_data = await redis_service.get(cache_key)
    if cached_data:
        return cached_data

    response = await engine.analyze(
        website,
        request.seo_data,
        google_ads_data=request.google_ads_data,
        leads_data=request.leads_data,
    )

    await redis_service.set(cache_key, response, ttl=INSIGHTS_CACHE_TTL)
    return response
