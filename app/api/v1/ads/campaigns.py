"""
Ads Campaigns - Google Ads campaign performance for a date range
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict
import logging

from app.core.dependencies import (
    get_google_ads_provider,
    get_oauth_service,
    get_token_repository,
    require_google_token,
)
from app.models.requests import GoogleAdsDataRequest
from app.services.auth.google_oauth import GoogleOAuthService
from app.services.providers.google_ads import GoogleAdsProvider
from app.services.storage import TokenRepository
from app.utils.date_helpers import resolve_date_range
from app.utils.error_handlers import ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/google/data")
async def get_google_ads_data(
    request: GoogleAdsDataRequest,
    ads: GoogleAdsProvider = Depends(get_google_ads_provider),
    tokens: TokenRepository = Depends(get_token_repository),
    oauth: GoogleOAuthService = Depends(get_oauth_service)
) -> Dict[str, Any]:
    """
    Campaigns, daily performance and overview metrics of one account

    Cost values are converted from micros and CTR is a percentage.
    """
    if not request.account_id.strip():
        raise ValidationError("Account ID is required")

    date_range = resolve_date_range(request.start_date, request.end_date)
    access_token = await require_google_token(request.user_id, tokens, oauth)
    account_id = request.account_id.replace("-", "").strip()

    data = await ads.fetch(account_id, date_range, access_token)
    return {
        "success": True,
        "account_id": account_id,
        "date_range": date_range,
        **data,
    }
