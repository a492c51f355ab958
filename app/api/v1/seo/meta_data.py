"""
SEO Meta Data - Title, description and image alt audit of page URLs
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict
import logging

from app.core.dependencies import get_meta_scraper
from app.models.requests import MetaDataRequest
from app.services.providers.meta_scraper import MetaDataScraper

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/meta-data")
async def scrape_meta_data(
    request: MetaDataRequest,
    scraper: MetaDataScraper = Depends(get_meta_scraper)
) -> Dict[str, Any]:
    """
    Scrape up to 500 URLs in small batches

    A page that cannot be fetched yields a record with "Error fetching"
    fields instead of failing the whole request.
    """
    meta_data = await scraper.fetch(request.urls)
    return {"success": True, "meta_data": meta_data}
