"""
SERP API Provider - Organic keyword rankings from serpapi.com
"""

from typing import Any, Dict, Optional
import logging
import math

from app.core.config import settings
from app.models.seo import KeywordRecord, SerpResult
from app.services.analytics.keyword_generator import (
    SyntheticKeywordGenerator,
    base_ctr,
    difficulty_base,
    domain_seed,
    extract_domain,
)
from app.services.analytics.seo_analytics import compute_stats
from app.services.providers.base import BaseProvider
from app.utils.error_handlers import ProviderError, ValidationError

logger = logging.getLogger(__name__)

SERP_API_URL = "https://serpapi.com/search.json"
DEMO_DATA_NOTE = "Using demo data as SERP API key is not configured"


class SerpApiProvider(BaseProvider):
    """
    Keyword rankings for a domain, without a date range

    With no API key configured the synthetic generator stands in and the
    result carries a note saying so.
    """

    name = "serp_api"

    def __init__(self, client=None, api_key: Optional[str] = None):
        super().__init__(client)
        self.api_key = settings.SERP_API_KEY if api_key is None else api_key

    async def fetch(
        self,
        website: str,
        enhanced: bool = False
    ) -> SerpResult:
        """
        Fetch keyword rankings for a website

        Returns:
            SerpResult; `note` is set when demo data was used
        """
        if not website:
            raise ValidationError("Website URL is required")

        domain = extract_domain(website)

        if not self.api_key:
            logger.warning("SERP API key is not configured, generating demo data")
            generator = SyntheticKeywordGenerator(domain)
            keywords = generator.generate(enhanced=enhanced)
            return SerpResult(
                keywords=keywords,
                stats=generator.generate_stats(keywords, enhanced=enhanced),
                note=DEMO_DATA_NOTE,
            )

        logger.info(f"Fetching SERP data for: {domain}")
        response = await self.client.get(
            SERP_API_URL,
            params={
                "engine": "google_organic_keywords",
                "domain": domain,
                "api_key": self.api_key,
            },
        )
        self._check_response(response)

        data = response.json()
        if data.get("error"):
            raise ProviderError(self.name, str(data["error"]), response.status_code)

        keywords = [
            self._keyword_from_row(row, domain, enhanced)
            for row in data.get("keywords") or []
            if row.get("keyword")
        ]
        return SerpResult(keywords=keywords, stats=compute_stats(keywords))

    @staticmethod
    def _keyword_from_row(row: Dict[str, Any], domain: str, enhanced: bool) -> KeywordRecord:
        position = int(row.get("position") or 0) or 100
        search_volume = int(row.get("search_volume") or 0)
        ctr = base_ctr(position)
        keyword = row["keyword"]

        # Upstream has no difficulty score; jitter is derived from the keyword text
        jitter = domain_seed(keyword) % 30 - 15
        change = int(row.get("position_change") or 0)

        fields = {
            "keyword": keyword,
            "landing_url": row.get("url") or f"https://{domain}",
            "position": position,
            "search_volume": search_volume,
            "change": f"+{change}" if change >= 0 else str(change),
            "estimated_visits": math.floor(search_volume * ctr / 100),
            "difficulty": min(100, max(1, difficulty_base(keyword) + jitter)),
        }
        if enhanced:
            fields["ctr"] = round(ctr, 1)
        return KeywordRecord(**fields)
