"""
Search Console Provider - Keyword, page and index data from Google Search Console
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse
import logging

from app.core.config import settings
from app.models.seo import (
    AggregatedResult,
    DateRange,
    KeywordRecord,
    PageRecord,
    UrlInspectionRecord,
)
from app.services.analytics.seo_analytics import (
    calculate_site_performance,
    compute_search_console_stats,
)
from app.services.providers.base import BaseProvider

logger = logging.getLogger(__name__)

GSC_BASE_URL = "https://searchconsole.googleapis.com/webmasters/v3"
KEYWORD_ROW_LIMIT = 25000
PAGE_ROW_LIMIT = 10000


def format_site_url(website: str) -> str:
    """Search Console properties are keyed by full URL"""
    return website if website.startswith("http") else f"https://{website}"


def site_name(site_url: str) -> str:
    """Display name of a property; domain properties are listed as sc-domain:example.com"""
    if site_url.startswith("sc-domain:"):
        return site_url[len("sc-domain:"):]
    return urlparse(site_url).hostname or site_url


class SearchConsoleProvider(BaseProvider):
    """
    Fetches search analytics for a verified Search Console property
    """

    name = "google_search_console"

    def __init__(self, client=None, inspection_limit: Optional[int] = None):
        super().__init__(client)
        self.inspection_limit = (
            settings.GSC_INSPECTION_LIMIT if inspection_limit is None else inspection_limit
        )

    async def fetch(
        self,
        website: str,
        date_range: DateRange,
        access_token: str
    ) -> AggregatedResult:
        """
        Fetch keywords, pages and URL inspection results

        Args:
            website: Property URL or bare domain
            date_range: Reporting window
            access_token: Google OAuth access token

        Returns:
            AggregatedResult with source "search_console"; meta data is left
            empty for the aggregator to enrich
        """
        site_url = format_site_url(website)
        logger.info(
            f"Fetching Search Console data for {site_url} "
            f"({date_range.start_date} to {date_range.end_date})"
        )

        keywords = await self.fetch_keywords(site_url, date_range, access_token)
        pages = await self.fetch_pages(site_url, date_range, access_token)
        inspections = await self.inspect_urls(pages, site_url, access_token)

        return AggregatedResult(
            source="search_console",
            website=website,
            keywords=keywords,
            pages=pages,
            url_inspections=inspections,
            site_performance=calculate_site_performance(inspections, pages),
            stats=compute_search_console_stats(keywords, pages, date_range),
            date_range=date_range,
        )

    async def list_sites(self, access_token: str) -> List[Dict[str, str]]:
        """Verified properties of the account as {"account_id", "account_name"}"""
        response = await self.client.get(f"{GSC_BASE_URL}/sites", headers=self._bearer(access_token))
        self._check_response(response, "sites")

        sites = [
            {"account_id": entry["siteUrl"], "account_name": site_name(entry["siteUrl"])}
            for entry in response.json().get("siteEntry") or []
            if entry.get("siteUrl")
        ]
        logger.info(f"Found {len(sites)} Search Console sites")
        return sites

    async def fetch_keywords(
        self,
        site_url: str,
        date_range: DateRange,
        access_token: str
    ) -> List[KeywordRecord]:
        rows = await self._query(site_url, date_range, access_token, ["query", "page"], KEYWORD_ROW_LIMIT)
        keywords = [self._keyword_from_row(row, site_url) for row in rows]
        logger.info(f"Processed {len(keywords)} keywords")
        return keywords

    async def fetch_pages(
        self,
        site_url: str,
        date_range: DateRange,
        access_token: str
    ) -> List[PageRecord]:
        rows = await self._query(site_url, date_range, access_token, ["page"], PAGE_ROW_LIMIT)
        pages = [
            PageRecord(
                url=row["keys"][0],
                impressions=row.get("impressions", 0),
                clicks=row.get("clicks", 0),
                ctr=round((row.get("ctr") or 0) * 100, 1),
                position=round(row.get("position") or 0, 1),
            )
            for row in rows
        ]
        logger.info(f"Processed {len(pages)} pages")
        return pages

    async def inspect_urls(
        self,
        pages: List[PageRecord],
        site_url: str,
        access_token: str
    ) -> List[UrlInspectionRecord]:
        """
        Inspect the index status of the first pages

        A failed inspection is logged and skipped.
        """
        inspections = []
        url = f"{GSC_BASE_URL}/sites/{quote(site_url, safe='')}/urlInspection/index:inspect"

        for page in pages[:self.inspection_limit]:
            try:
                response = await self.client.post(
                    url,
                    headers=self._bearer(access_token),
                    json={"inspectionUrl": page.url, "siteUrl": site_url},
                )
                if not response.is_success:
                    logger.info(f"Failed to inspect URL {page.url}: {response.status_code}")
                    continue

                result = response.json().get("inspectionResult", {}).get("indexStatusResult", {})
                inspections.append(UrlInspectionRecord(
                    url=page.url,
                    index_status=result.get("verdict") or "UNKNOWN",
                    crawl_status=result.get("crawledAs") or "UNKNOWN",
                    last_crawled=result.get("lastCrawlTime"),
                    user_agent=result.get("userAgent") or "Unknown",
                ))
            except Exception as e:
                logger.error(f"Error inspecting URL {page.url}: {str(e)}")

        return inspections

    async def _query(
        self,
        site_url: str,
        date_range: DateRange,
        access_token: str,
        dimensions: List[str],
        row_limit: int
    ) -> List[Dict[str, Any]]:
        url = f"{GSC_BASE_URL}/sites/{quote(site_url, safe='')}/searchAnalytics/query"
        body = {
            "startDate": date_range.start_date.isoformat(),
            "endDate": date_range.end_date.isoformat(),
            "dimensions": dimensions,
            "rowLimit": row_limit,
        }

        response = await self.client.post(url, headers=self._bearer(access_token), json=body)
        self._check_response(response, f"searchAnalytics {'/'.join(dimensions)}")
        return response.json().get("rows") or []

    @staticmethod
    def _keyword_from_row(row: Dict[str, Any], site_url: str) -> KeywordRecord:
        keys = row.get("keys") or []
        clicks = row.get("clicks", 0)
        return KeywordRecord(
            keyword=keys[0] if keys else "",
            landing_url=keys[1] if len(keys) > 1 and keys[1] else site_url,
            position=round(row.get("position") or 0, 1),
            clicks=clicks,
            impressions=row.get("impressions", 0),
            ctr=round((row.get("ctr") or 0) * 100, 1),
            estimated_visits=clicks,
            # No period-over-period delta is requested upstream
            change="+0",
        )
