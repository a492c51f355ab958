"""
SEO Aggregator - Loads website SEO data with a Search Console to SERP fallback
"""

from typing import List, Optional
import logging

from app.models.seo import AggregatedResult, DateRange, Notice
from app.services.providers.meta_scraper import MetaDataScraper
from app.services.providers.search_console import SearchConsoleProvider
from app.services.providers.serp_api import SerpApiProvider
from app.utils.error_handlers import ProviderError

logger = logging.getLogger(__name__)

META_ENRICHMENT_LIMIT = 200

NO_DATA_WARNING = (
    "No data found for this website in Google Search Console. "
    "Make sure the website is verified and has recent data."
)
GSC_FAILED_ERROR = (
    "Failed to fetch real-time data from Google Search Console. "
    "Please check your connection and try again."
)
SERP_EMPTY_WARNING = "No keyword data found for this website"


class SEOAggregator:
    """
    Assembles one AggregatedResult per refresh

    Search Console is the primary source and its pages are enriched with
    scraped meta data. When it fails, SERP keywords and stats are used
    instead. When both fail the SERP error propagates.
    """

    def __init__(
        self,
        search_console: Optional[SearchConsoleProvider] = None,
        serp_api: Optional[SerpApiProvider] = None,
        scraper: Optional[MetaDataScraper] = None
    ):
        self.search_console = search_console or SearchConsoleProvider()
        self.serp_api = serp_api or SerpApiProvider()
        self.scraper = scraper or MetaDataScraper()

    async def close(self):
        for provider in (self.search_console, self.serp_api, self.scraper):
            await provider.close()

    async def load_website_data(
        self,
        website: str,
        date_range: Optional[DateRange] = None,
        access_token: Optional[str] = None
    ) -> AggregatedResult:
        """
        Load keywords, pages and stats for a website

        Args:
            website: Selected website
            date_range: Reporting window, last 28 days by default
            access_token: Search Console token; without one the SERP source is used

        Returns:
            AggregatedResult from Search Console, or from the SERP fallback
        """
        date_range = date_range or DateRange.last_days(28)
        logger.info(f"Refreshing SEO data for: {website}")

        try:
            result = await self._load_search_console(website, date_range, access_token)
        except Exception as gsc_error:
            logger.warning(f"Search Console fetch failed, falling back to SERP API: {str(gsc_error)}")
            return await self._load_serp_fallback(website)

        return await self._enrich_with_meta_data(result)

    async def _load_search_console(
        self,
        website: str,
        date_range: DateRange,
        access_token: Optional[str]
    ) -> AggregatedResult:
        if not access_token:
            raise ProviderError(
                self.search_console.name,
                "Google Search Console is not connected for this user",
            )

        result = await self.search_console.fetch(website, date_range, access_token)
        notices = list(result.notices)

        if result.keywords:
            notices.append(Notice(
                level="success",
                message=f"Successfully loaded {len(result.keywords)} keywords from Google Search Console",
            ))
        if result.pages:
            notices.append(Notice(
                level="success",
                message=f"Successfully loaded {len(result.pages)} pages from Google Search Console",
            ))
        if not result.keywords and not result.pages:
            notices.append(Notice(level="warning", message=NO_DATA_WARNING))

        return result.model_copy(update={"notices": notices})

    async def _enrich_with_meta_data(self, result: AggregatedResult) -> AggregatedResult:
        """Append scraped meta data for the first pages; a scraper failure keeps the result"""
        if not result.pages:
            return result

        urls: List[str] = [page.url for page in result.pages[:META_ENRICHMENT_LIMIT]]
        logger.info(f"Fetching meta data for {len(urls)} pages")

        try:
            scraped = await self.scraper.fetch(urls)
        except Exception as e:
            logger.error(f"Meta data enrichment failed: {str(e)}")
            return result.model_copy(update={
                "notices": result.notices + [
                    Notice(level="warning", message=f"Could not fetch page meta data: {str(e)}")
                ]
            })

        # Concatenation keeps duplicate URLs
        return result.model_copy(update={"url_meta_data": result.url_meta_data + scraped})

    async def _load_serp_fallback(self, website: str) -> AggregatedResult:
        notices = [Notice(level="error", message=GSC_FAILED_ERROR)]

        serp = await self.serp_api.fetch(website)

        if serp.keywords:
            notices.append(Notice(
                level="success",
                message=f"Successfully loaded {len(serp.keywords)} keywords from SERP analysis",
            ))
        else:
            notices.append(Notice(level="warning", message=SERP_EMPTY_WARNING))

        return AggregatedResult(
            source="serp_api",
            website=website,
            keywords=serp.keywords,
            stats=serp.stats,
            notices=notices,
            note=serp.note,
        )
