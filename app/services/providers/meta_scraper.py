"""
Meta Data Scraper - Page titles, descriptions and image alt-text audits
"""

from typing import Any, List, Optional
from urllib.parse import urljoin, urlparse
import asyncio
import logging

from bs4 import BeautifulSoup
import httpx

from app.core.config import settings
from app.models.seo import ImageRecord, UrlMetaRecord
from app.services.providers.base import BaseProvider
from app.utils.error_handlers import ValidationError

logger = logging.getLogger(__name__)

SCRAPER_API_URL = "http://api.scraperapi.com"
MAX_URLS = 500
ERROR_TEXT = "Error fetching"

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; SEOBot/1.0)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def extract_meta(html: str, url: str) -> UrlMetaRecord:
    """
    Parse title, meta description and images out of an HTML document

    Image sources are made absolute against the page URL.
    """
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""

    description_tag = soup.find("meta", attrs={"name": "description"})
    description = description_tag.get("content", "").strip() if description_tag else ""

    images = []
    for img in soup.find_all("img"):
        src = img.get("src")
        if not src:
            continue
        alt = (img.get("alt") or "").strip()
        images.append(ImageRecord(
            src=urljoin(url, src),
            alt=alt or "No alt text",
            has_alt_text=bool(alt),
        ))

    return UrlMetaRecord(
        url=url,
        meta_title=title or "No title found",
        meta_description=description or "No description found",
        image_count=len(images),
        images_without_alt=sum(1 for image in images if not image.has_alt_text),
        images=images,
        domain=urlparse(url).hostname,
    )


def error_record(url: str, error: Exception) -> UrlMetaRecord:
    return UrlMetaRecord(
        url=url,
        meta_title=ERROR_TEXT,
        meta_description=ERROR_TEXT,
        error=str(error) or type(error).__name__,
        domain=urlparse(url).hostname,
    )


class MetaDataScraper(BaseProvider):
    """
    Scrapes page meta data in fixed-size batches

    ScraperAPI is tried first when a key is configured, then a direct fetch.
    A URL that fails both ways yields an error record; the batch continues.
    """

    name = "meta_scraper"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
        request_delay: Optional[float] = None
    ):
        super().__init__(client, timeout=settings.SCRAPER_TIMEOUT_SECONDS)
        self.api_key = settings.SCRAPER_API_KEY if api_key is None else api_key
        self.batch_size = batch_size or settings.SCRAPE_BATCH_SIZE
        self.batch_delay = settings.SCRAPE_BATCH_DELAY_SECONDS if batch_delay is None else batch_delay
        self.request_delay = settings.SCRAPE_REQUEST_DELAY_SECONDS if request_delay is None else request_delay

    async def fetch(self, urls: Any) -> List[UrlMetaRecord]:
        """
        Scrape meta data for up to 500 URLs

        Args:
            urls: List of page URLs

        Returns:
            One UrlMetaRecord per processed URL, in input order
        """
        if not isinstance(urls, list):
            raise ValidationError("URLs array is required")

        total = min(len(urls), MAX_URLS)
        batch_count = (total + self.batch_size - 1) // self.batch_size
        results = []

        for start in range(0, total, self.batch_size):
            batch = urls[start:min(start + self.batch_size, total)]
            logger.info(
                f"Processing batch {start // self.batch_size + 1} of {batch_count} ({len(batch)} URLs)"
            )

            results.extend(await asyncio.gather(*(
                self._scrape_staggered(str(url), index * self.request_delay)
                for index, url in enumerate(batch)
            )))

            if start + self.batch_size < total and self.batch_delay:
                await asyncio.sleep(self.batch_delay)

        logger.info(f"Scraped meta data for {len(results)} URLs")
        return results

    async def _scrape_staggered(self, url: str, delay: float) -> UrlMetaRecord:
        # Requests of one batch overlap; start times are spread by request_delay
        if delay:
            await asyncio.sleep(delay)
        return await self.scrape_url(url)

    async def scrape_url(self, url: str) -> UrlMetaRecord:
        if self.api_key:
            try:
                return await self._scrape_with_scraper_api(url)
            except Exception as e:
                logger.info(f"ScraperAPI failed for {url}, trying native scraping: {str(e)}")

        try:
            return await self._scrape_native(url)
        except Exception as e:
            logger.error(f"Native scraping failed for {url}: {str(e)}")
            return error_record(url, e)

    async def _scrape_with_scraper_api(self, url: str) -> UrlMetaRecord:
        response = await self.client.get(
            SCRAPER_API_URL,
            params={"api_key": self.api_key, "url": url, "render": "true"},
            headers=REQUEST_HEADERS,
            timeout=settings.SCRAPER_TIMEOUT_SECONDS,
        )
        if not response.is_success:
            raise httpx.HTTPStatusError(
                f"ScraperAPI HTTP {response.status_code}",
                request=response.request,
                response=response,
            )
        return extract_meta(response.text, url)

    async def _scrape_native(self, url: str) -> UrlMetaRecord:
        response = await self.client.get(
            url,
            headers=REQUEST_HEADERS,
            timeout=settings.NATIVE_SCRAPE_TIMEOUT_SECONDS,
            follow_redirects=True,
        )
        if not response.is_success:
            raise httpx.HTTPStatusError(
                f"HTTP {response.status_code}",
                request=response.request,
                response=response,
            )
        return extract_meta(response.text, url)
