"""
Google Ads Provider - Accessible accounts and campaign performance via GAQL
"""

from typing import Any, Dict, List, Optional
import logging

import httpx

from app.core.config import settings
from app.models.seo import DateRange
from app.services.analytics.ads_analytics import AdsAnalytics
from app.services.providers.base import BaseProvider
from app.utils.error_handlers import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

GOOGLE_ADS_BASE_URL = "https://googleads.googleapis.com"

CAMPAIGN_QUERY = """
    SELECT
      campaign.id,
      campaign.name,
      campaign.status,
      metrics.impressions,
      metrics.clicks,
      metrics.cost_micros,
      metrics.conversions,
      metrics.ctr,
      metrics.average_cpc
    FROM campaign
    WHERE segments.date BETWEEN '{start}' AND '{end}'
"""

DAILY_QUERY = """
    SELECT
      segments.date,
      metrics.impressions,
      metrics.clicks,
      metrics.cost_micros,
      metrics.conversions
    FROM campaign
    WHERE segments.date BETWEEN '{start}' AND '{end}'
"""

STATUS_MESSAGES = {
    401: "Google Ads API authentication error. Please reconnect your Google account.",
    403: (
        "Google Ads API permission error. Please ensure your Google account has access "
        "to Google Ads and the API is enabled."
    ),
    404: (
        "Google Ads API 404 error. Please ensure: 1) Google Ads API is enabled in Google "
        "Cloud Console, 2) Developer token is configured, 3) Account has Google Ads access."
    ),
}


def customer_id_from_resource(resource_name: str) -> str:
    """customers/1234567890 -> 1234567890"""
    return resource_name.rsplit("/", 1)[-1]


class GoogleAdsProvider(BaseProvider):
    """
    Reads account lists and campaign metrics from the Google Ads REST API
    """

    name = "google_ads"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        developer_token: Optional[str] = None
    ):
        super().__init__(client)
        self.developer_token = (
            settings.GOOGLE_ADS_DEVELOPER_TOKEN if developer_token is None else developer_token
        )
        self.base_url = f"{GOOGLE_ADS_BASE_URL}/{settings.GOOGLE_ADS_API_VERSION}"
        self.analytics = AdsAnalytics()

    def _headers(self, access_token: str) -> Dict[str, str]:
        if not self.developer_token:
            raise ConfigurationError(
                "Google Ads Developer Token not configured",
                remediation="Set GOOGLE_ADS_DEVELOPER_TOKEN in the backend environment.",
            )
        headers = self._bearer(access_token)
        headers["developer-token"] = self.developer_token
        return headers

    def _check_response(self, response: httpx.Response, context: str = "") -> None:
        if response.is_success:
            return
        details = self._error_message(response)
        prefix = STATUS_MESSAGES.get(response.status_code)
        message = f"{prefix} Details: {details}" if prefix else (
            f"Google Ads API error: {response.status_code} - {details}"
        )
        logger.error(f"Google Ads API error ({response.status_code}) {context}: {details}")
        raise ProviderError(self.name, message, response.status_code)

    async def list_accessible_customers(self, access_token: str) -> List[Dict[str, str]]:
        """
        List the accounts the token can reach

        Returns:
            [{"account_id", "account_name"}]; the name falls back to
            "Google Ads Account <id>" when the detail lookup fails
        """
        headers = self._headers(access_token)
        response = await self.client.get(
            f"{self.base_url}/customers:listAccessibleCustomers", headers=headers
        )
        self._check_response(response, "listAccessibleCustomers")

        resource_names = response.json().get("resourceNames") or []
        if not resource_names:
            logger.info("No Google Ads accounts found for this Google account")
            return []

        accounts = []
        for resource_name in resource_names:
            customer_id = customer_id_from_resource(resource_name)
            accounts.append({
                "account_id": customer_id,
                "account_name": await self._account_name(customer_id, headers),
            })

        logger.info(f"Found {len(accounts)} Google Ads accounts")
        return accounts

    async def _account_name(self, customer_id: str, headers: Dict[str, str]) -> str:
        default_name = f"Google Ads Account {customer_id}"
        try:
            response = await self.client.get(f"{self.base_url}/customers/{customer_id}", headers=headers)
            if not response.is_success:
                logger.info(f"Could not fetch details for customer {customer_id}, using default name")
                return default_name
            detail = response.json()
            return detail.get("descriptiveName") or detail.get("name") or default_name
        except httpx.HTTPError as e:
            logger.info(f"Error fetching details for customer {customer_id}: {str(e)}")
            return default_name

    async def fetch(
        self,
        account_id: str,
        date_range: DateRange,
        access_token: str
    ) -> Dict[str, Any]:
        """
        Campaign rows, daily performance and overview metrics for an account

        A failed daily query leaves the daily series empty; a failed
        campaign query raises ProviderError.
        """
        headers = self._headers(access_token)
        start = date_range.start_date.isoformat()
        end = date_range.end_date.isoformat()
        logger.info(f"Fetching Google Ads data for account {account_id} from {start} to {end}")

        campaign_rows = await self._search(account_id, CAMPAIGN_QUERY.format(start=start, end=end), headers)
        campaigns = [self.analytics.normalize_campaign(row) for row in campaign_rows]

        try:
            daily_rows = await self._search(account_id, DAILY_QUERY.format(start=start, end=end), headers)
        except ProviderError as e:
            logger.warning(f"Daily performance query failed: {e.message}")
            daily_rows = []
        daily = self.analytics.daily_totals(
            [self.analytics.normalize_daily(row) for row in daily_rows]
        )

        return {
            "campaigns": campaigns,
            "daily_performance": daily,
            "metrics": self.analytics.calculate_metrics(campaigns),
        }

    async def _search(
        self,
        account_id: str,
        query: str,
        headers: Dict[str, str]
    ) -> List[Dict[str, Any]]:
        response = await self.client.post(
            f"{self.base_url}/customers/{account_id}/googleAds:searchStream",
            headers=headers,
            json={"query": query},
        )
        self._check_response(response, "searchStream")

        # searchStream answers with a list of batches, each holding results
        body = response.json()
        batches = body if isinstance(body, list) else [body]
        rows = []
        for batch in batches:
            rows.extend(batch.get("results") or [])
        return rows
