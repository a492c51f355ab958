"""
SEO Session - Per-user dashboard state with stale refresh protection
"""

from typing import Dict, Optional
import logging

from app.models.seo import AggregatedResult, DateRange, SEODashboardState
from app.services.aggregators.seo_aggregator import SEOAggregator
from app.utils.error_handlers import ValidationError

logger = logging.getLogger(__name__)


class SEODashboardSession:
    """
    Owns the visible SEO state of one user

    Every refresh takes a new request token. A result is applied only when
    its token is still the latest issued, so a slow response never
    overwrites a newer one. A failed refresh leaves the previous state as it
    was.
    """

    def __init__(self, user_id: str, aggregator: SEOAggregator):
        self.user_id = user_id
        self.aggregator = aggregator
        self.selected_website = ""
        self.result: Optional[AggregatedResult] = None
        self.last_error: Optional[str] = None
        self._latest_token = 0
        self._in_flight = set()

    @property
    def is_refreshing(self) -> bool:
        return bool(self._in_flight)

    def state(self) -> SEODashboardState:
        return SEODashboardState(
            selected_website=self.selected_website,
            is_refreshing=self.is_refreshing,
            result=self.result,
            last_error=self.last_error,
            request_token=self._latest_token,
        )

    async def select_website(
        self,
        website: str,
        date_range: Optional[DateRange] = None,
        access_token: Optional[str] = None
    ) -> SEODashboardState:
        """
        Select a website and refresh its data

        The selection is committed together with the result, so a failed
        load keeps the previous website and data.
        """
        if not website or not website.strip():
            raise ValidationError("Website is required")

        website = website.strip()
        logger.info(f"Selecting website for {self.user_id}: {website}")
        return await self.refresh(website, date_range=date_range, access_token=access_token)

    async def refresh(
        self,
        website: Optional[str] = None,
        date_range: Optional[DateRange] = None,
        access_token: Optional[str] = None
    ) -> SEODashboardState:
        """
        Reload data for the selected website

        Raises whatever the aggregator raised when both sources failed and
        this refresh is still the latest one.
        """
        website = (website or self.selected_website).strip()
        if not website:
            raise ValidationError("Select a website before refreshing")

        self._latest_token += 1
        token = self._latest_token
        self._in_flight.add(token)

        try:
            result = await self.aggregator.load_website_data(website, date_range, access_token)
        except Exception as e:
            if token != self._latest_token:
                logger.info(f"Discarding stale failed refresh {token} for {self.user_id}")
                return self.state()
            self.last_error = str(e)
            logger.error(f"SEO refresh failed for {website}: {str(e)}")
            raise
        finally:
            self._in_flight.discard(token)

        if token != self._latest_token:
            logger.info(
                f"Discarding stale refresh {token} for {self.user_id}, latest is {self._latest_token}"
            )
            return self.state()

        self.selected_website = website
        self.result = result
        self.last_error = None
        return self.state()


class SessionRegistry:
    """
    In-memory sessions keyed by user id
    """

    def __init__(self, aggregator: Optional[SEOAggregator] = None):
        self.aggregator = aggregator or SEOAggregator()
        self._sessions: Dict[str, SEODashboardSession] = {}

    def get(self, user_id: str) -> SEODashboardSession:
        if not user_id:
            raise ValidationError("user_id is required")
        session = self._sessions.get(user_id)
        if session is None:
            session = SEODashboardSession(user_id, self.aggregator)
            self._sessions[user_id] = session
        return session

    def reset(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)

    async def close(self):
        self._sessions.clear()
        await self.aggregator.close()
