"""
SEO record models shared by the provider adapters, the aggregator and the
statistics generator
"""

from datetime import date, timedelta
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


DifficultyLevel = Literal["Low", "Medium", "High"]
Trend = Literal["up", "down", "stable"]


def difficulty_level_for(difficulty: Optional[float]) -> Optional[DifficultyLevel]:
    """Map a 0-100 difficulty score to its level"""
    if difficulty is None:
        return None
    if difficulty > 70:
        return "High"
    if difficulty > 40:
        return "Medium"
    return "Low"


class KeywordRecord(BaseModel):
    """A ranked keyword for one website"""

    model_config = ConfigDict(frozen=True)

    keyword: str
    landing_url: str = ""
    position: float
    search_volume: int = 0
    change: str = "+0"
    estimated_visits: int = 0
    difficulty: Optional[int] = Field(None, ge=0, le=100)
    ctr: Optional[float] = None
    cpc: Optional[float] = None
    trend: Optional[Trend] = None
    # Search Console rows only
    clicks: Optional[int] = None
    impressions: Optional[int] = None

    @computed_field
    @property
    def difficulty_level(self) -> Optional[DifficultyLevel]:
        return difficulty_level_for(self.difficulty)


class PageRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    impressions: int = 0
    clicks: int = 0
    ctr: float = 0.0
    position: float = 0.0


class ImageRecord(BaseModel):
    src: str
    alt: str = "No alt text"
    has_alt_text: bool = False


class UrlMetaRecord(BaseModel):
    """Title, description and image audit of one scraped page"""

    url: str
    meta_title: str = "No title found"
    meta_description: str = "No description found"
    image_count: int = 0
    images_without_alt: int = 0
    images: List[ImageRecord] = Field(default_factory=list)
    domain: Optional[str] = None
    error: Optional[str] = None


class UrlInspectionRecord(BaseModel):
    url: str
    index_status: str = "UNKNOWN"
    crawl_status: str = "UNKNOWN"
    last_crawled: Optional[str] = None
    user_agent: str = "Unknown"


class SitePerformance(BaseModel):
    total_pages: int = 0
    indexed_pages: int = 0
    crawl_errors: int = 0
    avg_load_time: str = "0ms"
    mobile_usability: str = "Good"


class TopPage(BaseModel):
    url: str
    traffic: int = 0
    keywords: int = 0


class OverviewStats(BaseModel):
    total_keywords: int = 0
    top10_keywords: int = 0
    top3_keywords: int = 0
    avg_position: str = "0.0"
    est_traffic: int = 0
    visibility_score: int = 0
    competition_level: DifficultyLevel = "Low"
    total_clicks: int = 0
    total_impressions: int = 0
    avg_ctr: float = 0.0
    total_pages: int = 0
    top_performing_pages: List[PageRecord] = Field(default_factory=list)


class DateRange(BaseModel):
    start_date: date
    end_date: date

    @classmethod
    def last_days(cls, days: int = 28, today: Optional[date] = None) -> "DateRange":
        end = today or date.today()
        return cls(start_date=end - timedelta(days=days), end_date=end)


class Notice(BaseModel):
    """A user-facing success/warning/error message for the dashboard"""

    level: Literal["success", "warning", "error"]
    message: str


class AggregatedResult(BaseModel):
    source: Literal["search_console", "serp_api"]
    website: str
    keywords: List[KeywordRecord] = Field(default_factory=list)
    pages: List[PageRecord] = Field(default_factory=list)
    url_meta_data: List[UrlMetaRecord] = Field(default_factory=list)
    url_inspections: List[UrlInspectionRecord] = Field(default_factory=list)
    site_performance: SitePerformance = Field(default_factory=SitePerformance)
    stats: OverviewStats = Field(default_factory=OverviewStats)
    date_range: Optional[DateRange] = None
    notices: List[Notice] = Field(default_factory=list)
    note: Optional[str] = None


class TrafficDistribution(BaseModel):
    organic: int = 0
    paid: int = 0
    direct: int = 0
    referral: int = 0
    social: int = 0
    email: int = 0


class CountryShare(BaseModel):
    country: str
    percentage: int


class CompetitorOverview(BaseModel):
    """Synthetic traffic profile of a competitor domain"""

    domain_authority: int
    backlinks: int
    referring_domains: int
    organic_keywords: int
    paid_keywords: int
    traffic_value: int
    monthly_visits: int
    bounce_rate: int
    avg_session_duration: str
    pages_per_session: float
    traffic_distribution: TrafficDistribution
    top_countries: List[CountryShare] = Field(default_factory=list)
    top_pages: List[TopPage] = Field(default_factory=list)


class CompetitorAnalysis(BaseModel):
    domain: str
    keywords: List[KeywordRecord] = Field(default_factory=list)
    overview: CompetitorOverview
    stats: OverviewStats


class SerpResult(BaseModel):
    """Keywords and stats from the SERP provider; `note` flags demo data"""

    keywords: List[KeywordRecord] = Field(default_factory=list)
    stats: OverviewStats = Field(default_factory=OverviewStats)
    note: Optional[str] = None


class SEODashboardState(BaseModel):
    """What one user's SEO dashboard currently shows"""

    selected_website: str = ""
    is_refreshing: bool = False
    result: Optional[AggregatedResult] = None
    last_error: Optional[str] = None
    request_token: int = 0
