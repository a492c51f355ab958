"""
Pydantic models for SEO records and API request bodies
"""

from .seo import (
    AggregatedResult,
    CompetitorAnalysis,
    CompetitorOverview,
    DateRange,
    ImageRecord,
    KeywordRecord,
    Notice,
    OverviewStats,
    PageRecord,
    SEODashboardState,
    SerpResult,
    SitePerformance,
    UrlInspectionRecord,
    UrlMetaRecord,
    difficulty_level_for,
)

__all__ = [
    'AggregatedResult',
    'CompetitorAnalysis',
    'CompetitorOverview',
    'DateRange',
    'ImageRecord',
    'KeywordRecord',
    'Notice',
    'OverviewStats',
    'PageRecord',
    'SEODashboardState',
    'SerpResult',
    'SitePerformance',
    'UrlInspectionRecord',
    'UrlMetaRecord',
    'difficulty_level_for',
]
