"""
SEO Analytics - Summary statistics over normalized keyword and page records
"""

from typing import Dict, Optional, Sequence
import logging

from app.models.seo import (
    DateRange,
    KeywordRecord,
    OverviewStats,
    PageRecord,
    SitePerformance,
    UrlInspectionRecord,
)

logger = logging.getLogger(__name__)

TOP_PAGES_LIMIT = 10


def competition_level_for(avg_position: float, total_keywords: int) -> str:
    """
    Competition level read from the average rank

    Lower ranks mean the site is already competing on contested result pages.
    """
    if total_keywords == 0:
        return "Low"
    if avg_position < 20:
        return "High"
    if avg_position < 40:
        return "Medium"
    return "Low"


def compute_stats(keywords: Sequence[KeywordRecord]) -> OverviewStats:
    """
    Derive overview statistics from keyword records

    Pure and order preserving: nothing is sorted, so callers pre-sort when
    the top performing slice matters.

    Args:
        keywords: Normalized keyword records from any provider

    Returns:
        OverviewStats for the dashboard cards
    """
    total_keywords = len(keywords)
    top10_keywords = sum(1 for k in keywords if k.position <= 10)
    top3_keywords = sum(1 for k in keywords if k.position <= 3)

    mean_position = 0.0
    if total_keywords > 0:
        mean_position = sum(k.position for k in keywords) / total_keywords

    visibility_score = 0
    if total_keywords > 0:
        visibility_score = round(top10_keywords / total_keywords * 100)

    total_clicks = sum(k.clicks or 0 for k in keywords)
    total_impressions = sum(k.impressions or 0 for k in keywords)
    avg_ctr = 0.0
    if total_impressions > 0:
        avg_ctr = round(total_clicks / total_impressions * 100, 1)

    return OverviewStats(
        total_keywords=total_keywords,
        top10_keywords=top10_keywords,
        top3_keywords=top3_keywords,
        avg_position=f"{mean_position:.1f}",
        est_traffic=sum(k.estimated_visits for k in keywords),
        visibility_score=visibility_score,
        competition_level=competition_level_for(mean_position, total_keywords),
        total_clicks=total_clicks,
        total_impressions=total_impressions,
        avg_ctr=avg_ctr,
    )


def compute_search_console_stats(
    keywords: Sequence[KeywordRecord],
    pages: Sequence[PageRecord],
    date_range: Optional[DateRange] = None
) -> OverviewStats:
    """
    Overview statistics for Search Console data

    Estimated traffic is the real click count, and the first pages returned
    by Search Console become the top performing pages.
    """
    stats = compute_stats(keywords)
    if date_range:
        logger.debug(
            f"Search Console stats for {date_range.start_date} to {date_range.end_date}"
        )
    return stats.model_copy(update={
        "est_traffic": stats.total_clicks,
        "total_pages": len(pages),
        "top_performing_pages": list(pages[:TOP_PAGES_LIMIT]),
    })


def calculate_site_performance(
    inspections: Sequence[UrlInspectionRecord],
    pages: Sequence[PageRecord]
) -> SitePerformance:
    """Indexing health from URL inspection verdicts"""
    indexed = sum(1 for record in inspections if record.index_status == "PASS")
    return SitePerformance(
        total_pages=len(pages),
        indexed_pages=indexed,
        crawl_errors=len(inspections) - indexed,
        avg_load_time="0ms",
        mobile_usability="Good",
    )


def calculate_keyword_rankings(keywords: Sequence[KeywordRecord]) -> Dict[str, int]:
    """
    Analyze keyword rankings distribution

    Returns:
        Count of keywords per position bucket
    """
    rankings = {
        "top_3": 0,
        "top_10": 0,
        "top_20": 0,
        "top_50": 0,
        "top_100": 0,
        "beyond_100": 0
    }

    for keyword in keywords:
        position = keyword.position

        if position <= 3:
            rankings["top_3"] += 1
        elif position <= 10:
            rankings["top_10"] += 1
        elif position <= 20:
            rankings["top_20"] += 1
        elif position <= 50:
            rankings["top_50"] += 1
        elif position <= 100:
            rankings["top_100"] += 1
        else:
            rankings["beyond_100"] += 1

    return rankings
