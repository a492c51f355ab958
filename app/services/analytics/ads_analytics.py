"""
Ads Analytics - Overview metrics for advertising campaign rows
"""

from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

MICROS = 1_000_000


def micros_to_currency(value: Any) -> float:
    return int(value or 0) / MICROS


class AdsAnalytics:
    """
    Analytics engine for advertising metrics calculation
    """

    def calculate_metrics(self, campaigns: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Calculate overview metrics from normalized campaign rows

        Args:
            campaigns: Rows carrying spend, impressions, clicks and conversions

        Returns:
            Dict with totals, average CTR and CPC, conversion rate and cost
            per conversion; every ratio is 0 when its denominator is 0
        """
        total_spend = sum(c.get("spend", 0) for c in campaigns)
        total_impressions = sum(c.get("impressions", 0) for c in campaigns)
        total_clicks = sum(c.get("clicks", 0) for c in campaigns)
        total_conversions = sum(c.get("conversions", 0) for c in campaigns)

        # Calculate CTR (Click-Through Rate)
        avg_ctr = 0.0
        if total_impressions > 0:
            avg_ctr = round((total_clicks / total_impressions) * 100, 2)

        # Calculate CPC (Cost Per Click)
        avg_cpc = 0.0
        if total_clicks > 0:
            avg_cpc = round(total_spend / total_clicks, 2)

        conversion_rate = 0.0
        if total_clicks > 0:
            conversion_rate = round((total_conversions / total_clicks) * 100, 2)

        cost_per_conversion = 0.0
        if total_conversions > 0:
            cost_per_conversion = round(total_spend / total_conversions, 2)

        return {
            "total_spend": round(total_spend, 2),
            "total_impressions": total_impressions,
            "total_clicks": total_clicks,
            "total_conversions": total_conversions,
            "avg_ctr": avg_ctr,
            "avg_cpc": avg_cpc,
            "conversion_rate": conversion_rate,
            "cost_per_conversion": cost_per_conversion
        }

    def normalize_campaign(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten one GAQL campaign row; micros become currency, CTR a percentage"""
        campaign = row.get("campaign", {})
        metrics = row.get("metrics", {})
        return {
            "id": campaign.get("id"),
            "name": campaign.get("name") or "Unnamed Campaign",
            "status": campaign.get("status"),
            "impressions": int(metrics.get("impressions") or 0),
            "clicks": int(metrics.get("clicks") or 0),
            "spend": micros_to_currency(metrics.get("costMicros")),
            "conversions": float(metrics.get("conversions") or 0),
            "ctr": float(metrics.get("ctr") or 0) * 100,
            "cpc": micros_to_currency(metrics.get("averageCpc")),
        }

    def normalize_daily(self, row: Dict[str, Any]) -> Dict[str, Any]:
        segments = row.get("segments", {})
        metrics = row.get("metrics", {})
        return {
            "date": segments.get("date"),
            "clicks": int(metrics.get("clicks") or 0),
            "impressions": int(metrics.get("impressions") or 0),
            "spend": micros_to_currency(metrics.get("costMicros")),
            "conversions": float(metrics.get("conversions") or 0),
        }

    def daily_totals(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Sum per-campaign daily rows into one row per date, oldest first"""
        by_date: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            day = by_date.setdefault(row["date"], {
                "date": row["date"], "clicks": 0, "impressions": 0, "spend": 0.0, "conversions": 0.0
            })
            for field in ("clicks", "impressions", "spend", "conversions"):
                day[field] += row[field]
        return [by_date[key] for key in sorted(by_date, key=lambda d: d or "")]
