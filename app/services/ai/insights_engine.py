"""
Insights Engine - LLM-generated SEO recommendations from dashboard data
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import json
import logging
import uuid

from app.services.ai.llm_client import LLMClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert digital marketing analyst specializing in SEO, Google Ads, Meta Ads, "
    "and lead generation optimization. Provide data-driven insights in the exact JSON format requested."
)

INSIGHT_FORMAT = {
    "insights": [
        {
            "id": "unique_id",
            "title": "Insight Title",
            "description": "Detailed analysis and specific recommendations",
            "priority": "high|medium|low",
            "channel": "seo|google-ads|meta-ads|leads|cross-channel",
            "impact": "Description of expected impact",
            "action": "Specific action to take",
            "recommendations": {
                "metaTitle": "Exact meta title recommendation (if applicable)",
                "metaDescription": "Exact meta description recommendation (if applicable)",
                "headerTags": ["H1: Exact H1 recommendation", "H2: Exact H2 recommendations"],
                "keywordDensity": "Target keyword density percentage and keywords",
                "internalLinks": ["Specific internal linking suggestions"],
                "externalLinks": ["Specific external linking suggestions"],
                "technicalSeo": ["Specific technical SEO improvements"]
            }
        }
    ]
}


def _get(row: Dict[str, Any], *names: str, default: Any = None) -> Any:
    """First present key among snake_case and camelCase spellings"""
    for name in names:
        if row.get(name) is not None:
            return row[name]
    return default


def build_prompt(website: str, seo_data: Dict[str, Any]) -> str:
    """
    The SEO analyst prompt: top 20 keywords, top 15 pages, top 10 meta rows
    and the summary stats
    """
    keywords = seo_data.get("keywords") or []
    pages = seo_data.get("pages") or []
    meta_rows = _get(seo_data, "url_meta_data", "urlMetaData", default=[])
    stats = seo_data.get("stats") or seo_data

    keyword_lines = "\n".join(
        f'- "{k.get("keyword")}": Position {k.get("position")}, {k.get("clicks")} clicks, '
        f'{k.get("impressions")} impressions, CTR {k.get("ctr")}%'
        for k in keywords[:20]
    )
    page_lines = "\n".join(
        f'- {p.get("url")}: {p.get("clicks")} clicks, {p.get("impressions")} impressions, '
        f'Position {p.get("position")}, CTR {p.get("ctr")}%'
        for p in pages[:15]
    )
    meta_lines = "\n".join(
        f'- {u.get("url")}: Title: "{_get(u, "meta_title", "metaTitle", default="Missing")}", '
        f'Description: "{_get(u, "meta_description", "metaDescription", default="Missing")}", '
        f'Images: {_get(u, "image_count", "imageCount", default=0)} '
        f'({_get(u, "images_without_alt", "imagesWithoutAlt", default=0)} without alt)'
        for u in meta_rows[:10]
    )

    return f"""
As an expert SEO analyst, analyze the following REAL Google Search Console data for website: {website}

KEYWORD ANALYSIS ({len(keywords)} total keywords):
{keyword_lines}

PAGE PERFORMANCE ({len(pages)} total pages):
{page_lines}

META DATA ANALYSIS ({len(meta_rows)} pages analyzed):
{meta_lines}

SUMMARY STATS:
- Total Keywords: {_get(stats, "total_keywords", "totalKeywords", default=0)}
- Average Position: {_get(stats, "avg_position", "avgPosition", default="N/A")}
- Total Clicks: {_get(stats, "total_clicks", "totalClicks", default=0)}
- Total Impressions: {_get(stats, "total_impressions", "totalImpressions", default=0)}
- Click-through Rate: {_get(stats, "avg_ctr", "avgCTR", default=0)}%
- Top 10 Keywords: {_get(stats, "top10_keywords", "top10Keywords", default=0)}
- Top 3 Keywords: {_get(stats, "top3_keywords", "top3Keywords", default=0)}

Analyze this data and provide exactly 4-5 specific, actionable insights covering these categories:
1. KEYWORD OPPORTUNITIES: Find underperforming keywords with high potential
2. PAGE OPTIMIZATION: Identify top pages that need improvement or scaling
3. META DATA ISSUES: Find missing or poorly optimized titles/descriptions
4. TECHNICAL SEO: Identify image, crawling, or indexing issues
5. CONTENT STRATEGY: Suggest content improvements based on performance

Return insights in this JSON format:
{json.dumps(INSIGHT_FORMAT, indent=2)}

For SEO insights, provide EXACT recommendations:
- Specific meta titles (50-60 characters)
- Specific meta descriptions (150-160 characters)
- Exact H1/H2/H3 tag suggestions
- Target keyword density percentages
- Specific internal linking opportunities
- Relevant external link suggestions
- Technical SEO improvements

Focus on actionable, specific recommendations rather than generic advice. Use actual data from {website} to make recommendations.
"""


def normalize_insight(insight: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": insight.get("id") or f"ai_{uuid.uuid4().hex[:12]}",
        "title": insight.get("title") or "AI Insight",
        "description": insight.get("description") or "Analysis completed",
        "priority": insight.get("priority") or "medium",
        "channel": insight.get("channel") or "cross-channel",
        "impact": insight.get("impact") or "Analysis impact available",
        "action": insight.get("action") or "Review recommendation",
        "recommendations": insight.get("recommendations") or {},
    }


def fallback_insight() -> Dict[str, Any]:
    return {
        "id": f"fallback_{uuid.uuid4().hex[:12]}",
        "title": "Analysis Generated",
        "description": (
            "AI analysis completed for your marketing data. "
            "Review individual channels for detailed insights."
        ),
        "priority": "medium",
        "channel": "cross-channel",
        "impact": "Comprehensive data analysis available",
        "action": "Review detailed metrics in each channel dashboard",
        "recommendations": {},
    }


class InsightsEngine:
    """
    Turns SEO, ads and lead data into prioritized recommendations
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm = llm_client or LLMClient()

    async def analyze(
        self,
        website: str,
        seo_data: Dict[str, Any],
        google_ads_data: Optional[Dict[str, Any]] = None,
        leads_data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Generate insights for a website

        Returns:
            {"success", "insights", "website", "timestamp"}; output the model
            returns in an unusable shape becomes a single fallback insight
        """
        keywords = seo_data.get("keywords") or []
        pages = seo_data.get("pages") or []
        logger.info(f"Analyzing data for {website}: {len(keywords)} keywords, {len(pages)} pages")
        if google_ads_data or leads_data:
            logger.debug("Ads and leads data received; the prompt covers SEO data only")

        content = await self.llm.generate_completion(
            prompt=build_prompt(website, seo_data),
            system_prompt=SYSTEM_PROMPT,
            temperature=0.7,
            max_tokens=2000,
        )

        return {
            "success": True,
            "insights": self.parse_insights(content),
            "website": website,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def parse_insights(content: str) -> List[Dict[str, Any]]:
        try:
            parsed = LLMClient.parse_json(content)
            raw_insights = parsed.get("insights") or []
            if not isinstance(raw_insights, list):
                raise ValueError("insights is not a list")
            return [normalize_insight(item) for item in raw_insights if isinstance(item, dict)]
        except (ValueError, AttributeError) as e:
            logger.error(f"Error parsing AI response: {str(e)}")
            return [fallback_insight()]
