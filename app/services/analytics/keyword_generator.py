"""
Keyword Generator - Synthetic keyword data for demo and competitor views

Every random draw of one generation comes from a single random.Random seeded
from the domain, so the same domain always yields the same records.
"""

from typing import List, Optional
import logging
import math
import random
import re

from app.models.seo import (
    CompetitorAnalysis,
    CompetitorOverview,
    CountryShare,
    KeywordRecord,
    OverviewStats,
    TopPage,
    TrafficDistribution,
)
from app.services.analytics.seo_analytics import compute_stats

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 1000

CTR_BY_POSITION = {
    1: 31.7, 2: 24.7, 3: 18.7, 4: 13.7, 5: 9.5,
    6: 6.1, 7: 4.4, 8: 3.1, 9: 2.5, 10: 2.2
}

# (upper bound of the 0-99 draw, lowest position, highest position)
POSITION_BUCKETS = [
    (5, 1, 3),
    (15, 4, 10),
    (35, 11, 20),
    (65, 21, 50),
    (100, 51, 100),
]

INDUSTRY_KEYWORDS = {
    "security": [
        "cybersecurity solutions", "network security", "data protection", "threat detection",
        "security consulting", "penetration testing", "vulnerability assessment", "compliance audit",
        "incident response", "security training", "firewall management", "endpoint security",
        "cloud security", "security monitoring", "risk assessment", "security software"
    ],
    "marketing": [
        "digital marketing", "seo services", "ppc management", "social media marketing",
        "content marketing", "email marketing", "conversion optimization", "marketing automation",
        "brand strategy", "online advertising", "lead generation", "marketing analytics",
        "web design", "marketing consultant", "growth hacking", "marketing tools"
    ],
    "tech": [
        "software development", "web development", "mobile app development", "cloud computing",
        "artificial intelligence", "machine learning", "data analytics", "business intelligence",
        "enterprise software", "saas solutions", "api development", "devops services",
        "software consulting", "tech support", "system integration", "database management"
    ],
    "business": [
        "business solutions", "professional services", "consulting services", "business consulting",
        "customer service", "business development", "project management", "business strategy",
        "operational efficiency", "process improvement", "quality assurance", "business analytics",
        "customer experience", "business automation", "workflow optimization", "business growth"
    ],
}

COMPETITOR_TERMS = {
    "security": ["best cybersecurity", "top security companies", "enterprise security", "security providers"],
    "marketing": ["best marketing agencies", "top digital marketers", "marketing companies", "seo agencies"],
    "business": ["best business solutions", "top consultants", "business services", "professional firms"],
}

BRAND_SUFFIXES = [
    "", "reviews", "pricing", "features", "alternatives", "vs", "demo", "login",
    "support", "tutorial", "guide", "benefits", "comparison", "cost", "trial", "software"
]

MODIFIERS = [
    "best", "top", "professional", "expert", "advanced", "premium", "affordable", "custom",
    "enterprise", "small business", "local", "online", "managed", "comprehensive", "innovative"
]

QUALIFIERS = ["near me", "services", "solutions", "company", "provider"]

COUNTRIES = [
    ("United States", 45, 20),
    ("United Kingdom", 8, 10),
    ("Canada", 5, 8),
    ("Australia", 3, 5),
    ("Germany", 2, 4),
]


def extract_domain(url: str) -> str:
    """Strip protocol, leading www. and any path"""
    stripped = re.sub(r"^(?:https?://)?(?:www\.)?", "", url.strip(), flags=re.IGNORECASE)
    return stripped.split("/")[0]


def domain_seed(domain: str) -> int:
    """Sum of the character codes of the domain"""
    return sum(ord(char) for char in domain)


def industry_for(domain: str) -> str:
    domain_lower = domain.lower()
    if "security" in domain_lower or "cyber" in domain_lower:
        return "security"
    if "marketing" in domain_lower or "digital" in domain_lower:
        return "marketing"
    if "tech" in domain_lower or "software" in domain_lower:
        return "tech"
    return "business"


def brand_name(domain: str) -> str:
    return re.sub(r"[-_]", " ", domain.split(".")[0]).lower()


def base_ctr(position: int) -> float:
    if position <= 10:
        return CTR_BY_POSITION.get(position, 1.0)
    return max(0.1, 2.0 / position)


def difficulty_base(keyword: str) -> int:
    if len(keyword.split(" ")) == 1:
        return 70
    if "best" in keyword or "top" in keyword:
        return 65
    return 50


def trend_for(change: int) -> str:
    if change > 2:
        return "up"
    if change < -2:
        return "down"
    return "stable"


def format_change(change: int) -> str:
    return f"+{change}" if change >= 0 else str(change)


class SyntheticKeywordGenerator:
    """
    Produces plausible keyword records for a domain

    Args:
        domain: Bare domain or URL
        seed: Explicit seed; defaults to the domain's character-code sum
    """

    def __init__(self, domain: str, seed: Optional[int] = None):
        self.domain = extract_domain(domain) or domain
        self.seed = domain_seed(self.domain) if seed is None else seed
        self.rng = random.Random(self.seed)
        self.brand = brand_name(self.domain)
        self.industry = industry_for(self.domain)

    def keyword_pool(self, limit: int = MAX_KEYWORDS) -> List[str]:
        """Industry, brand, competitor and variation keywords, de-duplicated"""
        industry_keywords = INDUSTRY_KEYWORDS[self.industry]
        competitor_terms = COMPETITOR_TERMS.get(self.industry, COMPETITOR_TERMS["business"])
        brand_keywords = [f"{self.brand} {suffix}".strip() for suffix in BRAND_SUFFIXES]

        bases = industry_keywords + competitor_terms
        variations = []
        for base in bases:
            variations.extend(f"{modifier} {base}" for modifier in MODIFIERS)
            variations.extend(f"{base} {qualifier}" for qualifier in QUALIFIERS)
            variations.extend(
                f"{modifier} {base} {qualifier}"
                for modifier in MODIFIERS
                for qualifier in QUALIFIERS
            )
        self.rng.shuffle(variations)

        pool = []
        seen = set()
        for keyword in industry_keywords + brand_keywords + competitor_terms + variations:
            if keyword in seen:
                continue
            seen.add(keyword)
            pool.append(keyword)
            if len(pool) >= limit:
                break
        return pool

    def generate(self, limit: int = MAX_KEYWORDS, enhanced: bool = False) -> List[KeywordRecord]:
        """
        Generate up to `limit` keyword records

        Args:
            limit: Maximum number of records, capped at 1000
            enhanced: Also fill ctr, cpc and trend

        Returns:
            List of KeywordRecord in generation order
        """
        keywords = [
            self._entry(keyword, enhanced)
            for keyword in self.keyword_pool(min(limit, MAX_KEYWORDS))
        ]
        logger.info(f"Generated {len(keywords)} synthetic keywords for {self.domain}")
        return keywords

    def generate_stats(self, keywords: List[KeywordRecord], enhanced: bool = False) -> OverviewStats:
        stats = compute_stats(keywords)
        if enhanced:
            stats = stats.model_copy(update={"total_pages": math.floor(len(keywords) * 0.8)})
        return stats

    def _position(self) -> int:
        weight = self.rng.randrange(100)
        for upper, low, high in POSITION_BUCKETS:
            if weight < upper:
                return self.rng.randint(low, high)
        return self.rng.randint(51, 100)

    def _change(self) -> int:
        roll = self.rng.randrange(100)
        if roll < 20:
            return 0
        if roll < 60:
            return self.rng.randint(1, 5)
        return -self.rng.randint(1, 5)

    def _entry(self, keyword: str, enhanced: bool) -> KeywordRecord:
        position = self._position()

        if self.brand and self.brand in keyword:
            volume = 500 + self.rng.randrange(2000)
        else:
            volume = 1000 + self.rng.randrange(8000)
        search_volume = volume // 10 * 10

        jitter = self.rng.randrange(30) - 15
        difficulty = min(100, max(1, difficulty_base(keyword) + jitter))

        ctr = base_ctr(position) * self.rng.uniform(0.8, 1.2)
        change = self._change()

        fields = {
            "keyword": keyword,
            "landing_url": f"https://{self.domain}/{keyword.replace(' ', '-')}",
            "position": position,
            "search_volume": search_volume,
            "change": format_change(change),
            "estimated_visits": math.floor(search_volume * ctr / 100),
            "difficulty": difficulty,
        }
        if enhanced:
            fields["ctr"] = round(ctr, 1)
            fields["cpc"] = round(self.rng.uniform(0.5, 5.0), 2)
            fields["trend"] = trend_for(change)
        return KeywordRecord(**fields)

    def competitor_overview(self, keywords: List[KeywordRecord]) -> CompetitorOverview:
        monthly_visits = sum(k.estimated_visits for k in keywords)
        rng = self.rng
        return CompetitorOverview(
            domain_authority=min(85, max(15, 30 + self.seed % 40)),
            backlinks=1000 + self.seed % 50000,
            referring_domains=100 + self.seed % 2000,
            organic_keywords=len(keywords),
            paid_keywords=math.floor(len(keywords) * 0.3),
            traffic_value=math.floor(monthly_visits * 2.5),
            monthly_visits=monthly_visits,
            bounce_rate=min(80, max(25, 45 + self.seed % 20)),
            avg_session_duration=f"{rng.randint(2, 4)}:{rng.randrange(60):02d}",
            pages_per_session=round(rng.uniform(1.5, 4.5), 1),
            traffic_distribution=TrafficDistribution(
                organic=rng.randint(40, 79),
                paid=rng.randint(5, 24),
                direct=rng.randint(10, 24),
                referral=rng.randint(5, 14),
                social=rng.randint(2, 9),
                email=rng.randint(1, 5),
            ),
            top_countries=[
                CountryShare(country=country, percentage=base + rng.randrange(spread))
                for country, base, spread in COUNTRIES
            ],
            top_pages=[
                TopPage(url=k.landing_url, traffic=k.estimated_visits, keywords=rng.randint(10, 59))
                for k in keywords[:5]
            ],
        )


def generate_keywords(domain: str, enhanced: bool = False, limit: int = MAX_KEYWORDS) -> List[KeywordRecord]:
    return SyntheticKeywordGenerator(domain).generate(limit=limit, enhanced=enhanced)


def generate_competitor_analysis(url: str, limit: int = MAX_KEYWORDS) -> CompetitorAnalysis:
    """
    Enhanced keywords, overview and stats for a competitor URL

    All values come from one generator, so repeated calls for the same URL
    return identical analyses.
    """
    generator = SyntheticKeywordGenerator(url)
    keywords = generator.generate(limit=limit, enhanced=True)
    return CompetitorAnalysis(
        domain=generator.domain,
        keywords=keywords,
        overview=generator.competitor_overview(keywords),
        stats=generator.generate_stats(keywords, enhanced=True),
    )
