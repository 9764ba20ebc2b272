"""
Trend scanning and persona-relevance filtering.

scan_trends() takes the search function as an argument; firecrawl_search()
is the live implementation, used when a Firecrawl API key is configured.
"""
import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable

import httpx

import config
from .pillars import score_trend_relevance

logger = logging.getLogger(__name__)

FIRECRAWL_SEARCH_URL = "https://api.firecrawl.dev/v1/search"
KEYWORDS_PER_SOURCE = 3
RESULTS_PER_KEYWORD = 5
DEFAULT_MIN_RELEVANCE = 60
# Placeholder until real trend volume data is available from sources
DEFAULT_TRENDING_SCORE = 75

SearchFn = Callable[[str], Awaitable[list[dict]]]


@dataclass
class TrendSource:
    name: str
    url: str
    keywords: list[str] = field(default_factory=list)


@dataclass
class ScannedTrend:
    title: str
    summary: str
    source_url: str
    source_name: str
    keywords: list[str]
    discovered_at: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def scan_trends(sources: list[TrendSource], search: SearchFn) -> list[ScannedTrend]:
    """
    Search each source's keywords and collect the results as trends.

    A source whose search fails is logged and skipped. Trends are
    deduplicated by case-insensitive title.
    """
    all_trends: list[ScannedTrend] = []

    for source in sources:
        try:
            for keyword in source.keywords[:KEYWORDS_PER_SOURCE]:
                results = await search(keyword)
                for result in results[:RESULTS_PER_KEYWORD]:
                    all_trends.append(ScannedTrend(
                        title=result["title"],
                        summary=result.get("summary") or result["title"],
                        source_url=result.get("url", ""),
                        source_name=source.name,
                        keywords=[keyword],
                        discovered_at=_now(),
                    ))
        except Exception:
            logger.exception("[TrendScanner] Failed to scan %s", source.name)

    # later duplicates replace earlier ones, first-seen order kept
    unique: dict[str, ScannedTrend] = {}
    for trend in all_trends:
        unique[trend.title.lower()] = trend
    return list(unique.values())


async def firecrawl_search(query: str) -> list[dict]:
    """Web search through Firecrawl. Returns [{title, summary, url}]."""
    async with httpx.AsyncClient(timeout=30) as client:
        r = await client.post(
            FIRECRAWL_SEARCH_URL,
            json={"query": query, "limit": RESULTS_PER_KEYWORD},
            headers={"Authorization": f"Bearer {config.FIRECRAWL_API_KEY}"},
        )
        r.raise_for_status()
        data = r.json()

    return [
        {
            "title": item.get("title") or item.get("url", ""),
            "summary": item.get("description") or "",
            "url": item.get("url", ""),
        }
        for item in data.get("data") or []
        if item.get("title") or item.get("url")
    ]


async def score_and_filter_trends(
    trends: list[ScannedTrend],
    pillars: list[dict],
    voice_summary: str,
    min_relevance_score: int = DEFAULT_MIN_RELEVANCE,
) -> list[dict]:
    """
    Score trends against a persona's pillars and voice, keeping those at or
    above min_relevance_score, most relevant first.
    """
    results = await asyncio.gather(
        *[score_trend_relevance(t.title, t.summary, pillars, voice_summary) for t in trends],
        return_exceptions=True,
    )

    scored = []
    for trend, scoring in zip(trends, results):
        if isinstance(scoring, Exception):
            logger.error("[TrendScorer] Failed to score trend %r: %s", trend.title, scoring)
            continue
        if scoring["relevanceScore"] < min_relevance_score:
            continue
        scored.append({
            **asdict(trend),
            "relevance_score": scoring["relevanceScore"],
            "matched_pillars": scoring["matchedPillars"],
            "has_conflict": scoring["hasConflict"],
            "conflict_reason": scoring["conflictReason"],
            "suggested_angle": scoring["suggestedAngle"],
            "trending_score": DEFAULT_TRENDING_SCORE,
        })

    return sorted(scored, key=lambda t: t["relevance_score"], reverse=True)


def generate_trend_sources(pillars: list[dict], platform: str = "linkedin") -> list[TrendSource]:
    """Build trend sources whose search keywords come from the persona's pillars."""
    keywords = []
    for pillar in pillars:
        keywords.append(pillar["name"])
        keywords.extend((pillar.get("example_topics") or [])[:2])

    if platform == "instagram":
        return [
            TrendSource(name="Instagram Trends", url="https://www.instagram.com/explore", keywords=keywords[:5]),
        ]

    tech_keywords = [
        k for k in keywords
        if any(term in k.lower() for term in ("tech", "startup", "engineering"))
    ]
    return [
        TrendSource(name="LinkedIn News", url="https://www.linkedin.com/news", keywords=keywords[:5]),
        TrendSource(name="Tech News", url="https://news.ycombinator.com", keywords=tech_keywords),
    ]


def get_mock_trends() -> list[ScannedTrend]:
    """Built-in trending topics, used when live search is not configured."""
    now = _now()
    return [
        ScannedTrend(
            title="AI agents are replacing junior developers in 2026",
            summary="Major tech companies report 40% reduction in junior developer hiring as AI coding assistants become more capable",
            source_url="https://example.com/ai-developers",
            source_name="Tech News",
            keywords=["AI", "hiring", "developers"],
            discovered_at=now,
        ),
        ScannedTrend(
            title="Remote work exodus: Companies mandate 4-day office returns",
            summary="Wave of return-to-office mandates hits tech industry, sparking debate about productivity and culture",
            source_url="https://example.com/remote-work",
            source_name="LinkedIn News",
            keywords=["remote work", "culture", "productivity"],
            discovered_at=now,
        ),
        ScannedTrend(
            title="Startup funding hits 5-year low in Q1 2026",
            summary="VC funding drops 60% year-over-year as investors focus on profitability over growth",
            source_url="https://example.com/funding",
            source_name="Business News",
            keywords=["startup", "funding", "VC"],
            discovered_at=now,
        ),
        ScannedTrend(
            title="LinkedIn introduces AI-powered content scoring",
            summary="New algorithm ranks content based on authenticity and expertise, not just engagement",
            source_url="https://example.com/linkedin-ai",
            source_name="LinkedIn News",
            keywords=["LinkedIn", "content", "AI"],
            discovered_at=now,
        ),
        ScannedTrend(
            title="Four-day work week trials show 91% success rate",
            summary="Global study finds productivity increased while burnout decreased in 4-day week pilots",
            source_url="https://example.com/4-day-week",
            source_name="Work Culture",
            keywords=["work culture", "productivity", "leadership"],
            discovered_at=now,
        ),
    ]
