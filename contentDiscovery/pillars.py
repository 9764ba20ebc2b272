"""Pillar discovery, post categorization, topic suggestions and trend relevance."""
import logging

from pydantic import ValidationError

from contentStudio.helper import clamp_score
from llm_utils import generate_json
from models import PillarDiscoveryResult
from .prompts import (
    CategorizePostsPrompt,
    PillarDiscoveryPrompt,
    TopicSuggestionPrompt,
    TrendRelevancePrompt,
)

logger = logging.getLogger(__name__)

MIN_POSTS_FOR_PILLARS = 3


async def discover_pillars(posts: list[str]) -> PillarDiscoveryResult | None:
    """
    Analyze a user's past posts to discover their 3-5 content pillars.

    Returns None with fewer than 3 posts (no pattern to find) or when the
    model reply cannot be parsed.
    """
    if len(posts) < MIN_POSTS_FOR_PILLARS:
        return None

    prompt = PillarDiscoveryPrompt(posts).generate_prompt()
    result = await generate_json(prompt, temperature=0.3)
    if not isinstance(result, dict):
        return None

    try:
        discovery = PillarDiscoveryResult.model_validate(result)
    except ValidationError as e:
        logger.error("[discover_pillars] Unexpected reply shape: %s", e)
        return None

    discovery.pillars.sort(key=lambda p: p.post_count, reverse=True)
    return discovery


async def categorize_posts(posts: list[str], pillars: list[dict]) -> list[dict]:
    """Match each post to 1-2 of the given pillars (each pillar needs id, name, description)."""
    if not posts or not pillars:
        return []

    prompt = CategorizePostsPrompt(posts, pillars).generate_prompt()
    result = await generate_json(prompt, temperature=0.2)
    if not isinstance(result, dict):
        return []
    return result.get("categorizations") or []


async def suggest_topics(
    pillars: list[dict],
    voice_summary: str,
    recent_topics: list[str] | None = None,
    count: int = 10,
) -> list[dict]:
    """
    Generate topic suggestions based on pillars and voice profile.
    This is the "what should I write about next?" feature.
    """
    if not pillars:
        return []

    prompt = TopicSuggestionPrompt(pillars, voice_summary, recent_topics or [], count).generate_prompt()
    result = await generate_json(prompt, temperature=0.7, max_tokens=4096)
    if not isinstance(result, dict):
        return []

    topics = [t for t in result.get("topics") or [] if isinstance(t, dict)]
    return sorted(topics, key=lambda t: clamp_score(t.get("overallScore"), 0), reverse=True)


async def score_trend_relevance(
    trend_title: str,
    trend_summary: str,
    pillars: list[dict],
    voice_summary: str,
) -> dict:
    """Score how relevant a trend or news item is to a persona's pillars."""
    prompt = TrendRelevancePrompt(trend_title, trend_summary, pillars, voice_summary).generate_prompt()
    result = await generate_json(prompt, temperature=0.3, model="fast")

    if not isinstance(result, dict):
        return {
            "relevanceScore": 0,
            "matchedPillars": [],
            "hasConflict": False,
            "conflictReason": None,
            "suggestedAngle": None,
        }

    return {
        "relevanceScore": clamp_score(result.get("relevanceScore"), 0),
        "matchedPillars": result.get("matchedPillars") or [],
        "hasConflict": bool(result.get("hasConflict")),
        "conflictReason": result.get("conflictReason"),
        "suggestedAngle": result.get("suggestedAngle"),
    }
