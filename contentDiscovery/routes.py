import logging
import time
from typing import Any, List, Optional

from fastapi import APIRouter, File, Form, Header, UploadFile
from pydantic import BaseModel

import config
import store
from contentStudio.helper import api_error, api_response
from models import DiscoveredPillar, PLATFORMS
from .decks import (
    DeckExtractionError,
    analyze_multiple_decks,
    enrich_pillars_with_decks,
    extract_text_from_pdf,
    mark_post_pillars,
    parse_pasted_deck_text,
)
from .pillars import discover_pillars, suggest_topics
from .trends import (
    DEFAULT_MIN_RELEVANCE,
    firecrawl_search,
    generate_trend_sources,
    get_mock_trends,
    scan_trends,
    score_and_filter_trends,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/discover", tags=["Discovery"])

MIN_POSTS = 3
MIN_POST_LENGTH = 50
MAX_POSTS_ANALYZED = 20
MAX_DECK_BYTES = 10 * 1024 * 1024
DEFAULT_TOPIC_COUNT = 10
MAX_TOPIC_COUNT = 50

PILLARS_FAILED = "Failed to discover pillars. Please try again."
TOPICS_FAILED = "Failed to generate topic suggestions. Please try again."
TRENDS_FAILED = "Failed to discover trends. Please try again."
DECKS_FAILED = "Failed to analyze decks. Please try again."


# ──────────────────────────────────────────────
# Pydantic Models
# ──────────────────────────────────────────────

class PastedDeck(BaseModel):
    fileName: str = "Manual Entry"
    content: str


class DiscoverPillarsRequest(BaseModel):
    posts: Optional[Any] = None
    decks: List[PastedDeck] = []
    personaId: Optional[str] = None


class PillarInput(BaseModel):
    name: str
    description: str = ""
    example_topics: List[str] = []


class SuggestTopicsRequest(BaseModel):
    pillars: List[PillarInput] = []
    voiceSummary: Optional[str] = None
    recentTopics: List[str] = []
    count: Optional[int] = None


class DiscoverTrendsRequest(BaseModel):
    pillars: List[PillarInput] = []
    voiceSummary: Optional[str] = None
    minRelevanceScore: Optional[int] = None
    platform: str = "linkedin"
    liveSearch: bool = False
    personaId: Optional[str] = None


def _validate_pillars_and_voice(pillars, voice_summary):
    if not pillars:
        return api_error("Please provide at least one content pillar", 400)
    if not voice_summary:
        return api_error("Voice summary is required", 400)
    return None


# ──────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────

@router.post("/pillars")
async def discover_pillars_route(body: DiscoverPillarsRequest, x_user_id: Optional[str] = Header(None)):
    """Analyze a user's posts (and optionally pasted decks) to discover content pillars."""
    start_time = time.time()

    if not isinstance(body.posts, list) or len(body.posts) < MIN_POSTS:
        return api_error("Please provide at least 3 posts for pillar discovery", 400)

    valid_posts = [p for p in body.posts if isinstance(p, str) and len(p.strip()) > MIN_POST_LENGTH]
    if len(valid_posts) < MIN_POSTS:
        return api_error("Posts are too short. Each post should be at least 50 characters.", 400)

    posts_to_analyze = valid_posts[:MAX_POSTS_ANALYZED]
    logger.info("[discoverPillars] Analyzing %d of %d posts, %d decks",
                len(posts_to_analyze), len(body.posts), len(body.decks))

    try:
        result = await discover_pillars(posts_to_analyze)
        if result is None:
            return api_error(PILLARS_FAILED, 500)

        post_pillars = [p.model_dump(exclude={"sources", "deckEvidence"}) for p in result.pillars]
        data: dict[str, Any] = {
            "pillars": mark_post_pillars(post_pillars),
            "summary": result.summary,
        }

        if body.decks:
            deck_analysis = None
            try:
                decks = [parse_pasted_deck_text(d.content, d.fileName) for d in body.decks]
                deck_analysis = await analyze_multiple_decks(decks)
            except Exception:
                logger.exception("[discoverPillars] Deck analysis failed, using posts only")

            if deck_analysis:
                data["pillars"] = enrich_pillars_with_decks(post_pillars, deck_analysis)
                data["deckInsights"] = deck_analysis["overallVoice"]
            else:
                logger.warning("[discoverPillars] Deck analysis produced nothing, using posts only")

        if body.personaId and x_user_id:
            pillars = [DiscoveredPillar.model_validate(p) for p in data["pillars"]]
            await store.replace_pillars(x_user_id, body.personaId, pillars)

        logger.info("[discoverPillars] Total time: %.2fs", time.time() - start_time)
        return api_response(data)

    except store.PersonaNotFound:
        return api_error("Persona not found", 404)
    except Exception:
        logger.exception("[discoverPillars] Failed")
        return api_error(PILLARS_FAILED, 500)


@router.post("/topics")
async def suggest_topics_route(body: SuggestTopicsRequest):
    """Generate topic suggestions based on pillars and voice."""
    invalid = _validate_pillars_and_voice(body.pillars, body.voiceSummary)
    if invalid:
        return invalid
    count = DEFAULT_TOPIC_COUNT if body.count is None else body.count
    if not 1 <= count <= MAX_TOPIC_COUNT:
        return api_error(f"count must be between 1 and {MAX_TOPIC_COUNT}", 400)

    try:
        topics = await suggest_topics(
            [p.model_dump() for p in body.pillars],
            body.voiceSummary,
            body.recentTopics,
            count,
        )
        return api_response(topics)
    except Exception:
        logger.exception("[suggestTopics] Failed")
        return api_error(TOPICS_FAILED, 500)


@router.post("/trends")
async def discover_trends_route(body: DiscoverTrendsRequest, x_user_id: Optional[str] = Header(None)):
    """Get trending topics scored and filtered by the persona's pillars."""
    invalid = _validate_pillars_and_voice(body.pillars, body.voiceSummary)
    if invalid:
        return invalid
    if body.platform not in PLATFORMS:
        return api_error(f"platform must be one of: {', '.join(PLATFORMS)}", 400)

    start_time = time.time()
    pillars = [p.model_dump() for p in body.pillars]
    min_score = DEFAULT_MIN_RELEVANCE if body.minRelevanceScore is None else body.minRelevanceScore

    try:
        if body.liveSearch and config.FIRECRAWL_API_KEY:
            raw_trends = await scan_trends(generate_trend_sources(pillars, body.platform), firecrawl_search)
        else:
            raw_trends = get_mock_trends()
        logger.info("[discoverTrends] Scoring %d trends (min score %d)", len(raw_trends), min_score)

        scored = await score_and_filter_trends(raw_trends, pillars, body.voiceSummary, min_score)

        if body.personaId and x_user_id and scored:
            await store.save_persona_trends(x_user_id, body.personaId, scored)

        logger.info("[discoverTrends] Total time: %.2fs", time.time() - start_time)
        return api_response(scored)
    except store.PersonaNotFound:
        return api_error("Persona not found", 404)
    except Exception:
        logger.exception("[discoverTrends] Failed")
        return api_error(TRENDS_FAILED, 500)


@router.post("/decks")
async def analyze_decks_route(
    files: Optional[List[UploadFile]] = File(None),
    deckText: Optional[str] = Form(None),
    deckName: Optional[str] = Form(None),
):
    """Analyze uploaded PDF decks and/or pasted deck text for narrative patterns."""
    decks = []
    for upload in files or []:
        if not upload.filename:
            continue
        is_pdf = upload.filename.lower().endswith(".pdf") or upload.content_type == "application/pdf"
        if not is_pdf:
            return api_error(f"Only PDF decks are supported: {upload.filename}", 400)
        content = await upload.read()
        if len(content) > MAX_DECK_BYTES:
            return api_error(f"File too large: {upload.filename}", 400)
        try:
            decks.append(extract_text_from_pdf(content, upload.filename))
        except DeckExtractionError as e:
            logger.warning("[analyzeDecks] %s", e)
            return api_error(str(e), 400)

    if deckText and deckText.strip():
        decks.append(parse_pasted_deck_text(deckText, deckName or "Manual Entry"))

    if not decks:
        return api_error("Please provide at least one deck", 400)

    try:
        result = await analyze_multiple_decks(decks)
        if result is None:
            return api_error(DECKS_FAILED, 500)
        return api_response(result)
    except Exception:
        logger.exception("[analyzeDecks] Failed")
        return api_error(DECKS_FAILED, 500)
