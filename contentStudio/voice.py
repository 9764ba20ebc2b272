"""Voice analysis: extract a persona's writing patterns from past posts."""
import logging

from pydantic import ValidationError

from cache import get_cached, set_cached, voice_cache_key
from llm_utils import generate_json
from models import VoiceAnalysisResult
from .prompts import VoiceAnalysisPrompt, QuickVoicePrompt

logger = logging.getLogger(__name__)


async def analyze_voice(posts: list[str]) -> VoiceAnalysisResult | None:
    """
    Analyze a collection of posts to extract voice patterns.

    Returns None when there are no posts or the model reply cannot be
    parsed into a voice analysis.
    """
    if not posts:
        return None

    prompt = VoiceAnalysisPrompt(posts).generate_prompt()
    result = await generate_json(prompt, temperature=0.3)
    if not isinstance(result, dict):
        return None

    try:
        return VoiceAnalysisResult.model_validate(result)
    except ValidationError as e:
        logger.error("[analyze_voice] Unexpected analysis shape: %s", e)
        return None


async def quick_analyze_voice(posts: list[str]) -> str | None:
    """Short natural-language voice summary, used during onboarding."""
    if not posts:
        return None

    prompt = QuickVoicePrompt(posts).generate_prompt()
    result = await generate_json(prompt, temperature=0.5, model="fast")
    if not isinstance(result, dict):
        return None
    return result.get("summary") or None


async def analyze_voice_cached(posts: list[str]) -> VoiceAnalysisResult | None:
    """analyze_voice, memoised in the Firestore cache by post content."""
    if not posts:
        return None

    key = voice_cache_key(posts)
    cached = await get_cached(key)
    if cached:
        try:
            analysis = VoiceAnalysisResult.model_validate(cached)
            logger.info("[analyze_voice] Cache HIT for %d posts", len(posts))
            return analysis
        except ValidationError:
            logger.warning("[analyze_voice] Ignoring malformed cache entry %s", key)

    analysis = await analyze_voice(posts)
    if analysis is not None:
        await set_cached(key, analysis.model_dump())
    return analysis
