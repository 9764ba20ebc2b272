import logging
import time
from typing import Any, List, Optional

from fastapi import APIRouter, Header
from pydantic import BaseModel

import store
from models import CONTENT_TYPES, GenerationContext
from .generator import GenerationInput, generate_content
from .helper import api_error, api_response
from .voice import analyze_voice_cached

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Content Studio"])

RECENT_POSTS_FOR_CONTEXT = 3


# ──────────────────────────────────────────────
# Pydantic Models
# ──────────────────────────────────────────────

class GenerateRequest(BaseModel):
    topic: Optional[str] = None
    contentType: str = "long"
    creativityLevel: float = 30
    samplePosts: List[str] = []
    trends: List[str] = []
    personaId: Optional[str] = None
    pillarId: Optional[str] = None


# ──────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────

@router.post("/generate")
async def generate(body: GenerateRequest, x_user_id: Optional[str] = Header(None)):
    start_time = time.time()

    if not body.topic or not body.topic.strip():
        return api_error("Topic is required", 400)
    if body.contentType not in CONTENT_TYPES:
        return api_error(f"contentType must be one of: {', '.join(CONTENT_TYPES)}", 400)
    if not 0 <= body.creativityLevel <= 100:
        return api_error("creativityLevel must be between 0 and 100", 400)

    topic = body.topic.strip()
    creativity = int(body.creativityLevel)
    use_persona = bool(body.personaId and x_user_id)
    logger.info("[generate] Request started: topic=%r type=%s creativity=%d persona=%s",
                topic[:80], body.contentType, creativity, body.personaId if use_persona else None)

    try:
        voice_profile = None
        stored_profile = None
        sample_posts = body.samplePosts

        if use_persona and await store.get_persona(x_user_id, body.personaId) is None:
            return api_error("Persona not found", 404)

        # Analyze voice from sample posts if provided, else fall back to the persona's stored voice
        if sample_posts:
            voice_profile = await analyze_voice_cached(sample_posts)
        elif use_persona:
            stored_profile = await store.get_current_voice_profile(x_user_id, body.personaId)
            if stored_profile:
                voice_profile = stored_profile.to_analysis()
            recent = await store.list_posts(x_user_id, body.personaId)
            sample_posts = [p.content for p in recent[:RECENT_POSTS_FOR_CONTEXT]]

        llm_start = time.time()
        result = await generate_content(GenerationInput(
            topic=topic,
            content_type=body.contentType,
            creativity_level=creativity,
            voice_profile=voice_profile,
            sample_posts=sample_posts,
            trends=body.trends,
        ))
        logger.info("[generate] Generation took: %.3fs", time.time() - llm_start)

        variations = [v.model_dump() for v in result.variations]
        generation_id = None
        if use_persona:
            generation = await store.save_generation(
                x_user_id,
                body.personaId,
                voice_profile_id=stored_profile.id if stored_profile else None,
                topic=topic,
                creativity_level=creativity,
                content_type=body.contentType,
                pillar_id=body.pillarId,
                context_used=GenerationContext(
                    recent_posts=sample_posts,
                    trends_included=body.trends,
                    voice_profile_version=stored_profile.version if stored_profile else None,
                ),
                variations=result.variations,
                status="generated",
                generation_time_ms=result.generation_time_ms,
            )
            generation_id = generation.id

        data: dict[str, Any] = {
            "variations": variations,
            "generationTimeMs": result.generation_time_ms,
            "voiceProfileUsed": voice_profile is not None,
            "generationId": generation_id,
        }
        logger.info("[generate] Total request time: %.3fs", time.time() - start_time)
        return api_response(data)

    except store.PersonaNotFound:
        return api_error("Persona not found", 404)
    except Exception:
        logger.exception("[generate] Failed to generate content")
        return api_error("Failed to generate content", 500)
