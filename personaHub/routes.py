import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Header
from pydantic import BaseModel

import store
from contentDiscovery.pillars import categorize_posts
from contentStudio.helper import api_error, api_response
from contentStudio.voice import analyze_voice_cached, quick_analyze_voice
from formatting import format_date, format_number, format_percent, format_relative_time, truncate
from models import CALENDAR_STATUSES, CONTENT_TYPES, FEEDBACK_ACTIONS, PLATFORMS, RejectionReason

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Personas"])

MIN_POSTS_FOR_VOICE = 3
TOP_POST_PREVIEW_LENGTH = 120

USER_REQUIRED = "X-User-Id header is required"
PERSONA_NOT_FOUND = "Persona not found"
VOICE_FAILED = "Failed to analyze voice. Please try again."
CALENDAR_FAILED = "Failed to update calendar. Please try again."


def _utc_iso(value: Optional[datetime]) -> Optional[str]:
    """Store timestamps as UTC ISO strings so they sort chronologically."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


# ──────────────────────────────────────────────
# Pydantic Models
# ──────────────────────────────────────────────

class CreatePersonaRequest(BaseModel):
    name: Optional[str] = None
    platform: str = "linkedin"
    description: Optional[str] = None
    samplePosts: List[str] = []


class PostInput(BaseModel):
    content: str
    impressions: Optional[int] = None
    likes: Optional[int] = None
    comments: Optional[int] = None
    reposts: Optional[int] = None
    postedAt: Optional[datetime] = None
    contentType: str = "long"


class AddPostsRequest(BaseModel):
    posts: List[PostInput] = []


class FeedbackRequest(BaseModel):
    personaId: str
    variationId: str
    action: str
    rejectionReasons: Optional[List[RejectionReason]] = None
    rejectionNote: Optional[str] = None
    editedContent: Optional[str] = None


class CalendarItemRequest(BaseModel):
    scheduledDate: date
    scheduledTime: Optional[str] = None
    topic: str
    pillarId: Optional[str] = None
    contentType: str = "long"
    topicReasoning: Optional[str] = None


class CalendarUpdateRequest(BaseModel):
    status: Optional[str] = None
    generationId: Optional[str] = None


# ──────────────────────────────────────────────
# Personas
# ──────────────────────────────────────────────

@router.post("/personas")
async def create_persona(body: CreatePersonaRequest, x_user_id: Optional[str] = Header(None)):
    """Create a persona. Sample posts, when given, seed a short voice summary in its settings."""
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    if not body.name or not body.name.strip():
        return api_error("Persona name is required", 400)
    if body.platform not in PLATFORMS:
        return api_error(f"platform must be one of: {', '.join(PLATFORMS)}", 400)

    try:
        settings = {}
        if body.samplePosts:
            summary = await quick_analyze_voice(body.samplePosts)
            if summary:
                settings["voice_summary"] = summary

        persona = await store.create_persona(
            x_user_id, body.name.strip(), body.platform, body.description, settings
        )
        logger.info("[createPersona] Created persona %s for user %s", persona.id, x_user_id)
        return api_response(persona.model_dump(), status_code=201)
    except Exception:
        logger.exception("[createPersona] Failed")
        return api_error("Failed to create persona. Please try again.", 500)


@router.get("/personas")
async def list_personas(x_user_id: Optional[str] = Header(None)):
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    try:
        personas = await store.list_personas(x_user_id)
        return api_response([p.model_dump() for p in personas])
    except Exception:
        logger.exception("[listPersonas] Failed")
        return api_error("Failed to load personas. Please try again.", 500)


# ──────────────────────────────────────────────
# Posts
# ──────────────────────────────────────────────

@router.post("/personas/{persona_id}/posts")
async def add_posts(persona_id: str, body: AddPostsRequest, x_user_id: Optional[str] = Header(None)):
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    posts = [p for p in body.posts if p.content.strip()]
    if not posts:
        return api_error("Please provide at least one post", 400)
    for post in posts:
        if post.contentType not in CONTENT_TYPES:
            return api_error(f"contentType must be one of: {', '.join(CONTENT_TYPES)}", 400)

    try:
        saved = await store.add_posts(x_user_id, persona_id, [
            {
                "content": p.content.strip(),
                "content_type": p.contentType,
                "impressions": p.impressions,
                "likes": p.likes,
                "comments": p.comments,
                "reposts": p.reposts,
                "posted_at": _utc_iso(p.postedAt),
            }
            for p in posts
        ])
        logger.info("[addPosts] Stored %d posts for persona %s", len(saved), persona_id)
        return api_response([p.model_dump() for p in saved], status_code=201)
    except store.PersonaNotFound:
        return api_error(PERSONA_NOT_FOUND, 404)
    except Exception:
        logger.exception("[addPosts] Failed")
        return api_error("Failed to add posts. Please try again.", 500)


@router.get("/personas/{persona_id}/stats")
async def persona_stats(persona_id: str, x_user_id: Optional[str] = Header(None)):
    """Dashboard numbers for a persona's stored posts."""
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)

    try:
        if await store.get_persona(x_user_id, persona_id) is None:
            return api_error(PERSONA_NOT_FOUND, 404)

        posts = await store.list_posts(x_user_id, persona_id)
        total_impressions = sum(p.impressions or 0 for p in posts)
        rates = [p.engagement_rate for p in posts if p.engagement_rate is not None]
        avg_engagement = sum(rates) / len(rates) if rates else 0.0

        last_post = None
        if posts:
            last_at = posts[0].posted_at or posts[0].created_at
            try:
                last_post = {
                    "date": format_date(last_at),
                    "relative": format_relative_time(last_at),
                }
            except ValueError:
                logger.warning("[personaStats] Unparseable post date %r on post %s", last_at, posts[0].id)

        top_post = None
        with_rate = [p for p in posts if p.engagement_rate is not None]
        if with_rate:
            best = max(with_rate, key=lambda p: p.engagement_rate)
            top_post = {
                "id": best.id,
                "preview": truncate(best.content, TOP_POST_PREVIEW_LENGTH),
                "engagementRate": format_percent(best.engagement_rate),
            }

        return api_response({
            "postCount": len(posts),
            "totalImpressions": format_number(total_impressions),
            "avgEngagementRate": format_percent(avg_engagement),
            "lastPost": last_post,
            "topPost": top_post,
        })
    except Exception:
        logger.exception("[personaStats] Failed")
        return api_error("Failed to load persona stats. Please try again.", 500)


# ──────────────────────────────────────────────
# Voice
# ──────────────────────────────────────────────

@router.post("/personas/{persona_id}/voice")
async def analyze_persona_voice(persona_id: str, x_user_id: Optional[str] = Header(None)):
    """Analyze the persona's stored posts and save the result as the new current voice profile."""
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)

    try:
        if await store.get_persona(x_user_id, persona_id) is None:
            return api_error(PERSONA_NOT_FOUND, 404)

        posts = await store.list_posts(x_user_id, persona_id)
        if len(posts) < MIN_POSTS_FOR_VOICE:
            return api_error("At least 3 posts are needed to analyze a voice", 400)

        analysis = await analyze_voice_cached([p.content for p in posts])
        if analysis is None:
            return api_error(VOICE_FAILED, 500)

        profile = await store.save_voice_profile(
            x_user_id, persona_id, analysis, posts_analyzed=len(posts), last_post_id=posts[0].id
        )
        logger.info("[analyzeVoice] Persona %s now at voice version %d", persona_id, profile.version)
        return api_response(profile.model_dump(), status_code=201)
    except Exception:
        logger.exception("[analyzeVoice] Failed")
        return api_error(VOICE_FAILED, 500)


@router.get("/personas/{persona_id}/voice")
async def get_persona_voice(persona_id: str, x_user_id: Optional[str] = Header(None)):
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    try:
        profile = await store.get_current_voice_profile(x_user_id, persona_id)
    except Exception:
        logger.exception("[getVoice] Failed")
        return api_error("Failed to load voice profile. Please try again.", 500)
    if profile is None:
        return api_error("No voice profile yet", 404)
    return api_response(profile.model_dump())


# ──────────────────────────────────────────────
# Pillars
# ──────────────────────────────────────────────

@router.get("/personas/{persona_id}/pillars")
async def list_persona_pillars(persona_id: str, x_user_id: Optional[str] = Header(None)):
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    try:
        pillars = await store.list_pillars(x_user_id, persona_id)
        return api_response([p.model_dump() for p in pillars])
    except Exception:
        logger.exception("[listPillars] Failed")
        return api_error("Failed to load content pillars. Please try again.", 500)


@router.post("/personas/{persona_id}/posts/categorize")
async def categorize_persona_posts(persona_id: str, x_user_id: Optional[str] = Header(None)):
    """Tag each stored post with the ids of the active pillars it belongs to."""
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)

    try:
        pillars = await store.list_pillars(x_user_id, persona_id)
        if not pillars:
            return api_error("No content pillars yet", 400)
        posts = await store.list_posts(x_user_id, persona_id)
        if not posts:
            return api_error("Please provide at least one post", 400)

        categorizations = await categorize_posts(
            [p.content for p in posts],
            [{"id": p.id, "name": p.name, "description": p.description or ""} for p in pillars],
        )

        known_ids = {p.id for p in pillars}
        topics_by_post = {}
        for entry in categorizations:
            index = entry.get("postIndex")
            if not isinstance(index, int) or not 0 <= index < len(posts):
                continue
            pillar_ids = [
                m["pillarId"] for m in entry.get("matches") or []
                if isinstance(m, dict) and m.get("pillarId") in known_ids
            ]
            topics_by_post[posts[index].id] = pillar_ids

        await store.set_post_topics(x_user_id, persona_id, topics_by_post)
        return api_response(topics_by_post)
    except Exception:
        logger.exception("[categorizePosts] Failed")
        return api_error("Failed to categorize posts. Please try again.", 500)


# ──────────────────────────────────────────────
# Feedback
# ──────────────────────────────────────────────

@router.post("/generations/{generation_id}/feedback")
async def generation_feedback(generation_id: str, body: FeedbackRequest, x_user_id: Optional[str] = Header(None)):
    """Accept, reject or edit one variation of a stored generation."""
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    if body.action not in FEEDBACK_ACTIONS:
        return api_error(f"action must be one of: {', '.join(FEEDBACK_ACTIONS)}", 400)
    if body.action == "edit" and (not body.editedContent or not body.editedContent.strip()):
        return api_error("editedContent is required for edit", 400)

    try:
        generation = await store.get_generation(x_user_id, body.personaId, generation_id)
        if generation is None:
            return api_error("Generation not found", 404)

        variation = next((v for v in generation.variations if v.id == body.variationId), None)
        if variation is None:
            return api_error(f"Unknown variation: {body.variationId}", 400)

        if body.action == "accept":
            updates = {
                "status": "accepted",
                "selected_variation_id": variation.id,
                "final_content": variation.content,
            }
        elif body.action == "reject":
            updates = {"status": "rejected"}
        else:
            updates = {
                "status": "refined",
                "selected_variation_id": variation.id,
                "final_content": body.editedContent,
            }

        feedback = await store.record_feedback(
            x_user_id,
            body.personaId,
            generation_id,
            {
                "variation_id": variation.id,
                "action": body.action,
                "rejection_reasons": body.rejectionReasons,
                "rejection_note": body.rejectionNote,
                "original_content": variation.content,
                "edited_content": body.editedContent if body.action == "edit" else None,
            },
            updates,
        )
        logger.info("[feedback] %s on generation %s variation %s", body.action, generation_id, variation.id)
        return api_response({"feedback": feedback.model_dump(), "status": updates["status"]}, status_code=201)
    except Exception:
        logger.exception("[feedback] Failed")
        return api_error("Failed to record feedback. Please try again.", 500)


# ──────────────────────────────────────────────
# Calendar
# ──────────────────────────────────────────────

@router.post("/personas/{persona_id}/calendar")
async def create_calendar_item(persona_id: str, body: CalendarItemRequest, x_user_id: Optional[str] = Header(None)):
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    if not body.topic.strip():
        return api_error("Topic is required", 400)
    if body.contentType not in CONTENT_TYPES:
        return api_error(f"contentType must be one of: {', '.join(CONTENT_TYPES)}", 400)

    try:
        item = await store.create_calendar_item(
            x_user_id,
            persona_id,
            scheduled_date=body.scheduledDate.isoformat(),
            scheduled_time=body.scheduledTime,
            topic=body.topic.strip(),
            pillar_id=body.pillarId,
            content_type=body.contentType,
            topic_reasoning=body.topicReasoning,
        )
        return api_response(item.model_dump(), status_code=201)
    except store.PersonaNotFound:
        return api_error(PERSONA_NOT_FOUND, 404)
    except Exception:
        logger.exception("[createCalendarItem] Failed")
        return api_error(CALENDAR_FAILED, 500)


@router.get("/personas/{persona_id}/calendar")
async def list_calendar(persona_id: str, x_user_id: Optional[str] = Header(None)):
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    try:
        items = await store.list_calendar_items(x_user_id, persona_id)
        return api_response([i.model_dump() for i in items])
    except Exception:
        logger.exception("[listCalendar] Failed")
        return api_error("Failed to load calendar. Please try again.", 500)


@router.patch("/personas/{persona_id}/calendar/{item_id}")
async def update_calendar(persona_id: str, item_id: str, body: CalendarUpdateRequest,
                          x_user_id: Optional[str] = Header(None)):
    if not x_user_id:
        return api_error(USER_REQUIRED, 401)
    if body.status is not None and body.status not in CALENDAR_STATUSES:
        return api_error(f"status must be one of: {', '.join(CALENDAR_STATUSES)}", 400)

    updates = {}
    if body.status is not None:
        updates["status"] = body.status
    if body.generationId is not None:
        updates["generation_id"] = body.generationId

    try:
        item = await store.update_calendar_item(x_user_id, persona_id, item_id, updates)
    except Exception:
        logger.exception("[updateCalendarItem] Failed")
        return api_error(CALENDAR_FAILED, 500)
    if item is None:
        return api_error("Calendar item not found", 404)
    return api_response(item.model_dump())
