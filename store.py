"""
Firestore persistence for personas and everything they own.

Every persona-owned record lives below users/{user_id}/personas/{persona_id},
so a request can only reach documents under the caller's own user document.
Trends are shared across tenants in the top-level "trends" collection; the
per-persona relevance of a trend is kept below the persona.
"""
import asyncio
import hashlib
import logging
from datetime import datetime, timezone

import config
from formatting import calculate_engagement_rate
from models import (
    CalendarItem,
    ContentPillar,
    DiscoveredPillar,
    Generation,
    GenerationFeedback,
    Persona,
    PersonaTrend,
    Post,
    Trend,
    VoiceAnalysisResult,
    VoiceProfile,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _user(user_id: str):
    return config.get_db().collection("users").document(user_id)


def _persona(user_id: str, persona_id: str):
    return _user(user_id).collection("personas").document(persona_id)


def _persona_exists(user_id: str, persona_id: str) -> bool:
    return _persona(user_id, persona_id).get().exists


class PersonaNotFound(Exception):
    pass


# ──────────────────────────────────────────────
# Personas
# ──────────────────────────────────────────────

def _create_persona(user_id, name, platform, description, settings):
    doc_ref = _user(user_id).collection("personas").document()
    now = _now()
    persona = Persona(
        id=doc_ref.id,
        user_id=user_id,
        name=name,
        platform=platform,
        description=description,
        settings=settings or {},
        created_at=now,
        updated_at=now,
    )
    doc_ref.set(persona.model_dump())
    return persona


async def create_persona(user_id: str, name: str, platform: str = "linkedin",
                         description: str | None = None, settings: dict | None = None) -> Persona:
    return await asyncio.to_thread(_create_persona, user_id, name, platform, description, settings)


def _list_personas(user_id):
    personas = [
        Persona.model_validate(doc.to_dict())
        for doc in _user(user_id).collection("personas").stream()
    ]
    personas = [p for p in personas if p.is_active]
    return sorted(personas, key=lambda p: p.created_at, reverse=True)


async def list_personas(user_id: str) -> list[Persona]:
    return await asyncio.to_thread(_list_personas, user_id)


def _get_persona(user_id, persona_id):
    doc = _persona(user_id, persona_id).get()
    if not doc.exists:
        return None
    return Persona.model_validate(doc.to_dict())


async def get_persona(user_id: str, persona_id: str) -> Persona | None:
    return await asyncio.to_thread(_get_persona, user_id, persona_id)


# ──────────────────────────────────────────────
# Posts
# ──────────────────────────────────────────────

def _add_posts(user_id, persona_id, posts):
    if not _persona_exists(user_id, persona_id):
        raise PersonaNotFound(persona_id)

    collection = _persona(user_id, persona_id).collection("posts")
    saved = []
    for item in posts:
        doc_ref = collection.document()
        now = _now()
        impressions = item.get("impressions")
        engagement_rate = None
        if impressions is not None:
            engagement_rate = calculate_engagement_rate(
                item.get("likes") or 0,
                item.get("comments") or 0,
                item.get("reposts") or 0,
                impressions,
            )
        post = Post(
            id=doc_ref.id,
            persona_id=persona_id,
            content=item["content"],
            content_type=item.get("content_type") or "long",
            impressions=impressions,
            likes=item.get("likes"),
            comments=item.get("comments"),
            reposts=item.get("reposts"),
            engagement_rate=engagement_rate,
            posted_at=item.get("posted_at"),
            source=item.get("source") or "manual",
            created_at=now,
            updated_at=now,
        )
        doc_ref.set(post.model_dump())
        saved.append(post)
    return saved


async def add_posts(user_id: str, persona_id: str, posts: list[dict]) -> list[Post]:
    """Store posts for a persona. Raises PersonaNotFound for an unknown persona."""
    return await asyncio.to_thread(_add_posts, user_id, persona_id, posts)


def _list_posts(user_id, persona_id):
    posts = [
        Post.model_validate(doc.to_dict())
        for doc in _persona(user_id, persona_id).collection("posts").stream()
    ]
    return sorted(posts, key=lambda p: p.posted_at or p.created_at, reverse=True)


async def list_posts(user_id: str, persona_id: str) -> list[Post]:
    """Posts of a persona, most recent first."""
    return await asyncio.to_thread(_list_posts, user_id, persona_id)


# ──────────────────────────────────────────────
# Voice profiles
# ──────────────────────────────────────────────

def _voice_profiles(user_id, persona_id):
    return _persona(user_id, persona_id).collection("voiceProfiles")


def _get_current_voice_profile(user_id, persona_id):
    current = [
        VoiceProfile.model_validate(doc.to_dict())
        for doc in _voice_profiles(user_id, persona_id).stream()
        if doc.to_dict().get("is_current")
    ]
    if not current:
        return None
    return max(current, key=lambda p: p.version)


async def get_current_voice_profile(user_id: str, persona_id: str) -> VoiceProfile | None:
    return await asyncio.to_thread(_get_current_voice_profile, user_id, persona_id)


def _save_voice_profile(user_id, persona_id, analysis, posts_analyzed, last_post_id):
    collection = _voice_profiles(user_id, persona_id)
    latest_version = 0
    for doc in collection.stream():
        data = doc.to_dict()
        latest_version = max(latest_version, data.get("version", 0))
        if data.get("is_current"):
            doc.reference.update({"is_current": False})

    doc_ref = collection.document()
    profile = VoiceProfile(
        id=doc_ref.id,
        persona_id=persona_id,
        version=latest_version + 1,
        is_current=True,
        structural_patterns=analysis.structural,
        linguistic_patterns=analysis.linguistic,
        content_patterns=analysis.content,
        voice_summary=analysis.summary,
        posts_analyzed=posts_analyzed,
        last_updated_from_post_id=last_post_id,
        created_at=_now(),
    )
    doc_ref.set(profile.model_dump())
    return profile


async def save_voice_profile(user_id: str, persona_id: str, analysis: VoiceAnalysisResult,
                             posts_analyzed: int, last_post_id: str | None = None) -> VoiceProfile:
    """Store a new voice profile version and make it the only current one."""
    return await asyncio.to_thread(
        _save_voice_profile, user_id, persona_id, analysis, posts_analyzed, last_post_id
    )


# ──────────────────────────────────────────────
# Content pillars
# ──────────────────────────────────────────────

def _replace_pillars(user_id, persona_id, pillars):
    if not _persona_exists(user_id, persona_id):
        raise PersonaNotFound(persona_id)

    collection = _persona(user_id, persona_id).collection("pillars")
    for doc in collection.stream():
        if doc.to_dict().get("is_active"):
            doc.reference.update({"is_active": False})

    saved = []
    for order, pillar in enumerate(pillars):
        doc_ref = collection.document()
        row = ContentPillar(
            id=doc_ref.id,
            persona_id=persona_id,
            name=pillar.name,
            description=pillar.description,
            example_topics=pillar.example_topics,
            post_count=pillar.post_count,
            is_active=True,
            sort_order=order,
            created_at=_now(),
        )
        doc_ref.set(row.model_dump())
        saved.append(row)
    return saved


async def replace_pillars(user_id: str, persona_id: str, pillars: list[DiscoveredPillar]) -> list[ContentPillar]:
    """Deactivate the persona's current pillars and store the new set in order."""
    return await asyncio.to_thread(_replace_pillars, user_id, persona_id, pillars)


def _list_pillars(user_id, persona_id):
    pillars = [
        ContentPillar.model_validate(doc.to_dict())
        for doc in _persona(user_id, persona_id).collection("pillars").stream()
    ]
    return sorted((p for p in pillars if p.is_active), key=lambda p: p.sort_order)


async def list_pillars(user_id: str, persona_id: str) -> list[ContentPillar]:
    """Active pillars of a persona in their stored order."""
    return await asyncio.to_thread(_list_pillars, user_id, persona_id)


def _set_post_topics(user_id, persona_id, topics_by_post):
    posts = _persona(user_id, persona_id).collection("posts")
    for post_id, topics in topics_by_post.items():
        posts.document(post_id).update({"extracted_topics": topics, "updated_at": _now()})


async def set_post_topics(user_id: str, persona_id: str, topics_by_post: dict[str, list[str]]) -> None:
    """Record the pillar ids each post was matched to."""
    await asyncio.to_thread(_set_post_topics, user_id, persona_id, topics_by_post)


# ──────────────────────────────────────────────
# Generations and feedback
# ──────────────────────────────────────────────

def _generations(user_id, persona_id):
    return _persona(user_id, persona_id).collection("generations")


def _save_generation(user_id, persona_id, fields):
    if not _persona_exists(user_id, persona_id):
        raise PersonaNotFound(persona_id)
    doc_ref = _generations(user_id, persona_id).document()
    generation = Generation(id=doc_ref.id, persona_id=persona_id, created_at=_now(), **fields)
    doc_ref.set(generation.model_dump())
    return generation


async def save_generation(user_id: str, persona_id: str, **fields) -> Generation:
    """Store a generation under the persona. Raises PersonaNotFound for an unknown persona."""
    return await asyncio.to_thread(_save_generation, user_id, persona_id, fields)


def _get_generation(user_id, persona_id, generation_id):
    doc = _generations(user_id, persona_id).document(generation_id).get()
    if not doc.exists:
        return None
    return Generation.model_validate(doc.to_dict())


async def get_generation(user_id: str, persona_id: str, generation_id: str) -> Generation | None:
    return await asyncio.to_thread(_get_generation, user_id, persona_id, generation_id)


def _record_feedback(user_id, persona_id, generation_id, feedback, generation_updates):
    generation_ref = _generations(user_id, persona_id).document(generation_id)
    doc_ref = generation_ref.collection("feedback").document()
    row = GenerationFeedback(
        id=doc_ref.id,
        generation_id=generation_id,
        created_at=_now(),
        **feedback,
    )
    doc_ref.set(row.model_dump())
    generation_ref.update(generation_updates)
    return row


async def record_feedback(user_id: str, persona_id: str, generation_id: str,
                          feedback: dict, generation_updates: dict) -> GenerationFeedback:
    """Store feedback on a variation and apply the resulting generation status change."""
    return await asyncio.to_thread(
        _record_feedback, user_id, persona_id, generation_id, feedback, generation_updates
    )


# ──────────────────────────────────────────────
# Content calendar
# ──────────────────────────────────────────────

def _calendar(user_id, persona_id):
    return _persona(user_id, persona_id).collection("calendar")


def _create_calendar_item(user_id, persona_id, fields):
    if not _persona_exists(user_id, persona_id):
        raise PersonaNotFound(persona_id)
    collection = _calendar(user_id, persona_id)
    same_day = [
        doc for doc in collection.stream()
        if doc.to_dict().get("scheduled_date") == fields["scheduled_date"]
    ]
    doc_ref = collection.document()
    now = _now()
    item = CalendarItem(
        id=doc_ref.id,
        persona_id=persona_id,
        sort_order=len(same_day),
        created_at=now,
        updated_at=now,
        **fields,
    )
    doc_ref.set(item.model_dump())
    return item


async def create_calendar_item(user_id: str, persona_id: str, **fields) -> CalendarItem:
    return await asyncio.to_thread(_create_calendar_item, user_id, persona_id, fields)


def _list_calendar_items(user_id, persona_id):
    items = [
        CalendarItem.model_validate(doc.to_dict())
        for doc in _calendar(user_id, persona_id).stream()
    ]
    return sorted(items, key=lambda i: (i.scheduled_date, i.sort_order))


async def list_calendar_items(user_id: str, persona_id: str) -> list[CalendarItem]:
    return await asyncio.to_thread(_list_calendar_items, user_id, persona_id)


def _update_calendar_item(user_id, persona_id, item_id, updates):
    doc_ref = _calendar(user_id, persona_id).document(item_id)
    doc = doc_ref.get()
    if not doc.exists:
        return None
    updates = {**updates, "updated_at": _now()}
    doc_ref.update(updates)
    return CalendarItem.model_validate({**doc.to_dict(), **updates})


async def update_calendar_item(user_id: str, persona_id: str, item_id: str, updates: dict) -> CalendarItem | None:
    return await asyncio.to_thread(_update_calendar_item, user_id, persona_id, item_id, updates)


# ──────────────────────────────────────────────
# Trends
# ──────────────────────────────────────────────

def _trend_id(title: str) -> str:
    return hashlib.md5(title.strip().lower().encode()).hexdigest()


def _save_persona_trends(user_id, persona_id, scored_trends):
    if not _persona_exists(user_id, persona_id):
        raise PersonaNotFound(persona_id)
    trends_collection = config.get_db().collection("trends")
    persona_trends = _persona(user_id, persona_id).collection("trends")
    saved = []
    for scored in scored_trends:
        trend_id = _trend_id(scored["title"])
        trend = Trend(
            id=trend_id,
            title=scored["title"],
            summary=scored.get("summary"),
            source_url=scored.get("source_url"),
            source_name=scored.get("source_name"),
            relevance_keywords=scored.get("keywords"),
            trending_score=scored.get("trending_score"),
            discovered_at=scored.get("discovered_at") or _now(),
        )
        trends_collection.document(trend_id).set(trend.model_dump())
        link = PersonaTrend(
            persona_id=persona_id,
            trend_id=trend_id,
            relevance_score=scored.get("relevance_score"),
            has_conflict=bool(scored.get("has_conflict")),
            conflict_reason=scored.get("conflict_reason"),
        )
        persona_trends.document(trend_id).set(link.model_dump())
        saved.append(link)
    return saved


async def save_persona_trends(user_id: str, persona_id: str, scored_trends: list[dict]) -> list[PersonaTrend]:
    """Upsert scored trends globally and record their relevance for the persona."""
    return await asyncio.to_thread(_save_persona_trends, user_id, persona_id, scored_trends)
