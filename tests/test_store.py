import pytest

import store
from models import DiscoveredPillar, VoiceAnalysisResult

USER = "user-1"
OTHER_USER = "user-2"


@pytest.mark.asyncio
async def test_personas_are_isolated_per_user(fake_db):
    persona = await store.create_persona(USER, "Founder voice", "linkedin", "Main account")

    assert persona.user_id == USER
    assert [p.id for p in await store.list_personas(USER)] == [persona.id]
    assert await store.list_personas(OTHER_USER) == []
    assert await store.get_persona(OTHER_USER, persona.id) is None


@pytest.mark.asyncio
async def test_add_posts_computes_engagement(fake_db):
    persona = await store.create_persona(USER, "Founder voice")

    saved = await store.add_posts(USER, persona.id, [
        {"content": "First", "impressions": 1000, "likes": 40, "comments": 8, "reposts": 2,
         "posted_at": "2026-01-01T00:00:00+00:00"},
        {"content": "Second", "posted_at": "2026-02-01T00:00:00+00:00"},
    ])

    assert saved[0].engagement_rate == 5.0
    assert saved[1].engagement_rate is None
    posts = await store.list_posts(USER, persona.id)
    assert [p.content for p in posts] == ["Second", "First"]


@pytest.mark.asyncio
async def test_add_posts_unknown_persona(fake_db):
    with pytest.raises(store.PersonaNotFound):
        await store.add_posts(USER, "missing", [{"content": "Hello"}])


@pytest.mark.asyncio
async def test_voice_profile_versions(fake_db):
    persona = await store.create_persona(USER, "Founder voice")
    analysis = VoiceAnalysisResult(summary="v1")

    first = await store.save_voice_profile(USER, persona.id, analysis, posts_analyzed=3)
    second = await store.save_voice_profile(
        USER, persona.id, VoiceAnalysisResult(summary="v2"), posts_analyzed=5, last_post_id="p9"
    )

    assert first.version == 1
    assert second.version == 2
    current = await store.get_current_voice_profile(USER, persona.id)
    assert current.id == second.id
    assert current.voice_summary == "v2"
    stored_first = fake_db.collection("users").document(USER).collection("personas") \
        .document(persona.id).collection("voiceProfiles").document(first.id).get().to_dict()
    assert stored_first["is_current"] is False


@pytest.mark.asyncio
async def test_replace_pillars_keeps_one_active_set(fake_db):
    persona = await store.create_persona(USER, "Founder voice")
    await store.replace_pillars(USER, persona.id, [DiscoveredPillar(name="Old")])

    await store.replace_pillars(USER, persona.id, [
        DiscoveredPillar(name="Hiring", post_count=4),
        DiscoveredPillar(name="Culture", post_count=2),
    ])

    active = await store.list_pillars(USER, persona.id)
    assert [(p.name, p.sort_order) for p in active] == [("Hiring", 0), ("Culture", 1)]
    assert fake_db.count("users", USER, "personas", persona.id, "pillars") == 3


@pytest.mark.asyncio
async def test_replace_pillars_unknown_persona(fake_db):
    with pytest.raises(store.PersonaNotFound):
        await store.replace_pillars(USER, "missing", [DiscoveredPillar(name="Hiring")])



@pytest.mark.asyncio
async def test_save_generation_unknown_persona(fake_db):
    with pytest.raises(store.PersonaNotFound):
        await store.save_generation(USER, "missing", topic="Hiring", variations=[], status="generated")
    assert fake_db.count("users", USER, "personas", "missing", "generations") == 0


@pytest.mark.asyncio
async def test_save_persona_trends_unknown_persona(fake_db):
    with pytest.raises(store.PersonaNotFound):
        await store.save_persona_trends(USER, "missing", [{"title": "AI Hiring Freeze", "relevance_score": 80}])
    assert fake_db.count("trends") == 0

@pytest.mark.asyncio
async def test_calendar_ordering_and_update(fake_db):
    persona = await store.create_persona(USER, "Founder voice")
    later = await store.create_calendar_item(USER, persona.id, scheduled_date="2026-04-02", topic="B")
    first = await store.create_calendar_item(USER, persona.id, scheduled_date="2026-04-01", topic="A1")
    second = await store.create_calendar_item(USER, persona.id, scheduled_date="2026-04-01", topic="A2")

    assert (first.sort_order, second.sort_order) == (0, 1)
    items = await store.list_calendar_items(USER, persona.id)
    assert [i.topic for i in items] == ["A1", "A2", "B"]
    assert items[0].status == "planned"

    updated = await store.update_calendar_item(USER, persona.id, later.id, {"status": "draft"})
    assert updated.status == "draft"
    assert await store.update_calendar_item(USER, persona.id, "missing", {"status": "draft"}) is None


@pytest.mark.asyncio
async def test_save_persona_trends_upserts_global_trend(fake_db):
    persona = await store.create_persona(USER, "Founder voice")
    scored = {
        "title": "AI Hiring Freeze",
        "summary": "s",
        "source_url": "https://a.test",
        "source_name": "News",
        "keywords": ["hiring"],
        "discovered_at": "2026-03-01T00:00:00+00:00",
        "relevance_score": 80,
        "has_conflict": False,
        "conflict_reason": None,
        "trending_score": 75,
    }

    await store.save_persona_trends(USER, persona.id, [scored])
    links = await store.save_persona_trends(USER, persona.id, [{**scored, "title": "ai hiring freeze "}])

    assert fake_db.count("trends") == 1
    assert links[0].relevance_score == 80
    assert fake_db.count("users", USER, "personas", persona.id, "trends") == 1
