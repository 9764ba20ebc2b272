import pytest

from cache import set_cached, voice_cache_key
from contentStudio import voice
from contentStudio.voice import analyze_voice, analyze_voice_cached, quick_analyze_voice
from fakes import json_replies

POSTS = [
    "I turned down a $2M offer last week. Here's why.",
    "Hiring is the hardest part of building a startup. Nobody tells you this.",
    "3 lessons from 10 years of engineering leadership:",
]

ANALYSIS = {
    "structural": {"avg_sentence_length": 9, "uses_lists": True, "post_structure": ["hook", "story", "lesson"]},
    "linguistic": {"tone_markers": {"formal": 0.1, "casual": 0.9, "humorous": 0.2}},
    "content": {"topics": ["hiring", "leadership"]},
    "summary": "Short, confessional hooks followed by hard-won lessons.",
}


@pytest.mark.asyncio
async def test_analyze_voice_accepts_partial_reply(monkeypatch):
    fake = json_replies(ANALYSIS)
    monkeypatch.setattr(voice, "generate_json", fake)

    result = await analyze_voice(POSTS)

    assert result.structural.uses_lists is True
    assert result.linguistic.emoji_usage.uses_emoji is False
    assert result.content.topics == ["hiring", "leadership"]
    assert fake.calls[0]["temperature"] == 0.3
    assert "--- Post 3 ---" in fake.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_analyze_voice_without_posts_skips_model(monkeypatch):
    fake = json_replies(ANALYSIS)
    monkeypatch.setattr(voice, "generate_json", fake)

    assert await analyze_voice([]) is None
    assert fake.calls == []


@pytest.mark.asyncio
async def test_analyze_voice_unparsable_reply(monkeypatch):
    monkeypatch.setattr(voice, "generate_json", json_replies(None))
    assert await analyze_voice(POSTS) is None


@pytest.mark.asyncio
async def test_quick_analyze_voice(monkeypatch):
    fake = json_replies({"summary": "Warm and direct."})
    monkeypatch.setattr(voice, "generate_json", fake)

    assert await quick_analyze_voice(POSTS) == "Warm and direct."
    assert fake.calls[0]["model"] == "fast"


@pytest.mark.asyncio
async def test_analyze_voice_cached_hits_cache_on_second_call(monkeypatch, fake_db):
    fake = json_replies(ANALYSIS)
    monkeypatch.setattr(voice, "generate_json", fake)

    first = await analyze_voice_cached(POSTS)
    second = await analyze_voice_cached(POSTS)

    assert len(fake.calls) == 1
    assert first == second
    assert fake_db.count("cache") == 1



@pytest.mark.asyncio
async def test_analyze_voice_cached_ignores_malformed_entry(monkeypatch, fake_db):
    await set_cached(voice_cache_key(POSTS), {"structural": "oops", "summary": ["not", "a", "string"]})
    fake = json_replies(ANALYSIS)
    monkeypatch.setattr(voice, "generate_json", fake)

    result = await analyze_voice_cached(POSTS)

    assert len(fake.calls) == 1
    assert result.summary == ANALYSIS["summary"]
    assert (await analyze_voice_cached(POSTS)).summary == ANALYSIS["summary"]
    assert len(fake.calls) == 1

def test_voice_cache_key_depends_on_content():
    assert voice_cache_key(POSTS) == voice_cache_key([p + "  " for p in POSTS])
    assert voice_cache_key(POSTS) != voice_cache_key(POSTS[:2])
