import pytest

from contentDiscovery import pillars
from contentDiscovery.pillars import (
    categorize_posts,
    discover_pillars,
    score_trend_relevance,
    suggest_topics,
)
from fakes import json_replies

POSTS = ["post one " * 10, "post two " * 10, "post three " * 10]
PILLARS = [
    {"name": "Startup Hiring", "description": "Building early teams", "example_topics": ["first hires"]},
    {"name": "Remote Work", "description": "Distributed teams", "example_topics": []},
]


@pytest.mark.asyncio
async def test_discover_pillars_needs_three_posts(monkeypatch):
    fake = json_replies({"pillars": []})
    monkeypatch.setattr(pillars, "generate_json", fake)

    assert await discover_pillars(POSTS[:2]) is None
    assert fake.calls == []


@pytest.mark.asyncio
async def test_discover_pillars_sorted_by_post_count(monkeypatch):
    reply = {
        "pillars": [
            {"name": "Remote Work", "description": "d", "example_topics": [], "confidence": 70, "post_count": 1},
            {"name": "Startup Hiring", "description": "d", "example_topics": ["x"], "confidence": "88", "post_count": 2.0},
        ],
        "summary": "Writes about teams.",
    }
    monkeypatch.setattr(pillars, "generate_json", json_replies(reply))

    result = await discover_pillars(POSTS)

    assert [p.name for p in result.pillars] == ["Startup Hiring", "Remote Work"]
    assert result.pillars[0].confidence == 88
    assert result.pillars[0].post_count == 2
    assert result.summary == "Writes about teams."


@pytest.mark.asyncio
async def test_discover_pillars_bad_reply(monkeypatch):
    monkeypatch.setattr(pillars, "generate_json", json_replies(None))
    assert await discover_pillars(POSTS) is None


@pytest.mark.asyncio
async def test_categorize_posts(monkeypatch):
    reply = {"categorizations": [{"postIndex": 0, "matches": [{"pillarId": "p1", "confidence": 90}]}]}
    fake = json_replies(reply)
    monkeypatch.setattr(pillars, "generate_json", fake)

    result = await categorize_posts(POSTS, [{"id": "p1", "name": "Startup Hiring", "description": ""}])

    assert result == reply["categorizations"]
    assert "ID: p1" in fake.calls[0]["prompt"]
    assert await categorize_posts([], PILLARS) == []


@pytest.mark.asyncio
async def test_suggest_topics_sorted_by_overall_score(monkeypatch):
    reply = {"topics": [
        {"topic": "A", "pillar": "Remote Work", "overallScore": 60},
        {"topic": "B", "pillar": "Startup Hiring", "overallScore": 92},
        "not a topic",
    ]}
    fake = json_replies(reply)
    monkeypatch.setattr(pillars, "generate_json", fake)

    result = await suggest_topics(PILLARS, "Direct voice", ["old topic"], count=5)

    assert [t["topic"] for t in result] == ["B", "A"]
    assert "Generate 5 specific topic ideas" in fake.calls[0]["prompt"]
    assert "- old topic" in fake.calls[0]["prompt"]
    assert fake.calls[0]["temperature"] == 0.7


@pytest.mark.asyncio
async def test_score_trend_relevance_clamps_and_falls_back(monkeypatch):
    monkeypatch.setattr(pillars, "generate_json", json_replies({
        "relevanceScore": 140,
        "matchedPillars": ["Remote Work"],
        "hasConflict": False,
        "conflictReason": None,
        "suggestedAngle": "Contrarian take",
    }))
    scored = await score_trend_relevance("RTO mandates", "Offices are back", PILLARS, "Direct voice")
    assert scored["relevanceScore"] == 100
    assert scored["matchedPillars"] == ["Remote Work"]

    monkeypatch.setattr(pillars, "generate_json", json_replies(None))
    scored = await score_trend_relevance("RTO mandates", "Offices are back", PILLARS, "Direct voice")
    assert scored == {
        "relevanceScore": 0,
        "matchedPillars": [],
        "hasConflict": False,
        "conflictReason": None,
        "suggestedAngle": None,
    }
