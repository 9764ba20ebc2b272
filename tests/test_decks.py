import io

import pytest
from PyPDF2 import PdfWriter

from contentDiscovery import decks
from contentDiscovery.decks import (
    DeckExtractionError,
    analyze_deck,
    analyze_multiple_decks,
    clean_deck_text,
    enrich_pillars_with_decks,
    extract_text_from_pdf,
    mark_post_pillars,
    parse_pasted_deck_text,
)
from fakes import json_replies

DECK_TEXT = """=== Slide 1 ===
Why hiring is broken

=== Slide 2 ===
Most startups hire for skills. The best ones hire for slope: how fast someone learns.

=== Slide 3 ===

=== Slide 4 ===
Our framework: Slope, Ownership, Taste. Three questions for every interview loop."""


def test_parse_pasted_deck_text_splits_slides():
    deck = parse_pasted_deck_text(DECK_TEXT, "Hiring Talk")

    assert deck.file_name == "Hiring Talk"
    # empty slide 3 is dropped
    assert [s.slide_number for s in deck.slides] == [1, 2, 4]
    assert deck.slide_count == 3
    assert deck.slides[0].text == "Why hiring is broken"
    assert deck.extracted_text.startswith("Why hiring is broken\n\nMost startups")


def test_parse_pasted_deck_text_without_delimiters():
    deck = parse_pasted_deck_text("  Just one block of text.  ")

    assert deck.file_name == "Manual Entry"
    assert deck.slide_count == 1
    assert deck.slides[0].slide_number == 1
    assert deck.slides[0].text == "Just one block of text."


def test_clean_deck_text():
    assert clean_deck_text("• First point\n- Second point\n\n\n\n* Third") == "First point Second point Third"


def test_extract_text_from_pdf_rejects_garbage():
    with pytest.raises(DeckExtractionError, match="Could not read deck: broken.pdf"):
        extract_text_from_pdf(b"this is not a pdf", "broken.pdf")


def test_extract_text_from_pdf_without_text():
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)

    with pytest.raises(DeckExtractionError, match="No text found in deck: blank.pdf"):
        extract_text_from_pdf(buffer.getvalue(), "blank.pdf")


@pytest.mark.asyncio
async def test_analyze_deck_skips_short_decks(monkeypatch):
    fake = json_replies({"mainTheme": "x"})
    monkeypatch.setattr(decks, "generate_json", fake)

    assert await analyze_deck(parse_pasted_deck_text("Too short")) is None
    assert fake.calls == []


@pytest.mark.asyncio
async def test_analyze_multiple_decks(monkeypatch):
    narrative = {"mainTheme": "Hire for slope", "keyPoints": ["slope"], "storytellingStyle": "problem-solution"}
    patterns = {
        "overallVoice": {"presentationStyle": "Framework-first", "coreBelief": "Talent compounds", "contentDNA": "Hiring"},
        "suggestedPillars": [
            {"name": "Hiring for Slope", "confidence": 150, "evidence": ["Slope, Ownership, Taste"]},
            {"confidence": 80},
        ],
    }
    fake = json_replies(narrative, patterns)
    monkeypatch.setattr(decks, "generate_json", fake)

    result = await analyze_multiple_decks([parse_pasted_deck_text(DECK_TEXT, "Hiring Talk")])

    assert result["narratives"][0]["mainTheme"] == "Hire for slope"
    assert result["narratives"][0]["keyPoints"] == ["slope"]
    assert result["narratives"][0]["frameworks"] == []
    assert result["overallVoice"]["coreBelief"] == "Talent compounds"
    # unnamed pillars are dropped, confidence clamped
    assert result["suggestedPillars"] == [
        {"name": "Hiring for Slope", "confidence": 100, "evidence": ["Slope, Ownership, Taste"]},
    ]
    assert 'DECK: "Hiring Talk"' in fake.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_analyze_multiple_decks_without_narratives(monkeypatch):
    monkeypatch.setattr(decks, "generate_json", json_replies(None))
    assert await analyze_multiple_decks([parse_pasted_deck_text(DECK_TEXT)]) is None
    assert await analyze_multiple_decks([]) is None



@pytest.mark.asyncio
async def test_analyze_deck_normalizes_reply(monkeypatch):
    monkeypatch.setattr(decks, "generate_json", json_replies({
        "mainTheme": "  Hire for slope ",
        "keyPoints": ["slope", {"point": "ownership"}, 3, "  "],
        "frameworks": "Slope, Ownership, Taste",
        "emotionalTone": ["urgent"],
    }))

    narrative = await analyze_deck(parse_pasted_deck_text(DECK_TEXT))

    assert narrative["mainTheme"] == "Hire for slope"
    assert narrative["keyPoints"] == ["slope"]
    assert narrative["frameworks"] == []
    assert narrative["emotionalTone"] == ""


@pytest.mark.asyncio
async def test_analyze_deck_without_theme_or_points(monkeypatch):
    monkeypatch.setattr(decks, "generate_json", json_replies({"mainTheme": 42, "keyPoints": [{"a": 1}]}))

    assert await analyze_deck(parse_pasted_deck_text(DECK_TEXT)) is None


@pytest.mark.asyncio
async def test_analyze_multiple_decks_drops_malformed_pillars(monkeypatch):
    patterns = {
        "overallVoice": {"coreBelief": "Talent compounds", "contentDNA": ["Hiring"]},
        "suggestedPillars": [
            {"name": {"text": "Hiring"}, "confidence": 90},
            "Founder Mindset",
            {"name": "Culture", "confidence": "high", "evidence": "one slide"},
        ],
    }
    monkeypatch.setattr(decks, "generate_json", json_replies({"mainTheme": "Hire for slope"}, patterns))

    result = await analyze_multiple_decks([parse_pasted_deck_text(DECK_TEXT)])

    assert result["overallVoice"] == {"coreBelief": "Talent compounds"}
    assert result["suggestedPillars"] == [{"name": "Culture", "confidence": 0, "evidence": []}]


def test_mark_post_pillars_matches_enriched_shape():
    post_pillars = [{"name": "Remote Work", "description": "d", "confidence": 80, "example_topics": [], "post_count": 2}]

    marked = mark_post_pillars(post_pillars)
    enriched = enrich_pillars_with_decks(post_pillars, {"suggestedPillars": []})

    assert marked == enriched
    assert marked[0]["sources"] == ["posts"]
    assert marked[0]["deckEvidence"] is None
    assert "sources" not in post_pillars[0]

def test_enrich_pillars_with_decks():
    post_pillars = [
        {"name": "Startup Hiring", "description": "d", "confidence": 70, "example_topics": [], "post_count": 4},
        {"name": "Remote Work", "description": "d", "confidence": 85, "example_topics": [], "post_count": 2},
    ]
    deck_analysis = {"suggestedPillars": [
        {"name": "Hiring", "confidence": 81, "evidence": ["slide 2"]},
        {"name": "Developer Experience", "confidence": 65, "evidence": ["DX is a moat"]},
        {"name": "Pricing", "confidence": 59, "evidence": []},
    ]}

    result = enrich_pillars_with_decks(post_pillars, deck_analysis)

    assert [p["name"] for p in result] == ["Startup Hiring", "Remote Work", "Developer Experience"]
    hiring = result[0]
    # (70 + 81) / 2 + 10 = 85.5, rounded half up
    assert hiring["confidence"] == 86
    assert hiring["sources"] == ["posts", "decks"]
    assert hiring["deckEvidence"] == ["slide 2"]

    assert result[1]["sources"] == ["posts"]
    assert result[1]["deckEvidence"] is None

    dx = result[2]
    assert dx["sources"] == ["decks"]
    assert dx["post_count"] == 0
    assert dx["description"] == "Identified from presentation decks: DX is a moat"


def test_enrich_caps_confidence_at_100():
    result = enrich_pillars_with_decks(
        [{"name": "AI", "description": "", "confidence": 98, "example_topics": [], "post_count": 1}],
        {"suggestedPillars": [{"name": "AI", "confidence": 99, "evidence": []}]},
    )
    assert result[0]["confidence"] == 100
