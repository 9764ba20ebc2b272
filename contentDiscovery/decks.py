"""
Presentation decks: text extraction and narrative analysis.

Decks arrive either as PDF exports (PowerPoint/Keynote saved as PDF) or as
pasted text with "=== Slide N ===" delimiters.
"""
import io
import logging
import re
from dataclasses import dataclass, field

from PyPDF2 import PdfReader

from contentStudio.helper import clamp_score
from llm_utils import generate_json
from .prompts import DeckNarrativePrompt, DeckPatternsPrompt

logger = logging.getLogger(__name__)

MIN_DECK_TEXT_LENGTH = 100
MIN_DECK_ONLY_PILLAR_CONFIDENCE = 60

_SLIDE_DELIMITER = re.compile(r"={3,}\s*Slide\s+(\d+)\s*={3,}", re.IGNORECASE)


class DeckExtractionError(Exception):
    pass


@dataclass
class Slide:
    slide_number: int
    text: str
    has_images: bool = False


@dataclass
class ExtractedDeck:
    file_name: str
    slide_count: int
    extracted_text: str
    slides: list[Slide] = field(default_factory=list)


def _deck_from_slides(file_name: str, slides: list[Slide]) -> ExtractedDeck:
    return ExtractedDeck(
        file_name=file_name,
        slide_count=len(slides),
        extracted_text="\n\n".join(s.text for s in slides),
        slides=slides,
    )


def parse_pasted_deck_text(content: str, file_name: str = "Manual Entry") -> ExtractedDeck:
    """
    Parse manually pasted deck content.

    Expected format:
        === Slide 1 ===
        Title text
        Body text

        === Slide 2 ===
        ...

    Without any delimiter the whole content becomes slide 1.
    """
    # split() with one capture group alternates: text, slideNumber, text, ...
    parts = _SLIDE_DELIMITER.split(content)
    slides = []
    for i in range(1, len(parts), 2):
        text = parts[i + 1].strip() if i + 1 < len(parts) else ""
        if text:
            slides.append(Slide(slide_number=int(parts[i]), text=text))

    if not slides:
        slides.append(Slide(slide_number=1, text=content.strip()))

    return _deck_from_slides(file_name, slides)


def extract_text_from_pdf(data: bytes, file_name: str) -> ExtractedDeck:
    """
    One slide per PDF page; pages without extractable text are skipped.

    Raises DeckExtractionError for an unreadable PDF or one with no text at
    all (e.g. a scanned deck).
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        slides = []
        for number, page in enumerate(reader.pages, start=1):
            text = clean_deck_text(page.extract_text() or "")
            if text:
                resources = page.get("/Resources")
                has_images = resources is not None and "/XObject" in resources.get_object()
                slides.append(Slide(slide_number=number, text=text, has_images=has_images))
    except Exception as e:
        raise DeckExtractionError(f"Could not read deck: {file_name}") from e

    if not slides:
        raise DeckExtractionError(f"No text found in deck: {file_name}")

    return _deck_from_slides(file_name, slides)


def clean_deck_text(text: str) -> str:
    """Remove bullet points and collapse whitespace."""
    text = re.sub(r"^[•\-*]\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def _strings(value) -> list[str]:
    """Keep the non-empty strings of a model-provided list."""
    if not isinstance(value, list):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _string(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _normalize_narrative(result: dict) -> dict | None:
    narrative = {
        "mainTheme": _string(result.get("mainTheme")),
        "keyPoints": _strings(result.get("keyPoints")),
        "storytellingStyle": _string(result.get("storytellingStyle")),
        "frameworks": _strings(result.get("frameworks")),
        "uniquePerspectives": _strings(result.get("uniquePerspectives")),
        "emotionalTone": _string(result.get("emotionalTone")),
        "targetAudience": _string(result.get("targetAudience")),
    }
    if not narrative["mainTheme"] and not narrative["keyPoints"]:
        return None
    return narrative


async def analyze_deck(deck: ExtractedDeck) -> dict | None:
    """
    Analyze a single deck to extract narrative patterns.

    Reply fields are reduced to strings and string lists; a reply with
    neither a main theme nor key points counts as no narrative.
    """
    if not deck.extracted_text or len(deck.extracted_text) < MIN_DECK_TEXT_LENGTH:
        return None

    prompt = DeckNarrativePrompt(deck).generate_prompt()
    result = await generate_json(prompt, temperature=0.3)
    if not isinstance(result, dict):
        return None
    return _normalize_narrative(result)


async def analyze_multiple_decks(decks: list[ExtractedDeck]) -> dict | None:
    """
    Analyze every deck individually, then look for patterns across them.

    Returns {narratives, overallVoice, suggestedPillars}, or None when no
    deck produced a narrative or the cross-deck call failed.
    """
    if not decks:
        return None

    narratives = []
    for deck in decks:
        narrative = await analyze_deck(deck)
        if narrative:
            narratives.append(narrative)

    if not narratives:
        return None

    prompt = DeckPatternsPrompt(narratives).generate_prompt()
    result = await generate_json(prompt, temperature=0.3, max_tokens=4096)
    if not isinstance(result, dict):
        return None

    suggested = []
    for pillar in result.get("suggestedPillars") or []:
        if not isinstance(pillar, dict) or not _string(pillar.get("name")):
            continue
        suggested.append({
            "name": _string(pillar["name"]),
            "confidence": clamp_score(pillar.get("confidence"), 0),
            "evidence": _strings(pillar.get("evidence")),
        })

    overall_voice = result.get("overallVoice")
    if not isinstance(overall_voice, dict):
        overall_voice = {}

    return {
        "narratives": narratives,
        "overallVoice": {k: v for k, v in overall_voice.items() if isinstance(v, str)},
        "suggestedPillars": suggested,
    }


def mark_post_pillars(post_pillars: list[dict]) -> list[dict]:
    """Tag post-derived pillars with their source, in the shape enrichment returns."""
    return [
        {**p, "sources": ["posts"], "deckEvidence": None}
        for p in post_pillars
    ]


def enrich_pillars_with_decks(post_pillars: list[dict], deck_analysis: dict) -> list[dict]:
    """
    Combine deck analysis with post-based pillars.

    A deck pillar whose name overlaps a post pillar boosts that pillar's
    confidence; an unmatched deck pillar is added when confident enough.
    """
    enriched = mark_post_pillars(post_pillars)

    for deck_pillar in deck_analysis.get("suggestedPillars", []):
        deck_name = deck_pillar["name"].lower()
        match = next(
            (p for p in enriched if deck_name in p["name"].lower() or p["name"].lower() in deck_name),
            None,
        )

        if match:
            # half rounds up
            boosted = int((match["confidence"] + deck_pillar["confidence"]) / 2 + 10 + 0.5)
            match["confidence"] = min(100, boosted)
            match["sources"].append("decks")
            match["deckEvidence"] = deck_pillar["evidence"]
        elif deck_pillar["confidence"] >= MIN_DECK_ONLY_PILLAR_CONFIDENCE:
            evidence = deck_pillar["evidence"]
            enriched.append({
                "name": deck_pillar["name"],
                "description": f"Identified from presentation decks: {evidence[0] if evidence else 'recurring theme'}",
                "confidence": deck_pillar["confidence"],
                "example_topics": [],
                "post_count": 0,
                "sources": ["decks"],
                "deckEvidence": evidence,
            })

    return sorted(enriched, key=lambda p: p["confidence"], reverse=True)
