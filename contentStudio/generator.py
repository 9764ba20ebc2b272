"""Content generation: three voice-matched variations per request."""
import asyncio
import logging
import time
from dataclasses import dataclass, field

from llm_utils import generate_json
from models import GeneratedVariation, VoiceAnalysisResult, VoiceMatchBreakdown
from .helper import clamp_score
from .prompts import ContentGenerationPrompt, VoiceMatchPrompt

logger = logging.getLogger(__name__)

VARIATION_COUNT = 3
NO_PROFILE_SCORE = 75
SCORING_FALLBACK_SCORE = 70
NO_PROFILE_CONTEXT = "No voice profile available. Write in a professional, engaging LinkedIn style."


class GenerationError(Exception):
    pass


@dataclass
class GenerationInput:
    topic: str
    content_type: str
    creativity_level: int  # 0-100
    voice_profile: VoiceAnalysisResult | None = None
    sample_posts: list[str] = field(default_factory=list)
    trends: list[str] = field(default_factory=list)


@dataclass
class GenerationOutput:
    variations: list[GeneratedVariation]
    generation_time_ms: int


async def generate_content(gen_input: GenerationInput) -> GenerationOutput:
    """Generate content variations based on topic and voice profile."""
    start_time = time.time()

    voice_context = (
        build_voice_context(gen_input.voice_profile)
        if gen_input.voice_profile
        else NO_PROFILE_CONTEXT
    )
    if gen_input.content_type == "short":
        length_guidance = "Keep it under 500 characters. Punchy and direct."
    else:
        length_guidance = "Aim for 1000-2500 characters. Include a hook, body with value, and call-to-action."

    prompt = ContentGenerationPrompt(
        topic=gen_input.topic,
        content_type=gen_input.content_type,
        voice_context=voice_context,
        sample_posts=gen_input.sample_posts,
        trends=gen_input.trends,
        length_guidance=length_guidance,
        creativity_guidance=get_creativity_guidance(gen_input.creativity_level),
    ).generate_prompt()

    result = await generate_json(
        prompt,
        temperature=0.7 + (gen_input.creativity_level / 200),  # 0.7-1.2
        max_tokens=4096,
    )
    if not isinstance(result, dict) or not isinstance(result.get("variations"), list):
        raise GenerationError("Failed to generate content variations")

    drafts = [
        v for v in result["variations"]
        if isinstance(v, dict) and isinstance(v.get("content"), str) and v["content"].strip()
    ][:VARIATION_COUNT]
    if len(drafts) < VARIATION_COUNT:
        raise GenerationError(
            f"Expected {VARIATION_COUNT} variations, model returned {len(drafts)} usable"
        )

    async def score(index: int, draft: dict) -> GeneratedVariation:
        if gen_input.voice_profile:
            overall, breakdown = await score_voice_match(draft["content"], gen_input.voice_profile)
        else:
            overall = NO_PROFILE_SCORE
            breakdown = VoiceMatchBreakdown(
                structure=NO_PROFILE_SCORE, tone=NO_PROFILE_SCORE, vocabulary=NO_PROFILE_SCORE
            )
        return GeneratedVariation(
            id=str(draft.get("id") or f"var-{index + 1}"),
            content=draft["content"],
            approach=str(draft.get("approach") or ""),
            voice_match_score=overall,
            voice_match_breakdown=breakdown,
        )

    variations = await asyncio.gather(*[score(i, d) for i, d in enumerate(drafts)])

    return GenerationOutput(
        variations=list(variations),
        generation_time_ms=int((time.time() - start_time) * 1000),
    )


def build_voice_context(profile: VoiceAnalysisResult) -> str:
    """Build voice context string from analysis."""
    structural = profile.structural
    linguistic = profile.linguistic
    content = profile.content

    tone = "Formal" if linguistic.tone_markers.formal > 0.5 else "Casual"
    if linguistic.tone_markers.humorous > 0.3:
        tone += ", with humor"

    emoji = (
        f"Yes ({', '.join(linguistic.emoji_usage.common_emoji)})"
        if linguistic.emoji_usage.uses_emoji
        else "No"
    )
    punctuation = []
    if linguistic.punctuation_style.uses_ellipsis:
        punctuation.append("Uses ellipsis...")
    if linguistic.punctuation_style.uses_dashes:
        punctuation.append("Uses dashes")

    return f"""SUMMARY: {profile.summary}

WRITING STRUCTURE:
- Average sentence length: {structural.avg_sentence_length:g} words
- Uses lists: {'Yes' if structural.uses_lists else 'Rarely'}
- Typical hook patterns: {', '.join(structural.hook_patterns)}
- Post structure: {' → '.join(structural.post_structure)}
- CTA style: {', '.join(structural.cta_patterns)}

LANGUAGE & TONE:
- Tone: {tone}
- Common words/phrases: {', '.join(f'"{p.phrase}"' for p in linguistic.common_phrases)}
- Emoji usage: {emoji}
- Punctuation: {' '.join(punctuation)}

CONTENT THEMES:
- Main topics: {', '.join(content.topics)}
- Core values: {', '.join(content.values)}
- Frameworks they use: {', '.join(content.frameworks)}
- Known opinions: {'; '.join(f'{o.topic}: {o.stance}' for o in content.opinions)}"""


def get_creativity_guidance(level: int) -> str:
    if level < 20:
        return "Stick very close to their proven patterns. Safe and consistent."
    elif level < 50:
        return "Follow their core style but you can experiment with the angle or hook."
    elif level < 80:
        return "Be creative with the approach while maintaining their voice. Try new formats."
    return "Push boundaries. Experiment boldly while keeping their core voice recognizable."


async def score_voice_match(content: str, voice_profile: VoiceAnalysisResult) -> tuple[int, VoiceMatchBreakdown]:
    """Score how well content matches the voice profile. Returns (overall, breakdown)."""
    prompt = VoiceMatchPrompt(content, voice_profile).generate_prompt()
    result = await generate_json(prompt, temperature=0.2, model="fast")

    fallback = SCORING_FALLBACK_SCORE
    if not isinstance(result, dict):
        logger.warning("[score_voice_match] Unparsable score reply, using fallback %d", fallback)
        return fallback, VoiceMatchBreakdown(structure=fallback, tone=fallback, vocabulary=fallback)

    return clamp_score(result.get("overall"), fallback), VoiceMatchBreakdown(
        structure=clamp_score(result.get("structure"), fallback),
        tone=clamp_score(result.get("tone"), fallback),
        vocabulary=clamp_score(result.get("vocabulary"), fallback),
    )
