"""
Data types shared by the routes, the AI modules and the Firestore store.

Voice analysis models default every field so a partially filled model reply
still validates.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Platform = Literal["linkedin", "instagram"]
ContentType = Literal["short", "long", "article"]
SubscriptionTier = Literal["free", "pro", "business"]
PerformanceTier = Literal["top", "above_average", "average", "below_average", "underperforming"]
GenerationStatus = Literal["generating", "generated", "accepted", "rejected", "refined"]
FeedbackAction = Literal["accept", "reject", "edit"]
CalendarStatus = Literal["planned", "draft", "ready", "published", "skipped"]
RejectionReason = Literal["tone", "length", "off_topic", "not_me", "other"]

PLATFORMS = ("linkedin", "instagram")
CONTENT_TYPES = ("short", "long", "article")
FEEDBACK_ACTIONS = ("accept", "reject", "edit")
CALENDAR_STATUSES = ("planned", "draft", "ready", "published", "skipped")


# ──────────────────────────────────────────────
# Voice analysis
# ──────────────────────────────────────────────

class WordFrequency(BaseModel):
    word: str = ""
    frequency: float = 0


class PhraseFrequency(BaseModel):
    phrase: str = ""
    frequency: float = 0


class ToneMarkers(BaseModel):
    formal: float = 0
    casual: float = 0
    humorous: float = 0


class EmojiUsage(BaseModel):
    uses_emoji: bool = False
    common_emoji: List[str] = []
    frequency: float = 0


class PunctuationStyle(BaseModel):
    uses_ellipsis: bool = False
    uses_dashes: bool = False
    exclamation_frequency: float = 0


class Opinion(BaseModel):
    topic: str = ""
    stance: str = ""


class StructuralPatterns(BaseModel):
    avg_sentence_length: float = 0
    avg_paragraph_length: float = 0
    uses_lists: bool = False
    list_frequency: float = 0
    hook_patterns: List[str] = []
    cta_patterns: List[str] = []
    post_structure: List[str] = []


class LinguisticPatterns(BaseModel):
    common_words: List[WordFrequency] = []
    common_phrases: List[PhraseFrequency] = []
    tone_markers: ToneMarkers = Field(default_factory=ToneMarkers)
    emoji_usage: EmojiUsage = Field(default_factory=EmojiUsage)
    punctuation_style: PunctuationStyle = Field(default_factory=PunctuationStyle)


class ContentPatterns(BaseModel):
    topics: List[str] = []
    opinions: List[Opinion] = []
    recurring_stories: List[str] = []
    frameworks: List[str] = []
    values: List[str] = []


class VoiceAnalysisResult(BaseModel):
    structural: StructuralPatterns = Field(default_factory=StructuralPatterns)
    linguistic: LinguisticPatterns = Field(default_factory=LinguisticPatterns)
    content: ContentPatterns = Field(default_factory=ContentPatterns)
    summary: str = ""


# ──────────────────────────────────────────────
# Generation
# ──────────────────────────────────────────────

class VoiceMatchBreakdown(BaseModel):
    structure: int = Field(ge=0, le=100)
    tone: int = Field(ge=0, le=100)
    vocabulary: int = Field(ge=0, le=100)


class GeneratedVariation(BaseModel):
    id: str
    content: str
    approach: str = ""
    voice_match_score: int = Field(ge=0, le=100)
    voice_match_breakdown: VoiceMatchBreakdown


class GenerationContext(BaseModel):
    similar_posts: List[str] = []
    recent_posts: List[str] = []
    trends_included: List[str] = []
    voice_profile_version: Optional[int] = None


class RefinementMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


# ──────────────────────────────────────────────
# Durable entities
# ──────────────────────────────────────────────

class Persona(BaseModel):
    id: str
    user_id: str
    name: str
    platform: Platform = "linkedin"
    description: Optional[str] = None
    settings: Dict[str, Any] = {}
    is_active: bool = True
    created_at: str
    updated_at: str


class VoiceProfile(BaseModel):
    id: str
    persona_id: str
    version: int = 1
    is_current: bool = True
    structural_patterns: StructuralPatterns
    linguistic_patterns: LinguisticPatterns
    content_patterns: ContentPatterns
    voice_summary: Optional[str] = None
    posts_analyzed: int = 0
    last_updated_from_post_id: Optional[str] = None
    created_at: str

    def to_analysis(self) -> VoiceAnalysisResult:
        return VoiceAnalysisResult(
            structural=self.structural_patterns,
            linguistic=self.linguistic_patterns,
            content=self.content_patterns,
            summary=self.voice_summary or "",
        )


class Post(BaseModel):
    id: str
    persona_id: str
    content: str
    content_type: ContentType = "long"
    impressions: Optional[int] = None
    likes: Optional[int] = None
    comments: Optional[int] = None
    reposts: Optional[int] = None
    profile_views: Optional[int] = None
    engagement_rate: Optional[float] = None
    performance_score: Optional[float] = None
    performance_tier: Optional[PerformanceTier] = None
    posted_at: Optional[str] = None
    platform_post_id: Optional[str] = None
    source: Literal["manual", "import", "api"] = "manual"
    extracted_topics: Optional[List[str]] = None
    extracted_patterns: Optional[Dict[str, Any]] = None
    created_at: str
    updated_at: str


class ContentPillar(BaseModel):
    id: str
    persona_id: str
    name: str
    description: Optional[str] = None
    example_topics: Optional[List[str]] = None
    post_count: int = 0
    avg_performance: Optional[float] = None
    is_active: bool = True
    sort_order: int = 0
    created_at: str


class Generation(BaseModel):
    id: str
    persona_id: str
    voice_profile_id: Optional[str] = None
    topic: str
    creativity_level: int = 30
    content_type: ContentType = "long"
    pillar_id: Optional[str] = None
    overlay_id: Optional[str] = None
    context_used: Optional[GenerationContext] = None
    variations: List[GeneratedVariation] = []
    status: GenerationStatus = "generating"
    selected_variation_id: Optional[str] = None
    final_content: Optional[str] = None
    generation_time_ms: Optional[int] = None
    created_at: str


class GenerationFeedback(BaseModel):
    id: str
    generation_id: str
    variation_id: str
    action: FeedbackAction
    rejection_reasons: Optional[List[RejectionReason]] = None
    rejection_note: Optional[str] = None
    original_content: Optional[str] = None
    edited_content: Optional[str] = None
    edit_diff: Optional[Dict[str, Any]] = None
    refinement_messages: Optional[List[RefinementMessage]] = None
    created_at: str


class CalendarItem(BaseModel):
    id: str
    persona_id: str
    scheduled_date: str
    scheduled_time: Optional[str] = None
    topic: str
    pillar_id: Optional[str] = None
    content_type: ContentType = "long"
    status: CalendarStatus = "planned"
    generation_id: Optional[str] = None
    topic_reasoning: Optional[str] = None
    sort_order: int = 0
    created_at: str
    updated_at: str


class Trend(BaseModel):
    id: str
    title: str
    summary: Optional[str] = None
    source_url: Optional[str] = None
    source_name: Optional[str] = None
    category: Optional[str] = None
    relevance_keywords: Optional[List[str]] = None
    trending_score: Optional[int] = None
    discovered_at: str
    expires_at: Optional[str] = None
    is_active: bool = True


class PersonaTrend(BaseModel):
    persona_id: str
    trend_id: str
    relevance_score: Optional[int] = None
    has_conflict: bool = False
    conflict_reason: Optional[str] = None
    is_used: bool = False


# ──────────────────────────────────────────────
# Discovery results
# ──────────────────────────────────────────────

class DiscoveredPillar(BaseModel):
    name: str
    description: str = ""
    example_topics: List[str] = []
    confidence: int = 0
    post_count: int = 0
    sources: Optional[List[str]] = None
    deckEvidence: Optional[List[str]] = None

    @field_validator("confidence", "post_count", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        try:
            return int(round(float(v)))
        except (TypeError, ValueError):
            return 0


class PillarDiscoveryResult(BaseModel):
    pillars: List[DiscoveredPillar] = []
    summary: str = ""
