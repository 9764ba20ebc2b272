class PillarDiscoveryPrompt:
    def __init__(self, posts):
        self.posts = posts

    def generate_prompt(self):
        posts_text = "\n\n".join(f"--- Post {i + 1} ---\n{p}" for i, p in enumerate(self.posts))
        return f"""Analyze these posts written by the same person and identify their core content pillars.

A "content pillar" is a recurring theme or topic area they consistently write about. These pillars define their content strategy and expertise areas.

{posts_text}

Return a JSON object with this structure:
{{
  "pillars": [
    {{
      "name": "<short pillar name, 2-4 words>",
      "description": "<1-2 sentence description of this pillar>",
      "example_topics": ["<topic 1>", "<topic 2>", "<topic 3>"],
      "confidence": <0-100, how confident you are this is a real pillar>,
      "post_count": <number of posts that matched this pillar>
    }}
  ],
  "summary": "<2-3 sentence summary of their overall content strategy>"
}}

IMPORTANT:
- Identify 3-5 pillars (not more, not less)
- Each pillar should be distinct and meaningful
- "example_topics" are specific topics within the pillar
- Name pillars concretely (not generic like "Personal Growth")
- Focus on what makes THEM unique, not generic content categories
- Order pillars by post_count (most common first)

Examples of GOOD pillar names:
- "Startup Hiring Challenges"
- "Remote Team Management"
- "Product-Led Growth"
- "Engineering Leadership"

Examples of BAD pillar names:
- "Success" (too vague)
- "Tips" (not a theme)
- "Motivation" (too generic)"""


class CategorizePostsPrompt:
    def __init__(self, posts, pillars):
        self.posts = posts
        self.pillars = pillars

    def generate_prompt(self):
        posts_text = "\n\n".join(f"Post {i}: {p[:500]}..." for i, p in enumerate(self.posts))
        pillars_text = "\n\n".join(
            f"- ID: {p['id']}\n  Name: {p['name']}\n  Description: {p.get('description', '')}"
            for p in self.pillars
        )
        return f"""Match each post to the most relevant content pillar(s).

POSTS:
{posts_text}

PILLARS:
{pillars_text}

Return a JSON object:
{{
  "categorizations": [
    {{
      "postIndex": 0,
      "matches": [
        {{"pillarId": "<pillar id>", "confidence": <0-100>}}
      ]
    }}
  ]
}}

A post can match 1-2 pillars (primary + optional secondary). Only include matches with confidence > 50."""


class TopicSuggestionPrompt:
    def __init__(self, pillars, voice_summary, recent_topics, count):
        self.pillars = pillars
        self.voice_summary = voice_summary
        self.recent_topics = recent_topics
        self.count = count

    def generate_prompt(self):
        pillars_text = "\n\n".join(
            f"- {p['name']}: {p.get('description', '')}\n  Examples: {', '.join(p.get('example_topics') or [])}"
            for p in self.pillars
        )
        recent_context = ""
        if self.recent_topics:
            recent = "\n".join(f"- {t}" for t in self.recent_topics)
            recent_context = f"\n\nRECENT TOPICS (avoid duplicating these):\n{recent}"

        return f"""Generate {self.count} specific topic ideas for content creation based on these pillars.

CONTENT PILLARS:
{pillars_text}

VOICE PROFILE:
{self.voice_summary}
{recent_context}

Return a JSON object:
{{
  "topics": [
    {{
      "topic": "<specific, concrete topic - a statement or question they could write about>",
      "pillar": "<which pillar this belongs to>",
      "reasoning": "<1 sentence explaining why this topic fits their voice and pillar>",
      "relevanceScore": <0-100, how well this matches their voice and pillars>,
      "trendinessScore": <0-100, how timely/trending this topic is>,
      "overallScore": <0-100, combined score for ranking>
    }}
  ]
}}

GUIDELINES:
- Topics should be specific and actionable (not vague)
- Mix of evergreen and timely topics
- Topics should sound like something THEY would write about
- Vary the approach: some controversial, some educational, some storytelling
- Each pillar should get at least 1-2 topics
- Order by overallScore (highest first)

GOOD topic examples:
- "Why most startups fail at hiring senior engineers"
- "The hidden cost of remote work nobody talks about"
- "How I rebuilt my team's trust after a failed launch"

BAD topic examples:
- "Leadership tips" (too vague)
- "How to be successful" (generic)
- "Monday motivation" (not personal)"""


class TrendRelevancePrompt:
    def __init__(self, trend_title, trend_summary, pillars, voice_summary):
        self.trend_title = trend_title
        self.trend_summary = trend_summary
        self.pillars = pillars
        self.voice_summary = voice_summary

    def generate_prompt(self):
        pillars_text = "\n".join(f"- {p['name']}: {p.get('description', '')}" for p in self.pillars)
        return f"""Evaluate if this trending topic is relevant to this person's content strategy.

TREND:
Title: {self.trend_title}
Summary: {self.trend_summary}

PERSON'S VOICE PROFILE:
{self.voice_summary}

THEIR CONTENT PILLARS:
{pillars_text}

Return a JSON object:
{{
  "relevanceScore": <0-100, how relevant is this trend to their pillars and voice>,
  "matchedPillars": [<array of pillar names this trend relates to>],
  "hasConflict": <boolean, does this trend conflict with their values or voice?>,
  "conflictReason": <string or null, why it conflicts if true>,
  "suggestedAngle": <string or null, how they could uniquely approach this trend>
}}

SCORING GUIDE:
- 80-100: Highly relevant, perfect fit for their content
- 60-79: Relevant, could write about with their angle
- 40-59: Somewhat relevant, but may need strong angle
- 20-39: Loosely related, probably skip
- 0-19: Not relevant to their content

CONFLICT DETECTION:
- Check if trend contradicts their known opinions
- Check if tone/topic is incompatible with their voice
- Check if trend is outside their expertise area"""


class DeckNarrativePrompt:
    def __init__(self, deck):
        self.deck = deck

    def generate_prompt(self):
        return f"""Analyze this presentation deck and extract the narrative structure and messaging patterns.

DECK: "{self.deck.file_name}"
SLIDE COUNT: {self.deck.slide_count}

CONTENT:
{self.deck.extracted_text}

Return a JSON object with this structure:
{{
  "mainTheme": "<1 sentence: what is the core message?>",
  "keyPoints": [<5-10 main arguments or ideas presented>],
  "storytellingStyle": "<how do they structure the narrative? e.g., problem-solution, storytelling, data-driven>",
  "frameworks": [<any frameworks, models, or mental models used>],
  "uniquePerspectives": [<contrarian or unique takes that stand out>],
  "emotionalTone": "<inspirational/analytical/provocative/educational/etc>",
  "targetAudience": "<who is this presentation aimed at?>"
}}

GUIDELINES:
- Focus on HOW they communicate, not just WHAT they say
- Identify recurring patterns and unique angles
- Look for frameworks they use to structure thinking
- Capture their perspective/opinion, not generic facts"""


class DeckPatternsPrompt:
    def __init__(self, narratives):
        self.narratives = narratives

    def generate_prompt(self):
        narrative_summary = "\n\n".join(
            f"DECK {i + 1}: {n.get('mainTheme', '')}\n"
            f"Key Points: {', '.join(n.get('keyPoints') or [])}\n"
            f"Style: {n.get('storytellingStyle', '')}"
            for i, n in enumerate(self.narratives)
        )
        return f"""Analyze these presentation decks to understand this person's overall content voice and expertise.

{narrative_summary}

Return a JSON object:
{{
  "overallVoice": {{
    "presentationStyle": "<how they typically present ideas across all decks>",
    "coreBelief": "<what fundamental belief drives their work?>",
    "contentDNA": "<recurring themes that appear across multiple decks>"
  }},
  "suggestedPillars": [
    {{
      "name": "<pillar name, 2-4 words>",
      "confidence": <0-100>,
      "evidence": [<quotes or examples from decks that support this pillar>]
    }}
  ]
}}

GUIDELINES:
- Look for patterns ACROSS decks, not within a single deck
- Identify 3-5 pillars that represent their expertise areas
- Focus on what makes THEIR approach unique
- Confidence based on how frequently theme appears"""
