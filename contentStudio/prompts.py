class VoiceAnalysisPrompt:
    def __init__(self, posts):
        self.posts = posts

    def generate_prompt(self):
        posts_text = "\n\n".join(f"--- Post {i + 1} ---\n{p}" for i, p in enumerate(self.posts))
        return f"""Analyze the following posts written by the same person and extract their unique writing voice patterns.

{posts_text}

Return a JSON object with this exact structure:
{{
  "structural": {{
    "avg_sentence_length": <number of words>,
    "avg_paragraph_length": <number of sentences>,
    "uses_lists": <boolean>,
    "list_frequency": <0-1 how often they use lists>,
    "hook_patterns": [<array of 3-5 common opening line patterns they use>],
    "cta_patterns": [<array of 2-3 common closing/call-to-action patterns>],
    "post_structure": [<array describing their typical post flow, e.g. ["hook", "story", "lesson", "cta"]>]
  }},
  "linguistic": {{
    "common_words": [{{"word": "<word>", "frequency": <0-1>}}],
    "common_phrases": [{{"phrase": "<phrase>", "frequency": <0-1>}}],
    "tone_markers": {{
      "formal": <0-1>,
      "casual": <0-1>,
      "humorous": <0-1>
    }},
    "emoji_usage": {{
      "uses_emoji": <boolean>,
      "common_emoji": [<top emojis if used>],
      "frequency": <0-1 how often per post>
    }},
    "punctuation_style": {{
      "uses_ellipsis": <boolean>,
      "uses_dashes": <boolean>,
      "exclamation_frequency": <0-1>
    }}
  }},
  "content": {{
    "topics": [<array of 5-10 main topics they write about>],
    "opinions": [{{"topic": "<topic>", "stance": "<their position>"}}],
    "recurring_stories": [<themes or personal stories they reference>],
    "frameworks": [<mental models or frameworks they use>],
    "values": [<core values that come through in their writing>]
  }},
  "summary": "<2-3 sentence natural language description of their writing voice>"
}}

"common_words" holds the top 10 distinctive words they use often, "common_phrases" the top 5 phrases they repeat, "opinions" 3-5 clear opinions.
Be specific and concrete. Extract actual patterns from the text, not generic observations."""


class QuickVoicePrompt:
    def __init__(self, posts):
        self.posts = posts

    def generate_prompt(self):
        posts_text = "\n\n".join(
            f"Post {i + 1}: {p[:500]}..." for i, p in enumerate(self.posts[:5])
        )
        return f"""Based on these posts, write a 2-3 sentence description of this person's writing voice and style:

{posts_text}

Focus on: tone, sentence structure, vocabulary level, and any distinctive patterns.

Return a JSON object: {{"summary": "<the description>"}}"""


class ContentGenerationPrompt:
    def __init__(self, topic, content_type, voice_context, sample_posts, trends, length_guidance, creativity_guidance):
        self.topic = topic
        self.content_type = content_type
        self.voice_context = voice_context
        self.sample_posts = sample_posts
        self.trends = trends
        self.length_guidance = length_guidance
        self.creativity_guidance = creativity_guidance

    def generate_prompt(self):
        sample_context = ""
        if self.sample_posts:
            examples = "\n\n".join(f"Example {i + 1}:\n{p}" for i, p in enumerate(self.sample_posts[:3]))
            sample_context = f"\n\nHere are examples of their recent posts for reference:\n{examples}"

        trend_context = ""
        if self.trends:
            trend_context = f"\n\nConsider incorporating these relevant trends if appropriate: {', '.join(self.trends)}"

        form = "short-form" if self.content_type == "short" else "long-form"

        return f"""You are a content ghostwriter who perfectly mimics a specific person's writing voice.

VOICE PROFILE:
{self.voice_context}
{sample_context}

TASK:
Write 3 different variations of a {form} LinkedIn post about: "{self.topic}"
{trend_context}

CONSTRAINTS:
- {self.length_guidance}
- {self.creativity_guidance}
- Each variation should take a different angle or approach
- Match the voice profile's tone, structure, and vocabulary
- Make it sound authentically like this person, not generic AI

Return a JSON object with this structure:
{{
  "variations": [
    {{
      "id": "var-1",
      "content": "<the full post text>",
      "approach": "<1 sentence describing the angle taken>"
    }},
    {{
      "id": "var-2",
      "content": "<the full post text>",
      "approach": "<1 sentence describing the angle taken>"
    }},
    {{
      "id": "var-3",
      "content": "<the full post text>",
      "approach": "<1 sentence describing the angle taken>"
    }}
  ]
}}"""


class VoiceMatchPrompt:
    def __init__(self, content, voice_profile):
        self.content = content
        self.voice_profile = voice_profile

    def generate_prompt(self):
        profile = self.voice_profile
        tone = "Formal" if profile.linguistic.tone_markers.formal > 0.5 else "Casual"
        phrases = ", ".join(p.phrase for p in profile.linguistic.common_phrases[:3])
        hook = profile.structural.hook_patterns[0] if profile.structural.hook_patterns else "None identified"
        topics = ", ".join(profile.content.topics[:5])

        return f"""Score how well this content matches the author's voice profile.

VOICE PROFILE:
{profile.summary}
- Tone: {tone}
- Common phrases: {phrases}
- Hook style: {hook}
- Topics: {topics}

CONTENT TO SCORE:
{self.content}

Return a JSON object:
{{
  "structure": <0-100 how well it matches their structural patterns>,
  "tone": <0-100 how well it matches their tone and style>,
  "vocabulary": <0-100 how well it uses their vocabulary/phrases>,
  "overall": <0-100 weighted average>
}}

Be critical but fair. 70+ means it sounds like them. 85+ means it's very close."""
