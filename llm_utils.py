"""
Utility functions for LLM calls.

OpenAI is the default provider; set LLM_PROVIDER=anthropic to route
generate_text/generate_json through Claude instead.
"""
import json
import logging
import re
from typing import Any

import config
from config import async_client
from contentStudio.helper import Clean_JSON

logger = logging.getLogger(__name__)

MODELS = {
    "openai": {"default": config.OPENAI_MODEL, "fast": config.OPENAI_ANALYSIS_MODEL},
    "anthropic": {"default": config.ANTHROPIC_MODEL, "fast": config.ANTHROPIC_FAST_MODEL},
}

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


async def single_llm_call(
    messages: list[dict],
    model: str = config.OPENAI_MODEL,
    max_tokens: int = 800,
    temperature: float = 0.7,
    **kwargs
) -> Any:
    """
    Execute a single async chat completion call.

    Args:
        messages: List of message dicts with role and content.
        model: OpenAI model to use.
        max_tokens: Maximum tokens in response.
        temperature: Sampling temperature.
        **kwargs: Additional OpenAI API parameters.

    Returns:
        OpenAI ChatCompletion response.
    """
    return await async_client.chat.completions.create(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
        **kwargs
    )


def resolve_model(model: str | None) -> str:
    """Map a logical model name (default/fast) to the provider's model id."""
    provider_models = MODELS.get(config.LLM_PROVIDER, MODELS["openai"])
    if model is None:
        return provider_models["default"]
    return provider_models.get(model, model)


async def generate_text(
    prompt: str,
    model: str | None = None,
    max_tokens: int = 4096,
    temperature: float = 0.7,
    system: str | None = None,
) -> str:
    """Send a single user prompt and return the first text block of the reply."""
    model_id = resolve_model(model)

    if config.LLM_PROVIDER == "anthropic":
        kwargs = {}
        if system:
            kwargs["system"] = system
        msg = await config.get_anthropic_client().messages.create(
            model=model_id,
            max_tokens=max_tokens,
            # Anthropic rejects temperatures above 1.0
            temperature=min(max(temperature, 0.0), 1.0),
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
        for block in msg.content or []:
            if getattr(block, "type", None) == "text":
                return block.text
        return ""

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    response = await single_llm_call(
        messages=messages,
        model=model_id,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    return response.choices[0].message.content or ""


def parse_json_response(text: str) -> Any:
    """
    Parse a model reply that should contain JSON.

    Tries the raw text first, then the first markdown code fence, then the
    Clean_JSON repair pass. Returns None when nothing parses.
    """
    if not text or not text.strip():
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    match = _FENCE_RE.search(text)
    if match:
        try:
            return json.loads(match.group(1).strip())
        except json.JSONDecodeError:
            logger.warning("Failed to parse JSON from code block")

    cleaned = Clean_JSON(text).clean_json_response()
    if cleaned is not None:
        return json.loads(cleaned)

    logger.error("Failed to parse JSON response: %s", text[:500])
    return None


async def generate_json(prompt: str, **options) -> Any:
    """Generate a reply and parse it as JSON. Returns None on parse failure."""
    text = await generate_text(prompt, **options)
    return parse_json_response(text)
