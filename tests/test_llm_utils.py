from types import SimpleNamespace

import pytest

import config
import llm_utils
from contentStudio.helper import Clean_JSON, clamp_score
from llm_utils import generate_json, parse_json_response, resolve_model


def test_parse_plain_json():
    assert parse_json_response('{"a": 1}') == {"a": 1}


def test_parse_json_inside_code_fence():
    text = 'Here you go:\n```json\n{"variations": [{"content": "hi"}]}\n```\nEnjoy!'
    assert parse_json_response(text) == {"variations": [{"content": "hi"}]}


def test_parse_json_with_surrounding_prose():
    text = 'Sure! The result is {"summary": "Direct and warm."} Let me know.'
    assert parse_json_response(text) == {"summary": "Direct and warm."}


def test_parse_json_array():
    assert parse_json_response('[1, 2, 3]') == [1, 2, 3]


def test_parse_failure_returns_none():
    assert parse_json_response("I could not do that.") is None
    assert parse_json_response("") is None
    assert parse_json_response("   ") is None


def test_clean_json_repairs_raw_newlines_in_strings():
    raw = '{"summary": "line one\nline two"}'
    cleaned = Clean_JSON(raw).clean_json_response()
    assert cleaned is not None
    assert "line one" in cleaned


def test_clamp_score():
    assert clamp_score(120, 0) == 100
    assert clamp_score(-5, 0) == 0
    assert clamp_score("87.6", 0) == 88
    assert clamp_score(None, 70) == 70
    assert clamp_score("high", 70) == 70


def test_resolve_model_maps_logical_names(monkeypatch):
    monkeypatch.setattr(config, "LLM_PROVIDER", "openai")
    assert resolve_model(None) == llm_utils.MODELS["openai"]["default"]
    assert resolve_model("fast") == llm_utils.MODELS["openai"]["fast"]
    assert resolve_model("gpt-4.1") == "gpt-4.1"

    monkeypatch.setattr(config, "LLM_PROVIDER", "anthropic")
    assert resolve_model("default") == llm_utils.MODELS["anthropic"]["default"]


@pytest.mark.asyncio
async def test_generate_json_openai(monkeypatch):
    monkeypatch.setattr(config, "LLM_PROVIDER", "openai")
    captured = {}

    async def fake_call(messages, model, max_tokens, temperature, **kwargs):
        captured.update(messages=messages, model=model, temperature=temperature)
        message = SimpleNamespace(content='```json\n{"ok": true}\n```')
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    monkeypatch.setattr(llm_utils, "single_llm_call", fake_call)

    result = await generate_json("Say ok", temperature=0.3, system="Be brief")

    assert result == {"ok": True}
    assert captured["messages"][0] == {"role": "system", "content": "Be brief"}
    assert captured["messages"][1] == {"role": "user", "content": "Say ok"}
    assert captured["temperature"] == 0.3


@pytest.mark.asyncio
async def test_generate_text_anthropic_clamps_temperature(monkeypatch):
    monkeypatch.setattr(config, "LLM_PROVIDER", "anthropic")
    captured = {}

    class FakeMessages:
        async def create(self, **kwargs):
            captured.update(kwargs)
            return SimpleNamespace(content=[SimpleNamespace(type="text", text='{"n": 3}')])

    fake_client = SimpleNamespace(messages=FakeMessages())
    monkeypatch.setattr(config, "get_anthropic_client", lambda: fake_client)

    result = await generate_json("Count", temperature=1.2, model="fast")

    assert result == {"n": 3}
    assert captured["temperature"] == 1.0
    assert captured["model"] == config.ANTHROPIC_FAST_MODEL
    assert "system" not in captured
