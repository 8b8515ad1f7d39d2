"""Request building and text extraction for each provider wire format."""

import pytest

from aicompare.backends.base import MalformedResponse, ProviderAdapter
from aicompare.backends.claude import ANTHROPIC_VERSION, ClaudeAdapter
from aicompare.backends.gemini import GeminiAdapter
from aicompare.backends.openai_compatible import XAI_API_URL, OpenAICompatibleAdapter
from conftest import claude_body, gemini_body, openai_body


def test_adapters_satisfy_protocol():
    for adapter in (
        OpenAICompatibleAdapter(url=XAI_API_URL, model="grok-4"),
        ClaudeAdapter(),
        GeminiAdapter(),
    ):
        assert isinstance(adapter, ProviderAdapter)


def test_openai_compatible_request_uses_bearer_key():
    adapter = OpenAICompatibleAdapter(url=XAI_API_URL, model="grok-4")
    req = adapter.build_request("hello", "sk-123")

    assert req.url == XAI_API_URL
    assert req.headers["Authorization"] == "Bearer sk-123"
    assert req.body == {
        "model": "grok-4",
        "messages": [{"role": "user", "content": "hello"}],
        "max_tokens": 2048,
    }


def test_openai_compatible_extracts_first_choice():
    adapter = OpenAICompatibleAdapter(url=XAI_API_URL, model="grok-4")
    assert adapter.extract_text(openai_body("answer")) == "answer"


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": ""}}]},
        {"choices": [{"message": {"content": "  \n"}}]},
        ["not", "a", "dict"],
    ],
)
def test_openai_compatible_rejects_unexpected_shapes(data):
    adapter = OpenAICompatibleAdapter(url=XAI_API_URL, model="grok-4")
    with pytest.raises(MalformedResponse):
        adapter.extract_text(data)


def test_claude_request_sends_key_and_version_headers():
    req = ClaudeAdapter().build_request("hello", "ak-1")

    assert req.headers["x-api-key"] == "ak-1"
    assert req.headers["anthropic-version"] == ANTHROPIC_VERSION
    assert req.body["messages"] == [{"role": "user", "content": "hello"}]
    assert req.body["max_tokens"] == 2048


def test_claude_skips_non_text_blocks():
    data = {
        "content": [
            {"type": "thinking", "thinking": "hmm"},
            {"type": "text", "text": "final"},
        ]
    }
    assert ClaudeAdapter().extract_text(data) == "final"
    assert ClaudeAdapter().extract_text(claude_body("plain")) == "plain"


def test_claude_without_text_block_is_malformed():
    with pytest.raises(MalformedResponse):
        ClaudeAdapter().extract_text({"content": []})
    with pytest.raises(MalformedResponse):
        ClaudeAdapter().extract_text({"id": "msg_1"})


def test_gemini_embeds_key_in_url():
    req = GeminiAdapter(model="gemini-3-pro").build_request("hello", "g-key")

    assert req.url.endswith("/models/gemini-3-pro:generateContent?key=g-key")
    assert "Authorization" not in req.headers
    assert req.body == {"contents": [{"parts": [{"text": "hello"}]}]}


def test_gemini_extraction():
    assert GeminiAdapter().extract_text(gemini_body("hi")) == "hi"
    with pytest.raises(MalformedResponse):
        GeminiAdapter().extract_text({"candidates": [{"finishReason": "SAFETY"}]})
