"""Claude backend — Anthropic Messages API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from aicompare.backends.base import MalformedResponse, OutboundRequest, dig, require_text

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-opus-4-5-20251101"


@dataclass(frozen=True)
class ClaudeAdapter:
    """Anthropic Messages wire format (``x-api-key`` + version header)."""

    model: str = DEFAULT_MODEL
    max_tokens: int = 2048
    url: str = ANTHROPIC_API_URL

    def build_request(self, prompt: str, api_key: str) -> OutboundRequest:
        return OutboundRequest(
            url=self.url,
            headers={
                "x-api-key": api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
            body={
                "model": self.model,
                "max_tokens": self.max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
        )

    def extract_text(self, data: Any) -> str:
        # Content may hold non-text blocks (thinking, tool use); take the first text one
        blocks = dig(data, "content")
        if not isinstance(blocks, list):
            raise MalformedResponse("content is not a list")
        for block in blocks:
            if isinstance(block, dict) and block.get("type", "text") == "text":
                return require_text(dig(block, "text"))
        raise MalformedResponse("no text block in content")
