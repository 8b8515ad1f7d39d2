"""OpenAI-compatible chat completions backend (ChatGPT, Grok, Perplexity)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from aicompare.backends.base import OutboundRequest, dig, require_text

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
XAI_API_URL = "https://api.x.ai/v1/chat/completions"
PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"

DEFAULT_MAX_TOKENS = 2048


@dataclass(frozen=True)
class OpenAICompatibleAdapter:
    """Chat completions wire format with bearer-token auth.

    xAI and Perplexity both speak the OpenAI schema, so a single adapter
    covers all three; only the URL and model differ.
    """

    url: str
    model: str
    max_tokens: int = DEFAULT_MAX_TOKENS

    def build_request(self, prompt: str, api_key: str) -> OutboundRequest:
        return OutboundRequest(
            url=self.url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            body={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": self.max_tokens,
            },
        )

    def extract_text(self, data: Any) -> str:
        return require_text(dig(data, "choices", 0, "message", "content"))
