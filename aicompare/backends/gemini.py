"""Gemini backend — Google generateContent API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from aicompare.backends.base import OutboundRequest, dig, require_text

GENERATE_CONTENT_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
)
DEFAULT_MODEL = "gemini-3-pro"


@dataclass(frozen=True)
class GeminiAdapter:
    """Google generateContent wire format.

    The API key travels in the query string rather than a header, so the
    endpoint is only known once the credential is.
    """

    model: str = DEFAULT_MODEL

    def endpoint(self, api_key: str) -> str:
        return GENERATE_CONTENT_URL.format(model=self.model) + f"?key={api_key}"

    def build_request(self, prompt: str, api_key: str) -> OutboundRequest:
        return OutboundRequest(
            url=self.endpoint(api_key),
            headers={"Content-Type": "application/json"},
            body={"contents": [{"parts": [{"text": prompt}]}]},
        )

    def extract_text(self, data: Any) -> str:
        return require_text(dig(data, "candidates", 0, "content", "parts", 0, "text"))
