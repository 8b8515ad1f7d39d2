"""Base protocol and descriptor types for chat provider backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


class MalformedResponse(ValueError):
    """Raised when a provider answers 200 but the expected text is missing."""


@dataclass(frozen=True)
class OutboundRequest:
    """A fully built POST request for one provider call."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ProviderAdapter(Protocol):
    """Interface every provider wire format implements."""

    def build_request(self, prompt: str, api_key: str) -> OutboundRequest:
        """Build the outbound request for a prompt."""
        ...

    def extract_text(self, data: Any) -> str:
        """Pull the answer text out of a decoded response body."""
        ...


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static connection details and display metadata for one provider."""

    id: str
    display_name: str
    model_name: str
    credential_name: str
    adapter: ProviderAdapter
    color: str = "#6b7280"
    icon: str = ""

    def build_request(self, prompt: str, api_key: str) -> OutboundRequest:
        return self.adapter.build_request(prompt, api_key)

    def extract_text(self, data: Any) -> str:
        return self.adapter.extract_text(data)


def dig(data: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, raising MalformedResponse on any miss."""
    current = data
    for key in path:
        try:
            current = current[key]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedResponse(f"missing {key!r} in response") from exc
    return current


def require_text(value: Any) -> str:
    if not isinstance(value, str):
        raise MalformedResponse(f"expected text, got {type(value).__name__}")
    if not value.strip():
        raise MalformedResponse("response text is empty")
    return value
