"""Provider registry — the fixed table of supported chat providers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from aicompare.backends.base import ProviderDescriptor
from aicompare.backends.claude import ClaudeAdapter
from aicompare.backends.gemini import GeminiAdapter
from aicompare.backends.openai_compatible import (
    OPENAI_API_URL,
    PERPLEXITY_API_URL,
    XAI_API_URL,
    OpenAICompatibleAdapter,
)


class UnknownProvider(KeyError):
    """Raised when a provider id is not in the registry."""


class ProviderRegistry:
    """Immutable, ordered lookup of provider descriptors by id."""

    def __init__(self, descriptors: Iterable[ProviderDescriptor]) -> None:
        self._descriptors: tuple[ProviderDescriptor, ...] = tuple(descriptors)
        self._by_id = {d.id: d for d in self._descriptors}
        if len(self._by_id) != len(self._descriptors):
            raise ValueError("Provider ids must be unique")

    def get(self, provider_id: str) -> ProviderDescriptor:
        try:
            return self._by_id[provider_id]
        except KeyError:
            raise UnknownProvider(provider_id) from None

    def ids(self) -> list[str]:
        return [d.id for d in self._descriptors]

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._by_id

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)


def default_registry() -> ProviderRegistry:
    """Build the five supported providers in display order."""
    return ProviderRegistry(
        [
            ProviderDescriptor(
                id="chatgpt",
                display_name="ChatGPT",
                model_name="GPT-5.2",
                credential_name="OPENAI_API_KEY",
                adapter=OpenAICompatibleAdapter(url=OPENAI_API_URL, model="gpt-5.2"),
                color="#10a37f",
                icon="◯",
            ),
            ProviderDescriptor(
                id="claude",
                display_name="Claude",
                model_name="Claude Opus 4.5",
                credential_name="ANTHROPIC_API_KEY",
                adapter=ClaudeAdapter(),
                color="#d97706",
                icon="◈",
            ),
            ProviderDescriptor(
                id="gemini",
                display_name="Gemini",
                model_name="Gemini 3 Pro",
                credential_name="GOOGLE_API_KEY",
                adapter=GeminiAdapter(),
                color="#4285f4",
                icon="◇",
            ),
            ProviderDescriptor(
                id="grok",
                display_name="Grok",
                model_name="Grok 4",
                credential_name="XAI_API_KEY",
                adapter=OpenAICompatibleAdapter(url=XAI_API_URL, model="grok-4"),
                color="#1d9bf0",
                icon="✕",
            ),
            ProviderDescriptor(
                id="perplexity",
                display_name="Perplexity",
                model_name="Sonar Pro",
                credential_name="PERPLEXITY_API_KEY",
                adapter=OpenAICompatibleAdapter(url=PERPLEXITY_API_URL, model="sonar-pro"),
                color="#22c55e",
                icon="◎",
            ),
        ]
    )
