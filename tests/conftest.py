from collections.abc import Callable

import httpx
import pytest

from aicompare.backends.registry import ProviderRegistry, default_registry
from aicompare.orchestrator.dispatcher import QueryDispatcher

CREDENTIAL_NAMES = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GOOGLE_API_KEY",
    "XAI_API_KEY",
    "PERPLEXITY_API_KEY",
)

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer API keys out of tests.

    A test that needs a credential passes it explicitly.
    """
    for name in CREDENTIAL_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("AICOMPARE_SUMMARY_PROVIDER", raising=False)
    monkeypatch.delenv("AICOMPARE_REQUEST_TIMEOUT", raising=False)


@pytest.fixture
def registry() -> ProviderRegistry:
    return default_registry()


@pytest.fixture
def credentials() -> dict[str, str]:
    """A fake key for every provider."""
    return {name: f"test-{name.lower()}" for name in CREDENTIAL_NAMES}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def make_dispatcher(registry: ProviderRegistry, credentials: dict[str, str]):
    """Build a dispatcher whose HTTP traffic goes to ``handler``."""

    def _make(
        handler: Handler,
        creds: dict[str, str] | None = None,
    ) -> tuple[QueryDispatcher, RecordingTransport]:
        transport = RecordingTransport(handler)
        client = httpx.AsyncClient(transport=transport)
        dispatcher = QueryDispatcher(
            registry, credentials if creds is None else creds, client=client, timeout=5.0
        )
        return dispatcher, transport

    return _make


def openai_body(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def claude_body(text: str) -> dict:
    return {"content": [{"type": "text", "text": text}]}


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def provider_body(host: str, text: str) -> dict:
    """Successful body in the wire format of the API behind ``host``."""
    if host == "api.anthropic.com":
        return claude_body(text)
    if host == "generativelanguage.googleapis.com":
        return gemini_body(text)
    return openai_body(text)
