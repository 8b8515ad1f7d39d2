"""Comparison run state — live per-provider slots plus the summary slot."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProviderStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SummaryStatus(Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


# Allowed forward moves; anything else is a regression
_PROVIDER_TRANSITIONS = {
    ProviderStatus.IDLE: {ProviderStatus.PENDING},
    ProviderStatus.PENDING: {ProviderStatus.SUCCEEDED, ProviderStatus.FAILED},
    ProviderStatus.SUCCEEDED: set(),
    ProviderStatus.FAILED: set(),
}

_SUMMARY_TRANSITIONS = {
    SummaryStatus.NOT_STARTED: {SummaryStatus.PENDING},
    SummaryStatus.PENDING: {SummaryStatus.DONE, SummaryStatus.FAILED},
    SummaryStatus.DONE: set(),
    SummaryStatus.FAILED: set(),
}


@dataclass
class ProviderSlot:
    """One provider's status within a run."""

    status: ProviderStatus = ProviderStatus.IDLE
    text: str | None = None
    model_name: str | None = None
    error: str | None = None


@dataclass
class SummarySlot:
    status: SummaryStatus = SummaryStatus.NOT_STARTED
    text: str | None = None


@dataclass
class ComparisonState:
    """Mutable record for one comparison run.

    Created fresh for every submitted prompt and replaced wholesale by the
    next one. Each mutator touches exactly one slot, so completions that land
    in the same event-loop tick cannot clobber each other.
    """

    run_id: int
    prompt: str
    providers: dict[str, ProviderSlot] = field(default_factory=dict)
    summary: SummarySlot = field(default_factory=SummarySlot)

    @classmethod
    def new(cls, run_id: int, prompt: str, provider_ids: list[str]) -> ComparisonState:
        return cls(
            run_id=run_id,
            prompt=prompt,
            providers={pid: ProviderSlot() for pid in provider_ids},
        )

    # -- Provider slots --

    def _advance(self, provider_id: str, status: ProviderStatus) -> ProviderSlot:
        slot = self.providers[provider_id]
        if status not in _PROVIDER_TRANSITIONS[slot.status]:
            raise ValueError(
                f"Provider {provider_id} cannot move from "
                f"{slot.status.value} to {status.value}"
            )
        slot.status = status
        return slot

    def mark_pending(self, provider_id: str) -> None:
        self._advance(provider_id, ProviderStatus.PENDING)

    def mark_succeeded(self, provider_id: str, text: str, model_name: str) -> None:
        slot = self._advance(provider_id, ProviderStatus.SUCCEEDED)
        slot.text = text
        slot.model_name = model_name

    def mark_failed(self, provider_id: str, message: str) -> None:
        slot = self._advance(provider_id, ProviderStatus.FAILED)
        slot.error = message

    def any_pending(self) -> bool:
        return any(s.status is ProviderStatus.PENDING for s in self.providers.values())

    def succeeded_ids(self) -> list[str]:
        """Succeeded provider ids, in the order the slots were created."""
        return [
            pid
            for pid, slot in self.providers.items()
            if slot.status is ProviderStatus.SUCCEEDED
        ]

    # -- Summary slot --

    def _advance_summary(self, status: SummaryStatus) -> None:
        if status not in _SUMMARY_TRANSITIONS[self.summary.status]:
            raise ValueError(
                f"Summary cannot move from {self.summary.status.value} to {status.value}"
            )
        self.summary.status = status

    def summary_ready(self) -> bool:
        """True when the summary may start: nothing pending and two answers in."""
        return (
            self.summary.status is SummaryStatus.NOT_STARTED
            and not self.any_pending()
            and len(self.succeeded_ids()) >= 2
        )

    def start_summary(self) -> None:
        self._advance_summary(SummaryStatus.PENDING)

    def finish_summary(self, text: str) -> None:
        self._advance_summary(SummaryStatus.DONE)
        self.summary.text = text

    def fail_summary(self) -> None:
        self._advance_summary(SummaryStatus.FAILED)

    @property
    def is_running(self) -> bool:
        return self.any_pending() or self.summary.status is SummaryStatus.PENDING

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of the run for the presentation layer."""
        return {
            "run_id": self.run_id,
            "prompt": self.prompt,
            "running": self.is_running,
            "providers": {
                pid: {
                    "status": slot.status.value,
                    "response": slot.text,
                    "model": slot.model_name,
                    "error": slot.error,
                }
                for pid, slot in self.providers.items()
            },
            "summary": {
                "status": self.summary.status.value,
                # A failed summary renders as an empty panel
                "text": self.summary.text if self.summary.status is SummaryStatus.DONE else None,
            },
        }
