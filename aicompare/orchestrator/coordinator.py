"""Comparison coordinator — fans a prompt out to every provider and
fires the summary once enough answers are in."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, Protocol

from aicompare.backends.registry import ProviderRegistry
from aicompare.models.comparison import ComparisonState
from aicompare.models.outcome import ErrorKind, Failure, QueryOutcome, Success
from aicompare.orchestrator.summarizer import SummaryEntry, build_summary_prompt

logger = logging.getLogger(__name__)

StateListener = Callable[[ComparisonState], None]


class Dispatcher(Protocol):
    def dispatch(self, prompt: str, provider_id: str) -> Awaitable[QueryOutcome]: ...


class ComparisonCoordinator:
    """Owns the live ComparisonState and the tasks that fill it in.

    Every run gets a new ``run_id``. Tasks remember the run they were started
    for and drop their result if a newer run has replaced it.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        registry: ProviderRegistry,
        summary_provider: str = "claude",
    ) -> None:
        if summary_provider not in registry:
            raise ValueError(f"Summary provider {summary_provider!r} is not registered")
        self.dispatcher = dispatcher
        self.registry = registry
        self.summary_provider = summary_provider
        self._state: ComparisonState | None = None
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ComparisonState | None:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is not None and self._state.is_running

    @property
    def has_pending_providers(self) -> bool:
        """True while any provider of the current run has not answered yet."""
        return self._state is not None and self._state.any_pending()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback run after every state change; returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start_comparison(self, prompt: str) -> ComparisonState | None:
        """Start a new run and return immediately.

        A blank prompt is ignored. Starting while a run is still in flight
        discards that run; its late results are dropped.
        """
        prompt = (prompt or "").strip()
        if not prompt:
            return None

        self._generation += 1
        state = ComparisonState.new(self._generation, prompt, self.registry.ids())
        for provider_id in state.providers:
            state.mark_pending(provider_id)
        self._state = state
        logger.info(
            "Run %d: dispatching to %d providers: %s",
            state.run_id,
            len(state.providers),
            list(state.providers),
        )
        self._notify(state)

        for provider_id in state.providers:
            self._spawn(self._run_provider(state.run_id, provider_id, prompt))
        return state

    async def wait(self) -> None:
        """Wait until every task launched so far, summary included, has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -- Internals --

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _current(self, run_id: int) -> ComparisonState | None:
        if self._state is None or self._state.run_id != run_id:
            return None
        return self._state

    async def _run_provider(self, run_id: int, provider_id: str, prompt: str) -> None:
        try:
            outcome = await self.dispatcher.dispatch(prompt, provider_id)
        except Exception as exc:
            logger.exception("Run %d: dispatcher raised for %s", run_id, provider_id)
            outcome = Failure(ErrorKind.PROVIDER_ERROR, str(exc) or type(exc).__name__)

        state = self._current(run_id)
        if state is None:
            logger.debug("Run %d superseded; dropping %s result", run_id, provider_id)
            return

        if isinstance(outcome, Success):
            state.mark_succeeded(provider_id, outcome.text, outcome.model_name)
        else:
            state.mark_failed(provider_id, outcome.message)
        logger.info(
            "Run %d: %s %s", run_id, provider_id, state.providers[provider_id].status.value
        )

        self._maybe_start_summary(state)
        self._notify(state)

    def _maybe_start_summary(self, state: ComparisonState) -> None:
        if not state.summary_ready():
            return

        # Snapshot the answers now; later changes never reach this summary
        entries = []
        for descriptor in self.registry:
            slot = state.providers.get(descriptor.id)
            if slot is None or slot.text is None:
                continue
            entries.append(
                SummaryEntry(
                    display_name=descriptor.display_name,
                    model_name=slot.model_name or descriptor.model_name,
                    text=slot.text,
                )
            )
        summary_prompt = build_summary_prompt(state.prompt, entries)
        state.start_summary()
        logger.info(
            "Run %d: summarizing %d responses via %s",
            state.run_id,
            len(entries),
            self.summary_provider,
        )
        self._spawn(self._run_summary(state.run_id, summary_prompt))

    async def _run_summary(self, run_id: int, summary_prompt: str) -> None:
        try:
            outcome = await self.dispatcher.dispatch(summary_prompt, self.summary_provider)
        except Exception as exc:
            logger.exception("Run %d: summary dispatcher raised", run_id)
            outcome = Failure(ErrorKind.PROVIDER_ERROR, str(exc) or type(exc).__name__)

        state = self._current(run_id)
        if state is None:
            logger.debug("Run %d superseded; dropping summary", run_id)
            return

        if isinstance(outcome, Success):
            state.finish_summary(outcome.text)
        else:
            # Summary failures stay out of the UI
            logger.warning("Run %d: summary generation failed: %s", run_id, outcome.message)
            state.fail_summary()
        self._notify(state)

    def _notify(self, state: ComparisonState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener failed")
