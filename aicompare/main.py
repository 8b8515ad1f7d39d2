"""AI Compare — FastAPI application entry point."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from aicompare.backends.registry import ProviderRegistry, default_registry
from aicompare.config import Settings, settings as default_settings
from aicompare.models.comparison import ComparisonState
from aicompare.models.outcome import Success
from aicompare.orchestrator.coordinator import ComparisonCoordinator
from aicompare.orchestrator.dispatcher import QueryDispatcher

logger = logging.getLogger(__name__)


# --- Request / Response models ---


class QueryRequest(BaseModel):
    prompt: str | None = None
    provider: str | None = None


class QueryResponse(BaseModel):
    response: str
    model: str


class CompareRequest(BaseModel):
    prompt: str | None = None


class ProviderInfo(BaseModel):
    id: str
    name: str
    model: str
    color: str
    icon: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# --- WebSocket fan-out ---


class Broadcaster:
    """Pushes comparison snapshots to every connected WebSocket client."""

    def __init__(self) -> None:
        self.connections: list[WebSocket] = []
        self._pending: set[asyncio.Task] = set()

    def publish(self, state: ComparisonState) -> None:
        """Coordinator listener; schedules a send without blocking the run."""
        if not self.connections:
            return
        task = asyncio.create_task(self.broadcast(state.snapshot()))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def broadcast(self, message: dict[str, Any]) -> None:
        for ws in list(self.connections):
            try:
                await ws.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.debug("Dropping WebSocket client: %s", exc)
                self.disconnect(ws)

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self.connections:
            self.connections.remove(ws)


# --- App factory ---


def create_app(
    settings: Settings | None = None,
    registry: ProviderRegistry | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app; ``transport`` lets tests stand in for the provider APIs."""
    settings = settings or default_settings
    registry = registry or default_registry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = httpx.AsyncClient(timeout=settings.request_timeout, transport=transport)
        dispatcher = QueryDispatcher(
            registry,
            settings.credentials(),
            client=client,
            timeout=settings.request_timeout,
        )
        coordinator = ComparisonCoordinator(
            dispatcher, registry, summary_provider=settings.summary_provider
        )
        broadcaster = Broadcaster()
        coordinator.subscribe(broadcaster.publish)

        app.state.registry = registry
        app.state.dispatcher = dispatcher
        app.state.coordinator = coordinator
        app.state.broadcaster = broadcaster
        yield
        await coordinator.shutdown()
        await client.aclose()

    app = FastAPI(
        title="AI Compare",
        description="One prompt, five AI responses, side by side",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
        return _error(400, "Invalid request body")

    # --- Routes ---

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/providers", response_model=list[ProviderInfo])
    async def list_providers(request: Request):
        return [
            ProviderInfo(
                id=d.id, name=d.display_name, model=d.model_name, color=d.color, icon=d.icon
            )
            for d in request.app.state.registry
        ]

    @app.post("/api/query", response_model=QueryResponse)
    async def query(req: QueryRequest, request: Request):
        """Send one prompt to one provider and return its answer or a classified error."""
        if not (req.prompt or "").strip() or not req.provider:
            return _error(400, "Missing prompt or provider")

        outcome = await request.app.state.dispatcher.dispatch(req.prompt, req.provider)
        if isinstance(outcome, Success):
            return QueryResponse(response=outcome.text, model=outcome.model_name)
        return _error(outcome.status_code, outcome.message)

    @app.post("/api/compare", status_code=202)
    async def start_compare(req: CompareRequest, request: Request):
        """Fan the prompt out to every provider.

        Returns the fresh run snapshot immediately; poll ``GET /api/compare``
        or listen on ``/ws/compare`` for results.
        """
        coordinator: ComparisonCoordinator = request.app.state.coordinator
        if not (req.prompt or "").strip():
            return _error(400, "Missing prompt")
        if coordinator.has_pending_providers:
            return _error(409, "A comparison is already running")

        state = coordinator.start_comparison(req.prompt)
        return state.snapshot()

    @app.get("/api/compare")
    async def get_compare(request: Request):
        state = request.app.state.coordinator.state
        return state.snapshot() if state is not None else None

    # --- WebSocket ---

    @app.websocket("/ws/compare")
    async def compare_ws(websocket: WebSocket):
        """Stream comparison snapshots: the current one, then every change."""
        broadcaster: Broadcaster = websocket.app.state.broadcaster
        await websocket.accept()
        broadcaster.connections.append(websocket)
        try:
            state = websocket.app.state.coordinator.state
            if state is not None:
                await websocket.send_json(state.snapshot())
            # Keep the connection open; clients don't send anything meaningful
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.debug("WebSocket client disconnected")
        finally:
            broadcaster.disconnect(websocket)

    return app


app = create_app()
