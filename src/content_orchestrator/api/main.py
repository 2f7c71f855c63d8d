"""FastAPI app entrypoint for content-orchestrator."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from content_orchestrator.config.settings import Settings, get_settings
from content_orchestrator.critique import (
    RECIPES,
    PipelineProgress,
    get_progress,
    run_content_critique_pipeline,
)
from content_orchestrator.errors import AgentPausedError, AgentRunError
from content_orchestrator.llm.client import LLMClient, build_llm_client
from content_orchestrator.logging_config import configure_logging
from content_orchestrator.storage import StateStore, build_state_store


class CritiqueRequest(BaseModel):
    content_type: str = Field(min_length=1)
    content_context: str = ""


def _ensure_runtime_state(
    app: FastAPI,
    *,
    settings: Settings,
    state_store_override: StateStore | None,
    llm_override: LLMClient | None,
) -> None:
    if not hasattr(app.state, "state_store"):
        app.state.state_store = state_store_override or build_state_store(settings)

    if not hasattr(app.state, "llm"):
        app.state.llm = llm_override or build_llm_client(settings)

    if not hasattr(app.state, "settings"):
        app.state.settings = settings


def create_app(
    *,
    state_store: StateStore | None = None,
    llm: LLMClient | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()
    configure_logging(settings.log_level)

    def _ensure(app: FastAPI) -> None:
        _ensure_runtime_state(
            app,
            settings=settings,
            state_store_override=state_store,
            llm_override=llm,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _ensure(app)
        yield

    app_lifespan = lifespan if state_store is None else None
    app = FastAPI(title=settings.app_name, lifespan=app_lifespan)

    # Keep test paths reliable when lifespan is not executed by the client.
    if state_store is not None:
        _ensure(app)

    def _runtime(request: Request) -> tuple[StateStore, LLMClient]:
        if not hasattr(request.app.state, "state_store"):
            _ensure(request.app)
        return request.app.state.state_store, request.app.state.llm

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.get("/recipes")
    def recipes() -> dict[str, list[dict[str, Any]]]:
        return {
            "recipes": [
                {
                    "content_type": recipe.content_type,
                    "min_aggregate_score": recipe.min_aggregate_score,
                    "max_revision_rounds": recipe.max_revision_rounds,
                }
                for recipe in RECIPES.values()
            ]
        }

    @app.post("/content/{entity_id}/critique")
    async def run_critique(entity_id: str, payload: CritiqueRequest, request: Request) -> Any:
        if payload.content_type not in RECIPES:
            raise HTTPException(
                status_code=404, detail=f"Unknown content type: {payload.content_type}"
            )
        state_store_, llm_ = _runtime(request)
        try:
            result = await run_content_critique_pipeline(
                entity_id,
                payload.content_type,
                payload.content_context,
                llm=llm_,
                state_store=state_store_,
                settings=settings,
            )
        except AgentPausedError as exc:
            return JSONResponse(
                status_code=202, content={"status": "paused", "run_id": exc.run_id}
            )
        except AgentRunError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return {
            "status": "complete",
            "run_id": result.run_id,
            "quality": result.content.quality if result.content else None,
            "content": result.content.content if result.content else None,
        }

    @app.get("/content/runs/{run_id}/progress", response_model=PipelineProgress)
    async def run_progress(run_id: str, request: Request) -> PipelineProgress:
        state_store_, _ = _runtime(request)
        progress = await get_progress(state_store_, run_id)
        if progress is None:
            raise HTTPException(status_code=404, detail="Progress not found")
        return progress

    return app


app = create_app()
