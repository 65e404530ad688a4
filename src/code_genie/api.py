"""FastAPI application exposing code generation and per-session history."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from code_genie.config import Settings, settings as default_settings
from code_genie.errors import GenerationError
from code_genie.generator import Completer, GeminiGenerator
from code_genie.models import SUPPORTED_LANGUAGES, ErrorPayload, GenerationResult, HistoryEntry
from code_genie.service import build_request, generate_code
from code_genie.store import HistoryStore

logger = logging.getLogger(__name__)


class GenerateCodeBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Any JSON value; build_request rejects non-strings as an empty prompt.
    prompt: Any = None
    language: str | None = None
    include_comments: bool = Field(True, alias="includeComments")


def _error_response(status_code: int, payload: ErrorPayload) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> HistoryStore:
    return request.app.state.store


def get_completer(config: Settings = Depends(get_settings)) -> Completer:
    return GeminiGenerator(model_name=config.gemini_model)


def get_session_id(x_session_id: str | None = Header(default=None)) -> str:
    return (x_session_id or "").strip() or "default"


def create_app(config: Settings | None = None) -> FastAPI:
    """Build the API application bound to ``config``."""
    config = config or default_settings
    allowed_origins = config.origins

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store.init_db()
        logger.info("Code Genie API ready (env=%s, origins=%s)", config.app_env, ", ".join(allowed_origins))
        yield

    app = FastAPI(title="Code Genie", version="0.1.0", lifespan=lifespan)
    app.state.settings = config
    app.state.store = HistoryStore(config.history_db_path, capacity=config.history_capacity)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Session-Id"],
    )

    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin.rstrip("/") not in allowed_origins:
            return _error_response(
                403,
                ErrorPayload(error="CORS error", message=f"CORS policy: Origin {origin} is not allowed."),
            )
        return await call_next(request)

    @app.exception_handler(GenerationError)
    async def handle_generation_error(request: Request, exc: GenerationError):
        details = exc.details if config.is_development else None
        return _error_response(exc.status_code, ErrorPayload(error=exc.title, message=exc.message, details=details))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return _error_response(
            400, ErrorPayload(error="Invalid request", message="Request body must be a JSON object with a prompt.")
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = exc.detail if exc.detail != "Not Found" else "The requested endpoint does not exist."
            return _error_response(404, ErrorPayload(error="Not found", message=message))
        return _error_response(exc.status_code, ErrorPayload(error="Request failed", message=str(exc.detail)))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error")
        return _error_response(
            500, ErrorPayload(error="Internal server error", message="Something went wrong on our end.")
        )

    @app.get("/api/health")
    async def health():
        return {
            "status": "OK",
            "message": "Code Genie API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/languages")
    async def languages():
        return {"languages": [option.model_dump() for option in SUPPORTED_LANGUAGES]}

    @app.post("/api/generate-code", response_model=GenerationResult)
    async def generate(
        body: GenerateCodeBody,
        completer: Completer = Depends(get_completer),
        store: HistoryStore = Depends(get_store),
        session_id: str = Depends(get_session_id),
    ):
        request = build_request(body.prompt, body.language, include_comments=body.include_comments)
        result = await generate_code(request, completer)
        await run_in_threadpool(store.record, result, session_id=session_id)
        return result

    @app.get("/api/history", response_model=list[HistoryEntry])
    def list_history(
        limit: int | None = None,
        store: HistoryStore = Depends(get_store),
        session_id: str = Depends(get_session_id),
    ):
        return store.list_entries(session_id, limit=limit)

    @app.get("/api/history/{entry_id}", response_model=HistoryEntry)
    def get_history_entry(
        entry_id: str,
        store: HistoryStore = Depends(get_store),
        session_id: str = Depends(get_session_id),
    ):
        entry = store.get_entry(session_id, entry_id)
        if not entry:
            raise HTTPException(status_code=404, detail="History entry not found")
        return entry

    @app.delete("/api/history")
    def clear_history(
        store: HistoryStore = Depends(get_store),
        session_id: str = Depends(get_session_id),
    ):
        return {"cleared": store.clear(session_id)}

    return app


app = create_app()
