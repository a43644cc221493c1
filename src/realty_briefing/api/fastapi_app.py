"""FastAPI application factory.

Endpoints:
- GET /health
- /api/news/...               (see realty_briefing.api.news)
- /api/schedule-briefing/...  (see realty_briefing.api.briefing)
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from realty_briefing.api import briefing, news
from realty_briefing.api.deps import TextGenerator
from realty_briefing.common.config import Settings
from realty_briefing.llm.errors import (
    ConfigurationError,
    GenerationError,
    UpstreamTimeoutError,
)
from realty_briefing.llm.gemini_client import GeminiClient
from realty_briefing.store.database import Database
from realty_briefing.store.news import NewsRepository
from realty_briefing.store.schedules import ScheduleRepository

LOGGER = logging.getLogger("realty_briefing.api.app")


def _status_for(exc: GenerationError) -> int:
    if isinstance(exc, ConfigurationError):
        return 500
    if isinstance(exc, UpstreamTimeoutError):
        return 504
    return 502


def create_app(settings: Settings, generator: TextGenerator | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Service settings; the database is opened in the lifespan.
        generator: Text generator to use instead of a ``GeminiClient`` built
            from ``settings.gemini``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db = Database(settings.database_url)
        await db.connect()
        app.state.db = db
        app.state.news = NewsRepository(db)
        app.state.schedules = ScheduleRepository(db)
        if generator is not None:
            app.state.generator = generator
        else:
            if not settings.gemini.api_key:
                LOGGER.warning("GEMINI_API_KEY is not set; briefing endpoints will fail")
            app.state.generator = GeminiClient(settings.gemini)
        LOGGER.info("Service ready (model=%s)", settings.gemini.model)
        try:
            yield
        finally:
            await db.close()

    app = FastAPI(title="Realty Briefing", version="0.1.0", lifespan=lifespan)
    app.include_router(news.router)
    app.include_router(briefing.router)

    @app.exception_handler(GenerationError)
    async def _generation_error(request: Request, exc: GenerationError) -> JSONResponse:
        LOGGER.error("Generation failed for %s: %s: %s", request.url.path, type(exc).__name__, exc)
        return JSONResponse(
            status_code=_status_for(exc),
            content={
                "success": False,
                "message": "Failed to generate the AI response.",
                "error": str(exc),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "model": settings.gemini.model}

    return app
