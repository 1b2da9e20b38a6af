"""FastAPI application factory.

Lifespan
--------
On startup the app builds the long-lived collaborators once: a
:class:`PageFetcher` (one shared ``httpx.Client``), the chat model behind an
:class:`Explainer`, and the :class:`ExplainPipeline` wiring them together
(``request.app.state.pipeline``).  When Supabase is configured a
:class:`SupabaseAuthenticator` is stored on ``request.app.state.authenticator``.
On shutdown the HTTP clients are closed.

Error shape
-----------
Every error response is ``{"error": "..."}``; URL fetch failures also carry
``"details"``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clarifyr import __version__
from clarifyr.api.auth import SupabaseAuthenticator
from clarifyr.api.routers import explain as explain_router
from clarifyr.config import settings
from clarifyr.errors import ExplainError
from clarifyr.explain.pipeline import ExplainPipeline
from clarifyr.logs import configure_logging

logger = logging.getLogger(__name__)


def build_authenticator() -> SupabaseAuthenticator | None:
    if not settings.supabase_url or not settings.supabase_service_key:
        logger.warning(
            "SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing; "
            "authenticated endpoints will fail"
        )
        return None
    return SupabaseAuthenticator(settings.supabase_url, settings.supabase_service_key)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ExplainError)
    async def _explain_error(request: Request, exc: ExplainError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body: provide a JSON object with 'url' or 'text'"},
        )


def create_app(
    pipeline: ExplainPipeline | None = None,
    authenticator: SupabaseAuthenticator | None = None,
) -> FastAPI:
    """Return a fully-configured FastAPI application instance.

    *pipeline* and *authenticator* replace the ones normally built from
    ``settings`` at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        app.state.pipeline = pipeline or ExplainPipeline.from_settings()
        app.state.authenticator = authenticator or build_authenticator()
        try:
            yield
        finally:
            # Only close what this lifespan built.
            if pipeline is None:
                app.state.pipeline.fetcher.close()
            if authenticator is None and app.state.authenticator is not None:
                app.state.authenticator.close()

    app = FastAPI(
        title="Clarifyr API",
        description=(
            "Explains a piece of text, or the readable content of a web page, "
            "in a short beginner-friendly format using a generative model."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "Clarifyr backend is running!"

    app.include_router(explain_router.router, prefix="/api", tags=["explain"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn clarifyr.api.app:app --reload
app = create_app()
