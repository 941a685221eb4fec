"""FastAPI web application for the AI Debate Arena."""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from debate_arena import __version__
from debate_arena.config.settings import AppConfig, get_default_config
from debate_arena.debate_engine.exceptions import DebateStateError
from debate_arena.models.providers.exceptions import ErrorKind, InferenceError
from debate_arena.web.debate_manager import DebateManager
from debate_arena.web.endpoints.debates import router as debates_router
from debate_arena.web.endpoints.models import router as models_router

logger: logging.Logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_API_KEY: 401,
    ErrorKind.INSUFFICIENT_CREDITS: 402,
    ErrorKind.RATE_LIMIT_EXCEEDED: 429,
}
UPSTREAM_FAILURE_STATUS = 502


def get_allowed_origins() -> list[str] | None:
    """Get CORS origins from environment or use development defaults."""
    env_origins: str | None = os.environ.get("ALLOWED_ORIGINS")
    if env_origins:
        return [origin.strip() for origin in env_origins.split(",")]
    return None


async def inference_error_handler(_: Request, exc: InferenceError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(exc.kind, UPSTREAM_FAILURE_STATUS)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.user_message, "kind": exc.kind.value},
    )


async def conflict_handler(_: Request, exc: DebateStateError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": exc.user_message})


def create_app(
    config: AppConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the application.

    ``transport`` replaces the network for every outgoing OpenRouter call,
    which is how the tests run the full stack offline.
    """
    config = config or get_default_config()
    debate_manager = DebateManager(config, transport=transport)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("AI Debate Arena API starting")
        yield
        debate_manager.shutdown()
        logger.info("AI Debate Arena API stopped")

    app = FastAPI(
        title="AI Debate Arena",
        description="Two language models debate a topic, turn by turn",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.debate_manager = debate_manager

    allowed_origins = get_allowed_origins()
    if allowed_origins:
        logger.info(f"Setting CORS allowed origins: {allowed_origins}")
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        # Development: allow any localhost/127.0.0.1
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(InferenceError, inference_error_handler)
    app.add_exception_handler(DebateStateError, conflict_handler)

    app.include_router(debates_router, prefix="/v1")
    app.include_router(models_router, prefix="/v1")

    return app
