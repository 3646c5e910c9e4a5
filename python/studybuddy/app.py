"""FastAPI application factory.

app.state holds:
- store: the MemoryStore served by every route
- completion_provider: CompletionProvider over the configured backends
- httpx_client: the AsyncClient behind the provider, when the app built it

create_app accepts a ready store and provider (tests do this). Whatever is
not passed in is built here (the store) or at startup (client and provider),
and only what the app built is closed at shutdown.

Middleware runs in reverse order of registration. The launcher adds
RequestIDMiddleware after create_app returns, so it wraps the JSON body
guard and every exception handler.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from studybuddy.api.routes import create_api_router
from studybuddy.config import Settings, get_settings
from studybuddy.errors import ApiError
from studybuddy.logging import configure_logging, get_logger
from studybuddy.middleware.json_body import reject_malformed_json
from studybuddy.middleware.request_id import RequestIDMiddleware
from studybuddy.responses import (
    api_error_handler,
    http_exception_handler,
    llm_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from studybuddy.services.llm import CompletionProvider, LLMError
from studybuddy.store import MemoryStore, seed_fixtures

logger = get_logger(__name__)

BACKEND_CONNECT_TIMEOUT_S = 10.0


def _backend_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(float(settings.llm_timeout_s), connect=BACKEND_CONNECT_TIMEOUT_S),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    owned_client: httpx.AsyncClient | None = None
    if app.state.completion_provider is None:
        settings = get_settings()
        owned_client = _backend_client(settings)
        app.state.httpx_client = owned_client
        app.state.completion_provider = CompletionProvider.from_settings(owned_client, settings)

    provider: CompletionProvider = app.state.completion_provider
    logger.info(
        "completion_provider_ready",
        available=provider.is_available(),
        service=provider.active_service_name(),
    )
    try:
        yield
    finally:
        if owned_client is not None:
            await owned_client.aclose()
            logger.info("httpx_client_closed")


def _default_store(settings: Settings) -> MemoryStore:
    store = MemoryStore()
    if settings.seed_fixtures:
        seed_fixtures(store)
        logger.info("store_seeded", **store.stats())
    return store


def create_app(
    store: MemoryStore | None = None,
    completion_provider: CompletionProvider | None = None,
) -> FastAPI:
    """Build the StudyBuddy API.

    Args:
        store: Store to serve. Defaults to a new one, seeded when
            SEED_FIXTURES is on.
        completion_provider: Provider for the AI routes. Defaults to one
            built from settings at startup.
    """
    settings = get_settings()
    configure_logging(json_format=settings.log_json, level=settings.log_level)

    app = FastAPI(
        title="StudyBuddy API",
        description="Backend API for StudyBuddy - an AI-assisted study companion",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else _default_store(settings)
    app.state.completion_provider = completion_provider

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(LLMError, llm_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.middleware("http")(reject_malformed_json)
    app.include_router(create_api_router())

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Install RequestIDMiddleware as the outermost middleware.

    Call after every other middleware is registered.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
