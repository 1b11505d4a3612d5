"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from vault_search.api.auth import router as auth_router
from vault_search.api.middleware import RequestTimingMiddleware
from vault_search.api.rate_limiter import SlidingWindowRateLimiter
from vault_search.api.routes_documents import router as documents_router
from vault_search.api.routes_health import router as health_router
from vault_search.api.routes_search import router as search_router
from vault_search.chat.session_store import ChatSessionStore, InMemorySessionBackend
from vault_search.config.settings import Settings
from vault_search.exceptions import ConfigurationError
from vault_search.generation.gemini_provider import GeminiProvider
from vault_search.generation.grounded_generator import GroundedGenerator
from vault_search.matching.reference_matcher import ReferenceMatcher
from vault_search.observability.logger import get_logger, setup_logging
from vault_search.pipeline.search_dispatcher import SearchDispatcher
from vault_search.protocols.document_store import DocumentStore
from vault_search.protocols.llm import LLMProvider
from vault_search.protocols.session_backend import SessionBackend
from vault_search.query.classifier import QueryClassifier
from vault_search.storage.search_cache import SearchCache
from vault_search.storage.sqlite_doc_store import SQLiteDocStore
from vault_search.storage.sqlite_session_store import SQLiteSessionBackend
from vault_search.storage.sqlite_trace_store import SQLiteTraceStore

logger = get_logger("app")


def build_dispatcher(
    settings: Settings,
    document_store: DocumentStore,
    llm: LLMProvider,
    session_backend: SessionBackend | None = None,
    trace_store: SQLiteTraceStore | None = None,
) -> SearchDispatcher:
    cache = None
    if settings.search_cache_enabled:
        cache = SearchCache(
            max_size=settings.search_cache_max_size,
            ttl_s=settings.search_cache_ttl_s,
        )
    return SearchDispatcher(
        document_store=document_store,
        classifier=QueryClassifier(recent_days=settings.recent_days),
        generator=GroundedGenerator(llm=llm),
        matcher=ReferenceMatcher(),
        session_store=ChatSessionStore(session_backend or InMemorySessionBackend()),
        settings=settings,
        trace_store=trace_store,
        cache=cache,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()
    setup_logging(level=settings.log_level, json_output=settings.log_json)

    if not settings.google_api_key:
        raise ConfigurationError("VAULT_GOOGLE_API_KEY must be set")

    # Ensure data directories exist
    for path in [
        settings.sqlite_doc_db_path,
        settings.sqlite_session_db_path,
        settings.sqlite_trace_db_path,
    ]:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    # Storage
    doc_store = SQLiteDocStore(settings.sqlite_doc_db_path)
    await doc_store.initialize()
    trace_store = SQLiteTraceStore(settings.sqlite_trace_db_path)
    await trace_store.initialize()

    session_backend: SessionBackend
    if settings.session_backend == "sqlite":
        sqlite_sessions = SQLiteSessionBackend(settings.sqlite_session_db_path)
        await sqlite_sessions.initialize()
        session_backend = sqlite_sessions
    else:
        session_backend = InMemorySessionBackend()

    # LLM
    llm = GeminiProvider(
        api_key=settings.google_api_key,
        model=settings.gemini_model,
        temperature=settings.gemini_temperature,
        max_tokens=settings.gemini_max_tokens,
    )

    # Attach to app state
    app.state.settings = settings
    app.state.doc_store = doc_store
    app.state.rate_limiter = SlidingWindowRateLimiter()
    app.state.dispatcher = build_dispatcher(
        settings,
        document_store=doc_store,
        llm=llm,
        session_backend=session_backend,
        trace_store=trace_store,
    )

    logger.info(
        "startup_complete",
        docs=await doc_store.count_documents(),
        session_backend=settings.session_backend,
        model=settings.gemini_model,
    )

    yield

    logger.info("shutdown_complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Vault Search",
        version="1.0.0",
        description="Grounded search and chat over a personal health-record vault",
        lifespan=lifespan,
    )
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(documents_router, tags=["documents"])
    app.include_router(search_router, tags=["search"])
    return app
