"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from knowledge_federation.adapters.rest_records import RestRecordAdapter, build_rest_client
from knowledge_federation.adapters.sqlite_records import SQLiteRecordAdapter
from knowledge_federation.api.middleware import RequestTimingMiddleware
from knowledge_federation.api.routes_health import router as health_router
from knowledge_federation.api.routes_search import router as search_router
from knowledge_federation.api.routes_sessions import router as sessions_router
from knowledge_federation.cache.context_cache import ContextCache
from knowledge_federation.config.settings import Settings, validate_settings
from knowledge_federation.generation.context_assembler import ContextAssembler
from knowledge_federation.generation.gemini_generator import GeminiGenerator
from knowledge_federation.models.domain import SourceType
from knowledge_federation.observability.logger import get_logger, setup_logging
from knowledge_federation.pipeline.federation_pipeline import FederationPipeline
from knowledge_federation.pipeline.inflight import InFlightRegistry
from knowledge_federation.protocols.source_adapter import SourceAdapter
from knowledge_federation.retrieval.fan_out import FanOutCoordinator
from knowledge_federation.scoring.relevance import KeywordRelevanceScorer
from knowledge_federation.storage.migrations import initialize_records_db
from knowledge_federation.storage.sqlite_session_store import SQLiteSessionStore

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    validate_settings(settings)

    for path in [settings.sqlite_session_db_path, settings.sqlite_records_db_path]:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    # Storage
    session_store = SQLiteSessionStore(settings.sqlite_session_db_path)
    await session_store.initialize()
    await initialize_records_db(settings.sqlite_records_db_path)

    # Source adapters: local records always, hosted tables when configured
    adapters: list[SourceAdapter] = [
        SQLiteRecordAdapter(
            settings.sqlite_records_db_path,
            source_type,
            limit=settings.adapter_result_limit,
        )
        for source_type in SourceType
    ]
    rest_client = None
    if settings.rest_base_url:
        rest_client = build_rest_client(
            settings.rest_base_url, settings.rest_api_key, settings.rest_timeout_seconds
        )
        adapters.extend(
            RestRecordAdapter(rest_client, source_type, limit=settings.adapter_result_limit)
            for source_type in SourceType
        )

    # Generation
    generator = GeminiGenerator(
        api_key=settings.google_api_key,
        model=settings.gemini_model,
        temperature=settings.gemini_temperature,
        max_tokens=settings.gemini_max_tokens,
    )
    if not settings.google_api_key:
        logger.warning("generator_unconfigured", model=settings.gemini_model)

    context_cache = ContextCache(
        max_entries=settings.context_cache_max_entries,
        ttl_seconds=settings.context_cache_ttl_seconds,
    )

    pipeline = FederationPipeline(
        coordinator=FanOutCoordinator(adapters, settings),
        scorer=KeywordRelevanceScorer(settings),
        assembler=ContextAssembler(settings),
        generator=generator,
        session_store=session_store,
        settings=settings,
        cache=context_cache,
    )

    # Attach to app state
    app.state.pipeline = pipeline
    app.state.session_store = session_store
    app.state.context_cache = context_cache
    app.state.inflight = InFlightRegistry()

    logger.info(
        "startup_complete",
        adapters=[a.name for a in adapters],
        deadline_ms=settings.fan_out_deadline_ms,
    )

    yield

    if rest_client is not None:
        await rest_client.aclose()
    context_cache.clear()
    logger.info("shutdown_complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Knowledge Federation Engine",
        version="1.0.0",
        description="Federated search and context ranking for the workspace assistant",
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(search_router, tags=["search"])
    app.include_router(sessions_router, tags=["sessions"])
    return app
