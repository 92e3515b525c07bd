"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from knowledge_federation.cache.context_cache import ContextCache
from knowledge_federation.pipeline.federation_pipeline import FederationPipeline
from knowledge_federation.pipeline.inflight import InFlightRegistry
from knowledge_federation.storage.sqlite_session_store import SQLiteSessionStore


def get_pipeline(request: Request) -> FederationPipeline:
    return request.app.state.pipeline


def get_session_store(request: Request) -> SQLiteSessionStore:
    return request.app.state.session_store


def get_inflight(request: Request) -> InFlightRegistry:
    return request.app.state.inflight


def get_context_cache(request: Request) -> ContextCache:
    return request.app.state.context_cache
