"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from knowledge_federation.api.dependencies import get_context_cache, get_pipeline
from knowledge_federation.cache.context_cache import ContextCache
from knowledge_federation.models.schemas import HealthResponse
from knowledge_federation.pipeline.federation_pipeline import FederationPipeline

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    pipeline: FederationPipeline = Depends(get_pipeline),
    cache: ContextCache = Depends(get_context_cache),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        sources=pipeline.source_names,
        cache_entries=len(cache),
    )
