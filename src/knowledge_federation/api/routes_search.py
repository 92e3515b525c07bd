"""Intent and search endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from knowledge_federation.api.dependencies import get_pipeline
from knowledge_federation.api.errors import to_http_error
from knowledge_federation.exceptions import FederationError
from knowledge_federation.models.domain import SourceType
from knowledge_federation.models.schemas import (
    IntentRequest,
    IntentResponse,
    RankedResultModel,
    SearchRequest,
    SearchResponse,
    SourceSearchRequest,
)
from knowledge_federation.pipeline.federation_pipeline import FederationPipeline

router = APIRouter()


@router.post("/intent", response_model=IntentResponse)
async def intent(
    request: IntentRequest,
    pipeline: FederationPipeline = Depends(get_pipeline),
) -> IntentResponse:
    return IntentResponse(intents=[t.value for t in pipeline.classify_intent(request.query)])


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    pipeline: FederationPipeline = Depends(get_pipeline),
) -> SearchResponse:
    context = request.context.to_domain() if request.context else None
    try:
        outcome = await pipeline.search(request.query, context)
    except FederationError as e:
        raise to_http_error(e)
    return SearchResponse.from_domain(outcome)


@router.post("/search/{source_type}", response_model=list[RankedResultModel])
async def search_source(
    source_type: str,
    request: SourceSearchRequest,
    pipeline: FederationPipeline = Depends(get_pipeline),
) -> list[RankedResultModel]:
    try:
        kind = SourceType(source_type)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"unknown source type: {source_type}")
    try:
        results = await pipeline.search_source(request.query, kind)
    except FederationError as e:
        raise to_http_error(e)
    return [RankedResultModel.from_domain(r) for r in results]
