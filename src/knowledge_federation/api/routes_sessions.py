"""Conversation session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from knowledge_federation.api.dependencies import (
    get_inflight,
    get_pipeline,
    get_session_store,
)
from knowledge_federation.api.errors import to_http_error
from knowledge_federation.exceptions import FederationError
from knowledge_federation.models.schemas import (
    CreateSessionRequest,
    MessageModel,
    MessageRequest,
    SessionResponse,
)
from knowledge_federation.pipeline.federation_pipeline import FederationPipeline
from knowledge_federation.pipeline.inflight import InFlightRegistry
from knowledge_federation.storage.sqlite_session_store import SQLiteSessionStore

router = APIRouter(prefix="/sessions")


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    request: CreateSessionRequest,
    store: SQLiteSessionStore = Depends(get_session_store),
) -> SessionResponse:
    try:
        session = await store.create_session(request.user_id, request.title)
    except FederationError as e:
        raise to_http_error(e)
    return SessionResponse.from_domain(session)


@router.get("", response_model=list[SessionResponse])
async def list_sessions(
    user_id: str = Query(min_length=1),
    store: SQLiteSessionStore = Depends(get_session_store),
) -> list[SessionResponse]:
    try:
        sessions = await store.list_sessions(user_id)
    except FederationError as e:
        raise to_http_error(e)
    return [SessionResponse.from_domain(s) for s in sessions]


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    store: SQLiteSessionStore = Depends(get_session_store),
) -> SessionResponse:
    try:
        session = await store.get_session(session_id)
    except FederationError as e:
        raise to_http_error(e)
    return SessionResponse.from_domain(session)


@router.post("/{session_id}/messages", response_model=MessageModel)
async def post_message(
    session_id: str,
    request: MessageRequest,
    pipeline: FederationPipeline = Depends(get_pipeline),
    inflight: InFlightRegistry = Depends(get_inflight),
) -> MessageModel:
    context = request.context.to_domain() if request.context else None
    token = inflight.begin(session_id)
    try:
        message = await pipeline.answer(request.query, session_id, context, cancel=token)
    except FederationError as e:
        raise to_http_error(e)
    finally:
        inflight.finish(session_id, token)
    return MessageModel.from_domain(message)


@router.post("/{session_id}/clear", status_code=204)
async def clear_session(
    session_id: str,
    store: SQLiteSessionStore = Depends(get_session_store),
) -> Response:
    try:
        await store.clear_session(session_id)
    except FederationError as e:
        raise to_http_error(e)
    return Response(status_code=204)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    store: SQLiteSessionStore = Depends(get_session_store),
) -> Response:
    try:
        await store.delete_session(session_id)
    except FederationError as e:
        raise to_http_error(e)
    return Response(status_code=204)
