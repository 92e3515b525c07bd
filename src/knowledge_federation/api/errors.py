"""Translation of domain exceptions into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException

from knowledge_federation.exceptions import (
    FederationError,
    PersistenceError,
    QueryCancelled,
    SessionDeletedError,
    SessionNotFoundError,
)


def to_http_error(e: FederationError) -> HTTPException:
    if isinstance(e, SessionNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SessionDeletedError):
        return HTTPException(status_code=410, detail=str(e))
    if isinstance(e, PersistenceError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, QueryCancelled):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
