"""Scan session API routes for v1 endpoints (read-only)."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from cookscan.api.schemas import (
    ScanSessionDetailSchema,
    ScanSessionListResponseSchema,
    detail_to_schema,
    summary_to_schema,
)
from cookscan.api.v1.dependencies import (
    get_current_user_id,
    get_list_scan_sessions_handler,
    get_scan_session_handler,
)
from cookscan.application.queries.get_scan_session import (
    GetActiveScanSessionQuery,
    GetScanSessionHandler,
    GetScanSessionQuery,
)
from cookscan.application.queries.list_scan_sessions import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    ListScanSessionsHandler,
    ListScanSessionsQuery,
)
from cookscan.domain.exceptions import EntityNotFoundError, RepositoryError
from cookscan.domain.value_objects.session_status import SessionStatus

router = APIRouter(prefix="/scan-sessions", tags=["scan-sessions"])


@router.get("/active", response_model=ScanSessionDetailSchema)
async def get_active_session(
    user_id: str = Depends(get_current_user_id),
    handler: GetScanSessionHandler = Depends(get_scan_session_handler),
) -> ScanSessionDetailSchema:
    try:
        dto = await handler.handle_active(GetActiveScanSessionQuery(user_id=user_id))
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to load active scan session") from exc
    if dto is None:
        raise HTTPException(status_code=404, detail="No active scan session")
    return detail_to_schema(dto)


@router.get("/{session_id}", response_model=ScanSessionDetailSchema)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    handler: GetScanSessionHandler = Depends(get_scan_session_handler),
) -> ScanSessionDetailSchema:
    try:
        dto = await handler.handle(GetScanSessionQuery(user_id=user_id, session_id=session_id))
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to load scan session") from exc
    return detail_to_schema(dto)


@router.get("", response_model=ScanSessionListResponseSchema)
async def list_sessions(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    status: Optional[SessionStatus] = Query(None),
    user_id: str = Depends(get_current_user_id),
    handler: ListScanSessionsHandler = Depends(get_list_scan_sessions_handler),
) -> ScanSessionListResponseSchema:
    try:
        dtos = await handler.handle(ListScanSessionsQuery(user_id=user_id, limit=limit, status=status))
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to list scan sessions") from exc
    sessions = [summary_to_schema(dto) for dto in dtos]
    return ScanSessionListResponseSchema(sessions=sessions, total=len(sessions))
