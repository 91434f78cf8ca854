"""Session and event queries."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from claudiator.api.deps import get_query_service
from claudiator.api.schemas import (
    MAX_QUERY_INT,
    EventListResponse,
    EventResponse,
    SessionListResponse,
    SessionResponse,
)
from claudiator.domain.telemetry.models import SessionStatus
from claudiator.domain.telemetry.services import QueryService

router = APIRouter()


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    active: bool = False,
    status: Optional[SessionStatus] = None,
    limit: Optional[int] = Query(default=None, le=MAX_QUERY_INT),
    offset: int = Query(default=0, ge=0, le=MAX_QUERY_INT),
    query: QueryService = Depends(get_query_service),
):
    """Sessions across all devices, newest activity first."""
    page = await query.list_sessions(
        active_only=active,
        status=status.value if status else None,
        limit=limit,
        offset=offset,
    )
    return SessionListResponse(
        sessions=[SessionResponse.from_entity(s) for s in page.sessions],
        has_more=page.has_more,
        next_offset=page.next_offset,
    )


@router.get("/{session_id}/events", response_model=EventListResponse)
async def list_session_events(
    session_id: str,
    limit: Optional[int] = Query(default=None, le=MAX_QUERY_INT),
    before: Optional[int] = Query(default=None, ge=0, le=MAX_QUERY_INT),
    query: QueryService = Depends(get_query_service),
):
    """The newest ``limit`` events older than ``before``, in insertion order."""
    page = await query.list_session_events(session_id, limit=limit, before=before)
    return EventListResponse(
        events=[EventResponse.from_entity(e) for e in page.events],
        has_more=page.has_more,
        next_before=page.next_before,
    )
