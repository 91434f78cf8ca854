"""Device queries."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from claudiator.api.deps import get_query_service
from claudiator.api.schemas import (
    MAX_QUERY_INT,
    DeviceListResponse,
    DeviceResponse,
    SessionListResponse,
    SessionResponse,
)
from claudiator.domain.telemetry.models import SessionStatus
from claudiator.domain.telemetry.services import QueryService

router = APIRouter()


@router.get("", response_model=DeviceListResponse)
async def list_devices(query: QueryService = Depends(get_query_service)):
    """All devices, most recently seen first, with non-ended session counts."""
    devices = await query.list_devices()
    return DeviceListResponse(devices=[DeviceResponse.from_entity(d) for d in devices])


@router.get("/{device_id}/sessions", response_model=SessionListResponse)
async def list_device_sessions(
    device_id: str,
    active: bool = False,
    status: Optional[SessionStatus] = None,
    limit: Optional[int] = Query(default=None, le=MAX_QUERY_INT),
    query: QueryService = Depends(get_query_service),
):
    """A device's sessions by last_event desc. ``active=true`` drops ended sessions."""
    sessions = await query.list_device_sessions(
        device_id,
        active_only=active,
        status=status.value if status else None,
        limit=limit,
    )
    return SessionListResponse(sessions=[SessionResponse.from_entity(s) for s in sessions])
