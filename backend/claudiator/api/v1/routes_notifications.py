"""Notification feed."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from claudiator.api.deps import get_notification_service
from claudiator.api.schemas import (
    MAX_QUERY_INT,
    NotificationListResponse,
    NotificationResponse,
    StatusResponse,
)
from claudiator.domain.common.errors import ValidationError
from claudiator.domain.common.types import parse_timestamp
from claudiator.domain.telemetry.models import NotificationAck
from claudiator.domain.telemetry.services import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    after: Optional[str] = None,
    limit: Optional[int] = Query(default=None, le=MAX_QUERY_INT),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Feed entries created after the ``after`` timestamp, oldest first."""
    cursor = None
    if after is not None:
        try:
            cursor = parse_timestamp(after)
        except ValueError as e:
            raise ValidationError(f"after: {e}", field="after") from e
    entries = await notifications.list_notifications(after=cursor, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.from_entity(n) for n in entries]
    )


@router.post("/ack", response_model=StatusResponse)
async def acknowledge_notifications(
    ack: NotificationAck,
    notifications: NotificationService = Depends(get_notification_service),
):
    await notifications.acknowledge(ack.ids)
    return StatusResponse()
