"""Response bodies for the v1 API."""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, PlainSerializer

from claudiator.domain.common.types import format_timestamp
from claudiator.domain.telemetry.models import (
    DeviceOverview,
    Event,
    Notification,
    SessionOverview,
    SessionStatus,
)

# RFC 3339 UTC with "Z"; milliseconds only when non-zero.
Timestamp = Annotated[datetime, PlainSerializer(format_timestamp, return_type=str)]

# Largest integer SQLite can bind.
MAX_QUERY_INT = 2**63 - 1


class PingResponse(BaseModel):
    status: str = "ok"
    server_version: str
    data_version: int
    notification_version: int


class EventCreatedResponse(BaseModel):
    id: int
    timestamp: Timestamp


class StatusResponse(BaseModel):
    status: str = "ok"


class DeviceResponse(BaseModel):
    device_id: str
    device_name: str
    platform: str
    first_seen: Timestamp
    last_seen: Timestamp
    active_sessions: int

    @classmethod
    def from_entity(cls, device: DeviceOverview) -> "DeviceResponse":
        return cls(**device.model_dump())


class DeviceListResponse(BaseModel):
    devices: list[DeviceResponse]


class SessionResponse(BaseModel):
    session_id: str
    device_id: str
    started_at: Timestamp
    last_event: Timestamp
    status: SessionStatus
    cwd: Optional[str] = None
    title: Optional[str] = None
    device_name: Optional[str] = None
    platform: Optional[str] = None

    @classmethod
    def from_entity(cls, session: SessionOverview) -> "SessionResponse":
        return cls(**session.model_dump())


class SessionListResponse(BaseModel):
    sessions: list[SessionResponse]
    has_more: bool = False
    next_offset: Optional[int] = None


class EventResponse(BaseModel):
    id: int
    session_id: str
    device_id: str
    hook_event_name: str
    timestamp: Timestamp
    received_at: Timestamp
    tool_name: Optional[str] = None
    notification_type: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_entity(cls, event: Event) -> "EventResponse":
        return cls(**event.model_dump(exclude={"payload"}))


class EventListResponse(BaseModel):
    events: list[EventResponse]
    has_more: bool = False
    next_before: Optional[int] = None


class NotificationResponse(BaseModel):
    id: str
    event_id: int
    session_id: str
    device_id: str
    title: str
    body: str
    notification_type: str
    created_at: Timestamp
    acknowledged: bool

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationResponse":
        return cls(**notification.model_dump())


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
