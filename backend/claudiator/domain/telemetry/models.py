"""Telemetry domain models: devices, sessions, events, notifications, push tokens.

Inbound hook payloads are parsed into ``EventEnvelope``. Known fields are
explicit; unknown keys on the event are kept so the raw payload can be stored
for forward compatibility.
"""
import copy
import enum
from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    StringConstraints,
    field_validator,
    model_validator,
)

from claudiator.domain.common.types import as_utc, parse_timestamp, utc_now

Identifier = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class SessionStatus(str, enum.Enum):
    """Derived session status."""

    ACTIVE = "active"
    WAITING_FOR_INPUT = "waiting_for_input"
    WAITING_FOR_PERMISSION = "waiting_for_permission"
    IDLE = "idle"
    ENDED = "ended"


# ---------- Inbound envelope ----------

class DeviceInfo(BaseModel):
    """Device metadata attached to every event by the reporting client."""

    device_id: Identifier
    device_name: str = ""
    platform: str = ""


class HookEvent(BaseModel):
    """One hook event. Extra keys are preserved in ``model_extra``."""

    model_config = ConfigDict(extra="allow")

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    session_id: Identifier
    hook_event_name: Identifier
    cwd: Optional[str] = None
    prompt: Optional[str] = None
    tool_name: Optional[str] = None
    notification_type: Optional[str] = None
    message: Optional[str] = None

    @model_validator(mode="wrap")
    @classmethod
    def _keep_raw(cls, data: Any, handler):
        event = handler(data)
        if isinstance(data, dict):
            event._raw = copy.deepcopy(data)
        return event

    def raw_payload(self) -> dict[str, Any]:
        """Event body exactly as received: unknown keys kept, absent keys absent."""
        if self._raw:
            return copy.deepcopy(self._raw)
        return self.model_dump(mode="json", exclude_unset=True)


class EventEnvelope(BaseModel):
    """Inbound ingestion request body."""

    device: DeviceInfo
    event: HookEvent
    timestamp: datetime

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_rfc3339(cls, value: Any) -> datetime:
        if isinstance(value, datetime):
            return as_utc(value)
        return parse_timestamp(value)


class PushRegistration(BaseModel):
    """Inbound push token registration."""

    device_id: Identifier
    platform: Identifier
    token: Identifier = Field(validation_alias=AliasChoices("token", "push_token"))
    sandbox: bool = False


# ---------- Projection and log entities ----------

class Device(BaseModel):
    """Reporting machine."""

    device_id: str
    device_name: str
    platform: str
    first_seen: datetime
    last_seen: datetime


class DeviceOverview(Device):
    """Device with its count of non-ended sessions, computed at read time."""

    active_sessions: int = 0


class Session(BaseModel):
    """One continuous unit of work on a device."""

    session_id: str
    device_id: str
    started_at: datetime
    last_event: datetime
    status: SessionStatus
    cwd: Optional[str] = None
    title: Optional[str] = None


class SessionOverview(Session):
    """Session joined with its device's name and platform."""

    device_name: Optional[str] = None
    platform: Optional[str] = None


class Event(BaseModel):
    """Immutable event log entry."""

    id: Optional[int] = None
    session_id: str
    device_id: str
    hook_event_name: str
    timestamp: datetime
    received_at: datetime
    tool_name: Optional[str] = None
    notification_type: Optional[str] = None
    message: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_envelope(
        cls, envelope: EventEnvelope, received_at: Optional[datetime] = None
    ) -> "Event":
        """Build the log entry for an accepted envelope."""
        event = envelope.event
        return cls(
            session_id=event.session_id,
            device_id=envelope.device.device_id,
            hook_event_name=event.hook_event_name,
            timestamp=envelope.timestamp,
            received_at=received_at or utc_now(),
            tool_name=event.tool_name,
            notification_type=event.notification_type,
            message=event.message,
            payload=event.raw_payload(),
        )


class Notification(BaseModel):
    """Feed entry derived from an event that needs the user's attention."""

    id: str
    event_id: int
    session_id: str
    device_id: str
    title: str
    body: str
    notification_type: str
    created_at: datetime
    acknowledged: bool = False


class NotificationAck(BaseModel):
    """Inbound acknowledgement of feed entries."""

    ids: list[Identifier] = Field(max_length=500)


class PushToken(BaseModel):
    """Push token for one (device, platform, sandbox) triple."""

    device_id: str
    platform: str
    sandbox: bool
    token: str
    updated_at: datetime


# ---------- Pages ----------

class SessionPage(BaseModel):
    """Offset page of sessions."""

    sessions: list[SessionOverview]
    has_more: bool
    next_offset: Optional[int] = None


class EventPage(BaseModel):
    """Cursor page of events, ascending by id."""

    events: list[Event]
    has_more: bool
    next_before: Optional[int] = None


class Versions(BaseModel):
    """Change counters clients poll to detect new data."""

    data_version: int = 0
    notification_version: int = 0
