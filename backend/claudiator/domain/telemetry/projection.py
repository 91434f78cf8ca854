"""Projection engine: one incoming event -> next device and session state.

Everything here is a pure function of the prior projection (or its absence)
and the incoming envelope. Nothing is cached between requests.

Status is evaluated per event, never accumulated:

    SessionStart, UserPromptSubmit,
    SubagentStart, SubagentStop         -> active
    Stop                                -> waiting_for_input
    SessionEnd                          -> ended
    PermissionRequest                   -> waiting_for_permission
    Notification / permission_prompt    -> waiting_for_permission
    Notification / idle_prompt          -> idle
    anything else                       -> unchanged
"""
from dataclasses import dataclass
from typing import Optional

from claudiator.domain.common.types import truncate_chars
from claudiator.domain.telemetry.models import (
    Device,
    EventEnvelope,
    HookEvent,
    Session,
    SessionStatus,
)

TITLE_MAX_CHARS = 200

# Status for a brand-new session whose first event implies none.
DEFAULT_STATUS = SessionStatus.ACTIVE

_STATUS_BY_EVENT = {
    "SessionStart": SessionStatus.ACTIVE,
    "UserPromptSubmit": SessionStatus.ACTIVE,
    "SubagentStart": SessionStatus.ACTIVE,
    "SubagentStop": SessionStatus.ACTIVE,
    "Stop": SessionStatus.WAITING_FOR_INPUT,
    "SessionEnd": SessionStatus.ENDED,
    "PermissionRequest": SessionStatus.WAITING_FOR_PERMISSION,
}

_STATUS_BY_NOTIFICATION = {
    "permission_prompt": SessionStatus.WAITING_FOR_PERMISSION,
    "idle_prompt": SessionStatus.IDLE,
}


@dataclass(frozen=True)
class Projection:
    """Next device and session state implied by one event."""

    device: Device
    session: Session
    created_device: bool
    created_session: bool


def derive_status(
    hook_event_name: str, notification_type: Optional[str] = None
) -> Optional[SessionStatus]:
    """Status implied by one event, or None when the event leaves status unchanged."""
    if hook_event_name == "Notification":
        return _STATUS_BY_NOTIFICATION.get(notification_type or "")
    return _STATUS_BY_EVENT.get(hook_event_name)


def extract_title(event: HookEvent) -> Optional[str]:
    """Title candidate from a UserPromptSubmit event: message text, else the prompt."""
    if event.hook_event_name != "UserPromptSubmit":
        return None
    for text in (event.message, event.prompt):
        if text and text.strip():
            return truncate_chars(text, TITLE_MAX_CHARS)
    return None


def project_device(envelope: EventEnvelope, existing: Optional[Device]) -> Device:
    """Name, platform and last_seen follow every event; first_seen is set once."""
    info = envelope.device
    return Device(
        device_id=info.device_id,
        device_name=info.device_name,
        platform=info.platform,
        first_seen=existing.first_seen if existing else envelope.timestamp,
        last_seen=envelope.timestamp,
    )


def project_session(envelope: EventEnvelope, existing: Optional[Session]) -> Session:
    """Apply one event to a session, creating it when this is the first event seen."""
    event = envelope.event
    derived = derive_status(event.hook_event_name, event.notification_type)

    if existing is None:
        return Session(
            session_id=event.session_id,
            device_id=envelope.device.device_id,
            started_at=envelope.timestamp,
            last_event=envelope.timestamp,
            status=derived or DEFAULT_STATUS,
            cwd=event.cwd or None,
            title=extract_title(event),
        )

    return Session(
        session_id=existing.session_id,
        device_id=existing.device_id,
        started_at=existing.started_at,
        # Last writer wins; client clocks are not reconciled.
        last_event=envelope.timestamp,
        status=derived or existing.status,
        cwd=existing.cwd or event.cwd or None,
        title=existing.title or extract_title(event),
    )


def project_event(
    envelope: EventEnvelope,
    existing_device: Optional[Device],
    existing_session: Optional[Session],
) -> Projection:
    """Compute the device and session rows to upsert for one event."""
    return Projection(
        device=project_device(envelope, existing_device),
        session=project_session(envelope, existing_session),
        created_device=existing_device is None,
        created_session=existing_session is None,
    )
