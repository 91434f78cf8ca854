"""Notification feed derivation.

Decides whether one event deserves a feed entry and what it says:

    Stop                                -> stop
    PermissionRequest                   -> permission_prompt
    Notification / permission_prompt    -> permission_prompt
    Notification / idle_prompt          -> idle_prompt
    anything else                       -> no entry

The entry title is the session title when the session has one.
"""
from dataclasses import dataclass
from typing import Optional

from claudiator.domain.telemetry.models import HookEvent


@dataclass(frozen=True)
class NotificationContent:
    title: str
    body: str
    notification_type: str


def _permission_body(tool_name: Optional[str], message: Optional[str]) -> str:
    if tool_name and message:
        return f"Permission required: {tool_name}: {message}"
    if tool_name or message:
        return f"Permission required: {tool_name or message}"
    return "A session needs permission to continue"


def derive_notification(
    event: HookEvent, session_title: Optional[str] = None
) -> Optional[NotificationContent]:
    """Feed entry content for ``event``, or None when it needs no attention."""

    def title(fallback: str) -> str:
        return session_title or fallback

    name = event.hook_event_name
    if name == "Stop":
        return NotificationContent(
            title=title("Session Stopped"),
            body=f"Session stopped: {event.message or 'No reason given'}",
            notification_type="stop",
        )
    if name == "PermissionRequest" or (
        name == "Notification" and event.notification_type == "permission_prompt"
    ):
        return NotificationContent(
            title=title("Permission Required"),
            body=_permission_body(event.tool_name, event.message),
            notification_type="permission_prompt",
        )
    if name == "Notification" and event.notification_type == "idle_prompt":
        return NotificationContent(
            title=title("Session Idle"),
            body=f"Session idle: {event.message or 'Waiting for input'}",
            notification_type="idle_prompt",
        )
    return None
