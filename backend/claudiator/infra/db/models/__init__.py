"""Database models."""
from claudiator.infra.db.models.device import DeviceModel
from claudiator.infra.db.models.session import SessionModel
from claudiator.infra.db.models.event import EventModel
from claudiator.infra.db.models.notification import NotificationModel
from claudiator.infra.db.models.push_token import PushTokenModel
from claudiator.infra.db.models.metadata import MetadataModel

__all__ = [
    "DeviceModel",
    "SessionModel",
    "EventModel",
    "NotificationModel",
    "PushTokenModel",
    "MetadataModel",
]
