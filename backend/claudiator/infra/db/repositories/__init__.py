"""Repository implementations."""
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from claudiator.infra.db.repositories.device_repo import DeviceRepositoryImpl
from claudiator.infra.db.repositories.event_repo import EventRepositoryImpl
from claudiator.infra.db.repositories.metadata_repo import MetadataRepositoryImpl
from claudiator.infra.db.repositories.notification_repo import NotificationRepositoryImpl
from claudiator.infra.db.repositories.push_token_repo import PushTokenRepositoryImpl
from claudiator.infra.db.repositories.session_repo import SessionRepositoryImpl


@dataclass
class SqlRepositories:
    """All repositories sharing one AsyncSession (and so one transaction)."""

    devices: DeviceRepositoryImpl
    sessions: SessionRepositoryImpl
    events: EventRepositoryImpl
    push_tokens: PushTokenRepositoryImpl
    metadata: MetadataRepositoryImpl
    notifications: NotificationRepositoryImpl

    @classmethod
    def bind(cls, session: AsyncSession) -> "SqlRepositories":
        return cls(
            devices=DeviceRepositoryImpl(session),
            sessions=SessionRepositoryImpl(session),
            events=EventRepositoryImpl(session),
            push_tokens=PushTokenRepositoryImpl(session),
            metadata=MetadataRepositoryImpl(session),
            notifications=NotificationRepositoryImpl(session),
        )


__all__ = [
    "SqlRepositories",
    "DeviceRepositoryImpl",
    "SessionRepositoryImpl",
    "EventRepositoryImpl",
    "PushTokenRepositoryImpl",
    "MetadataRepositoryImpl",
    "NotificationRepositoryImpl",
]
