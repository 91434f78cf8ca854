"""Notification feed database model."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from claudiator.domain.common.types import as_utc, to_naive_utc
from claudiator.domain.telemetry.models import Notification as NotificationEntity
from claudiator.infra.db.base import Base


class NotificationModel(Base):
    """One feed entry, written in the same transaction as its event."""

    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    session_id = Column(String, ForeignKey("sessions.session_id"), nullable=False, index=True)
    device_id = Column(String, ForeignKey("devices.device_id"), nullable=False)
    title = Column(String, nullable=False)
    body = Column(String, nullable=False)
    notification_type = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    acknowledged = Column(Boolean, nullable=False, default=False)

    def to_entity(self) -> NotificationEntity:
        """Convert to domain entity."""
        return NotificationEntity(
            id=self.id,
            event_id=self.event_id,
            session_id=self.session_id,
            device_id=self.device_id,
            title=self.title,
            body=self.body,
            notification_type=self.notification_type,
            created_at=as_utc(self.created_at),
            acknowledged=bool(self.acknowledged),
        )

    @classmethod
    def from_entity(cls, entity: NotificationEntity) -> "NotificationModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            event_id=entity.event_id,
            session_id=entity.session_id,
            device_id=entity.device_id,
            title=entity.title,
            body=entity.body,
            notification_type=entity.notification_type,
            created_at=to_naive_utc(entity.created_at),
            acknowledged=entity.acknowledged,
        )
