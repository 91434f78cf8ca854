"""Event log database model."""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String

from claudiator.domain.common.types import as_utc, to_naive_utc
from claudiator.domain.telemetry.models import Event as EventEntity
from claudiator.infra.db.base import Base


class EventModel(Base):
    """Append-only event row. Display order is by id, not client timestamp."""

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String, ForeignKey("devices.device_id"), nullable=False, index=True)
    session_id = Column(String, ForeignKey("sessions.session_id"), nullable=False, index=True)
    hook_event_name = Column(String, nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False)
    received_at = Column(DateTime, nullable=False)
    tool_name = Column(String, nullable=True)
    notification_type = Column(String, nullable=True)
    message = Column(String, nullable=True)
    event_json = Column(JSON, nullable=False)

    def to_entity(self) -> EventEntity:
        """Convert to domain entity."""
        return EventEntity(
            id=self.id,
            session_id=self.session_id,
            device_id=self.device_id,
            hook_event_name=self.hook_event_name,
            timestamp=as_utc(self.timestamp),
            received_at=as_utc(self.received_at),
            tool_name=self.tool_name,
            notification_type=self.notification_type,
            message=self.message,
            payload=self.event_json or {},
        )

    @classmethod
    def from_entity(cls, entity: EventEntity) -> "EventModel":
        """Create from domain entity."""
        return cls(
            device_id=entity.device_id,
            session_id=entity.session_id,
            hook_event_name=entity.hook_event_name,
            timestamp=to_naive_utc(entity.timestamp),
            received_at=to_naive_utc(entity.received_at),
            tool_name=entity.tool_name,
            notification_type=entity.notification_type,
            message=entity.message,
            event_json=entity.payload,
        )
