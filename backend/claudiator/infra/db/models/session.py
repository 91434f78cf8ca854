"""Session database model."""
from sqlalchemy import Column, DateTime, ForeignKey, String

from claudiator.domain.common.types import as_utc
from claudiator.domain.telemetry.models import Session as SessionEntity, SessionStatus
from claudiator.infra.db.base import Base


class SessionModel(Base):
    """Derived session row; one per session_id."""

    __tablename__ = "sessions"

    session_id = Column(String, primary_key=True)
    device_id = Column(String, ForeignKey("devices.device_id"), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False)
    last_event = Column(DateTime, nullable=False, index=True)
    status = Column(String, nullable=False, default=SessionStatus.ACTIVE.value, index=True)
    cwd = Column(String, nullable=True)
    title = Column(String, nullable=True)

    def to_entity(self) -> SessionEntity:
        """Convert to domain entity."""
        return SessionEntity(
            session_id=self.session_id,
            device_id=self.device_id,
            started_at=as_utc(self.started_at),
            last_event=as_utc(self.last_event),
            status=SessionStatus(self.status),
            cwd=self.cwd,
            title=self.title,
        )
