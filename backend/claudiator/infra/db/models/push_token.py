"""Push token database model."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from claudiator.domain.common.types import as_utc
from claudiator.domain.telemetry.models import PushToken as PushTokenEntity
from claudiator.infra.db.base import Base


class PushTokenModel(Base):
    """Current push token per (device_id, platform, sandbox)."""

    __tablename__ = "push_tokens"
    __table_args__ = (
        UniqueConstraint("device_id", "platform", "sandbox", name="uq_push_tokens_device_platform_sandbox"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String, nullable=False)
    platform = Column(String, nullable=False)
    sandbox = Column(Boolean, nullable=False, default=False)
    token = Column(String, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def to_entity(self) -> PushTokenEntity:
        """Convert to domain entity."""
        return PushTokenEntity(
            device_id=self.device_id,
            platform=self.platform,
            sandbox=bool(self.sandbox),
            token=self.token,
            updated_at=as_utc(self.updated_at),
        )
