"""Device database model."""
from sqlalchemy import Column, DateTime, String

from claudiator.domain.common.types import as_utc
from claudiator.domain.telemetry.models import Device as DeviceEntity
from claudiator.infra.db.base import Base


class DeviceModel(Base):
    """Reporting machine, keyed by the client-chosen device_id."""

    __tablename__ = "devices"

    device_id = Column(String, primary_key=True)
    device_name = Column(String, nullable=False, default="")
    platform = Column(String, nullable=False, default="")
    first_seen = Column(DateTime, nullable=False)
    last_seen = Column(DateTime, nullable=False, index=True)

    def to_entity(self) -> DeviceEntity:
        """Convert to domain entity."""
        return DeviceEntity(
            device_id=self.device_id,
            device_name=self.device_name,
            platform=self.platform,
            first_seen=as_utc(self.first_seen),
            last_seen=as_utc(self.last_seen),
        )
