"""Device repository."""
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from claudiator.domain.common.types import as_utc, to_naive_utc
from claudiator.domain.telemetry.models import Device, DeviceOverview, SessionStatus
from claudiator.infra.db.models.device import DeviceModel
from claudiator.infra.db.models.session import SessionModel


class DeviceRepositoryImpl:
    """Device repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, device_id: str) -> Optional[Device]:
        """Get device by ID."""
        result = await self.session.execute(
            select(DeviceModel).where(DeviceModel.device_id == device_id)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def upsert(self, device: Device) -> None:
        """Insert or update; first_seen keeps its original value."""
        stmt = insert(DeviceModel).values(
            device_id=device.device_id,
            device_name=device.device_name,
            platform=device.platform,
            first_seen=to_naive_utc(device.first_seen),
            last_seen=to_naive_utc(device.last_seen),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DeviceModel.device_id],
            set_={
                "device_name": stmt.excluded.device_name,
                "platform": stmt.excluded.platform,
                "last_seen": stmt.excluded.last_seen,
            },
        )
        await self.session.execute(stmt)

    async def list_overviews(self) -> list[DeviceOverview]:
        """All devices with their non-ended session counts, most recently seen first."""
        active_count = (
            select(func.count(SessionModel.session_id))
            .where(
                SessionModel.device_id == DeviceModel.device_id,
                SessionModel.status != SessionStatus.ENDED.value,
            )
            .correlate(DeviceModel)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(DeviceModel, active_count.label("active_sessions"))
            .order_by(DeviceModel.last_seen.desc(), DeviceModel.device_id)
        )
        return [
            DeviceOverview(
                device_id=model.device_id,
                device_name=model.device_name,
                platform=model.platform,
                first_seen=as_utc(model.first_seen),
                last_seen=as_utc(model.last_seen),
                active_sessions=count or 0,
            )
            for model, count in result.all()
        ]
