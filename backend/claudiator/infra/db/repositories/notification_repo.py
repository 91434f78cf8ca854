"""Notification feed repository."""
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from claudiator.domain.common.types import to_naive_utc
from claudiator.domain.telemetry.models import Notification
from claudiator.infra.db.models.notification import NotificationModel


class NotificationRepositoryImpl:
    """Notification feed repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, notification: Notification) -> None:
        self.session.add(NotificationModel.from_entity(notification))
        await self.session.flush()

    async def list_after(self, after: Optional[datetime], limit: int) -> list[Notification]:
        """Entries created strictly after ``after``, oldest first."""
        q = select(NotificationModel)
        if after is not None:
            q = q.where(NotificationModel.created_at > to_naive_utc(after))
        q = q.order_by(NotificationModel.created_at, NotificationModel.event_id).limit(limit)
        result = await self.session.execute(q)
        return [model.to_entity() for model in result.scalars().all()]

    async def acknowledge(self, ids: list[str]) -> int:
        """Mark entries acknowledged; unknown ids are ignored. Returns rows matched."""
        if not ids:
            return 0
        result = await self.session.execute(
            update(NotificationModel)
            .where(NotificationModel.id.in_(ids))
            .values(acknowledged=True)
        )
        return result.rowcount
