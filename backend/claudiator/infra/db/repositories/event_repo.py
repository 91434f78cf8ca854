"""Event log repository."""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claudiator.domain.telemetry.models import Event
from claudiator.infra.db.models.event import EventModel


class EventRepositoryImpl:
    """Append-only event log."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, event: Event) -> Event:
        """Insert the event; the store assigns a strictly increasing id."""
        model = EventModel.from_entity(event)
        self.session.add(model)
        await self.session.flush()
        return event.model_copy(update={"id": model.id})

    async def list_by_session(
        self, session_id: str, limit: int, before: Optional[int] = None
    ) -> list[Event]:
        """Newest id first, optionally only ids below ``before``."""
        q = select(EventModel).where(EventModel.session_id == session_id)
        if before is not None:
            q = q.where(EventModel.id < before)
        q = q.order_by(EventModel.id.desc()).limit(limit)
        result = await self.session.execute(q)
        return [model.to_entity() for model in result.scalars().all()]
