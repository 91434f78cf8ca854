"""Session repository."""
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from claudiator.domain.common.types import as_utc, to_naive_utc
from claudiator.domain.telemetry.models import Session, SessionOverview, SessionStatus
from claudiator.infra.db.models.device import DeviceModel
from claudiator.infra.db.models.session import SessionModel


class SessionRepositoryImpl:
    """Session repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, session_id: str) -> Optional[Session]:
        """Get session by ID."""
        result = await self.session.execute(
            select(SessionModel).where(SessionModel.session_id == session_id)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def upsert(self, session: Session) -> None:
        """Insert or update.

        device_id and started_at are never rewritten; cwd and title are only
        filled while still NULL.
        """
        stmt = insert(SessionModel).values(
            session_id=session.session_id,
            device_id=session.device_id,
            started_at=to_naive_utc(session.started_at),
            last_event=to_naive_utc(session.last_event),
            status=session.status.value,
            cwd=session.cwd,
            title=session.title,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[SessionModel.session_id],
            set_={
                "last_event": stmt.excluded.last_event,
                "status": stmt.excluded.status,
                "cwd": func.coalesce(SessionModel.cwd, stmt.excluded.cwd),
                "title": func.coalesce(SessionModel.title, stmt.excluded.title),
            },
        )
        await self.session.execute(stmt)

    async def list_by_device(
        self,
        device_id: str,
        status: Optional[str] = None,
        active_only: bool = False,
        limit: int = 50,
    ) -> list[SessionOverview]:
        """A device's sessions, newest last_event first."""
        q = self._overview_query(status, active_only).where(SessionModel.device_id == device_id)
        result = await self.session.execute(q.limit(limit))
        return [self._overview(row) for row in result.all()]

    async def list_all(
        self,
        status: Optional[str] = None,
        active_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> list[SessionOverview]:
        """Sessions across devices, newest last_event first."""
        q = self._overview_query(status, active_only)
        result = await self.session.execute(q.limit(limit).offset(offset))
        return [self._overview(row) for row in result.all()]

    def _overview_query(self, status: Optional[str], active_only: bool):
        q = (
            select(SessionModel, DeviceModel.device_name, DeviceModel.platform)
            .outerjoin(DeviceModel, DeviceModel.device_id == SessionModel.device_id)
            .order_by(SessionModel.last_event.desc(), SessionModel.session_id)
        )
        if status:
            q = q.where(SessionModel.status == status)
        if active_only:
            q = q.where(SessionModel.status != SessionStatus.ENDED.value)
        return q

    @staticmethod
    def _overview(row) -> SessionOverview:
        model, device_name, platform = row
        return SessionOverview(
            session_id=model.session_id,
            device_id=model.device_id,
            started_at=as_utc(model.started_at),
            last_event=as_utc(model.last_event),
            status=SessionStatus(model.status),
            cwd=model.cwd,
            title=model.title,
            device_name=device_name,
            platform=platform,
        )
