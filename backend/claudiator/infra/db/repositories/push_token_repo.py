"""Push token repository."""
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from claudiator.domain.common.types import to_naive_utc
from claudiator.domain.telemetry.models import PushToken
from claudiator.infra.db.models.push_token import PushTokenModel


class PushTokenRepositoryImpl:
    """Push token repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, token: PushToken) -> PushToken:
        """Replace the token stored for (device_id, platform, sandbox)."""
        stmt = insert(PushTokenModel).values(
            device_id=token.device_id,
            platform=token.platform,
            sandbox=token.sandbox,
            token=token.token,
            updated_at=to_naive_utc(token.updated_at),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                PushTokenModel.device_id,
                PushTokenModel.platform,
                PushTokenModel.sandbox,
            ],
            set_={
                "token": stmt.excluded.token,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.session.execute(stmt)
        result = await self.session.execute(
            select(PushTokenModel).where(
                PushTokenModel.device_id == token.device_id,
                PushTokenModel.platform == token.platform,
                PushTokenModel.sandbox == token.sandbox,
            )
        )
        return result.scalar_one().to_entity()

