"""Metadata repository."""
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from claudiator.infra.db.models.metadata import MetadataModel


class MetadataRepositoryImpl:
    """Integer counters stored as key/value rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_int(self, key: str, default: int = 0) -> int:
        result = await self.session.execute(
            select(MetadataModel.value).where(MetadataModel.key == key)
        )
        value = result.scalar_one_or_none()
        return int(value) if value is not None else default

    async def increment(self, key: str) -> int:
        """Read-modify-write; callers hold the write lock."""
        value = await self.get_int(key) + 1
        stmt = insert(MetadataModel).values(key=key, value=str(value))
        stmt = stmt.on_conflict_do_update(
            index_elements=[MetadataModel.key],
            set_={"value": stmt.excluded.value},
        )
        await self.session.execute(stmt)
        return value
