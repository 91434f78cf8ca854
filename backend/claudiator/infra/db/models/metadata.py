"""Key/value metadata model."""
from sqlalchemy import Column, String

from claudiator.infra.db.base import Base


class MetadataModel(Base):
    """Server-wide counters such as data_version."""

    __tablename__ = "metadata"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
