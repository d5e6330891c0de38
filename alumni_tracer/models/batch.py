"""Graduating batch model."""
import uuid
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, Integer, String, Text

from alumni_tracer.database import Base
from alumni_tracer.models.base import get_uuid_column


class Batch(Base):
    __tablename__ = "batches"

    batch_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    graduation_year = Column(Integer, nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    def __repr__(self):
        return f"<Batch(batch_id={self.batch_id}, name={self.name!r}, year={self.graduation_year})>"
