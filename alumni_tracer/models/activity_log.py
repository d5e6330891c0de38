"""Activity log model."""
import uuid
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, ForeignKey, Index, JSON, String, Text

from alumni_tracer.database import Base
from alumni_tracer.models.base import get_uuid_column


class ActivityLog(Base):
    """Audit trail entry.

    ``entity_kind`` holds an :class:`~alumni_tracer.models.base.EntityKind`
    value; together with ``entity_id`` it names the affected record.
    """

    __tablename__ = "activity_logs"

    log_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    user_id = get_uuid_column(ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    action = Column(String(100), nullable=False)
    entity_kind = Column(String(30), nullable=True)
    entity_id = get_uuid_column(nullable=True)
    description = Column(Text, nullable=False)
    details = Column("metadata", JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_activity_logs_user_action", "user_id", "action"),
        Index("ix_activity_logs_entity", "entity_kind", "entity_id"),
    )

    def __repr__(self):
        return f"<ActivityLog(log_id={self.log_id}, action={self.action}, entity={self.entity_kind}:{self.entity_id})>"
