"""User account model."""
import uuid
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, String

from alumni_tracer.database import Base
from alumni_tracer.models.base import UserRole, UserStatus, get_uuid_column


class User(Base):
    """Login account for alumni and administrators."""

    __tablename__ = "users"

    user_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.ALUMNI.value)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    last_login_date = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<User(user_id={self.user_id}, email={self.email}, role={self.role})>"
