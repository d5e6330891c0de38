"""Alumni profile model."""
import uuid
from datetime import datetime, UTC

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text

from alumni_tracer.database import Base
from alumni_tracer.models.base import get_uuid_column


class AlumniProfile(Base):
    """Personal, academic and employment details for one alumni account."""

    __tablename__ = "alumni_profiles"

    profile_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    user_id = get_uuid_column(
        ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True
    )
    batch_id = get_uuid_column(ForeignKey("batches.batch_id", ondelete="SET NULL"), nullable=True)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    middle_name = Column(String(100), nullable=True)
    student_id = Column(String(100), nullable=True)
    birth_date = Column(Date, nullable=True)
    gender = Column(String(30), nullable=True)
    phone = Column(String(50), nullable=True)

    current_address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)

    degree_program = Column(String(255), nullable=True)
    major = Column(String(255), nullable=True)
    graduation_year = Column(Integer, nullable=True)
    gpa = Column(Numeric(4, 2), nullable=True)

    employment_status = Column(String(40), nullable=True)
    current_job_title = Column(String(255), nullable=True)
    current_employer = Column(String(255), nullable=True)
    current_salary = Column(Numeric(12, 2), nullable=True)

    profile_completed = Column(Boolean, nullable=False, default=False)
    profile_completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(part for part in parts if part).strip()

    def __repr__(self):
        return f"<AlumniProfile(profile_id={self.profile_id}, user_id={self.user_id}, name={self.full_name!r})>"
