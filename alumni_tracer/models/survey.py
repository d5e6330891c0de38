"""Survey model."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text, Index

from alumni_tracer.database import Base
from alumni_tracer.models.base import SurveyStatus, get_uuid_column
from alumni_tracer.utils.datetime_helpers import ensure_utc


class Survey(Base):
    """A survey administered to alumni, optionally used for registration."""

    __tablename__ = "surveys"

    survey_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    survey_type = Column(String(50), nullable=False, default="tracer")
    status = Column(String(20), nullable=False, default=SurveyStatus.DRAFT.value)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    is_anonymous = Column(Boolean, nullable=False, default=False)
    allow_multiple_responses = Column(Boolean, nullable=False, default=False)
    require_authentication = Column(Boolean, nullable=False, default=False)
    is_registration_survey = Column(Boolean, nullable=False, default=False)

    send_reminder_emails = Column(Boolean, nullable=False, default=False)
    reminder_interval_days = Column(Integer, nullable=True)

    total_sent = Column(Integer, nullable=False, default=0)
    total_responses = Column(Integer, nullable=False, default=0)
    response_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))

    __table_args__ = (
        Index("ix_surveys_status", "status"),
    )

    def is_currently_active(self, now: datetime | None = None) -> bool:
        """Active status and, when set, inside the start/end window."""
        if self.status != SurveyStatus.ACTIVE.value:
            return False

        now = ensure_utc(now) or datetime.now(UTC)
        start_date = ensure_utc(self.start_date)
        end_date = ensure_utc(self.end_date)

        if start_date and now < start_date:
            return False
        if end_date and now > end_date:
            return False
        return True

    def __repr__(self) -> str:
        return f"<Survey(survey_id={self.survey_id}, title={self.title!r}, status={self.status})>"
