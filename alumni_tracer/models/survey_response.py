"""Survey response session model."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text

from alumni_tracer.database import Base
from alumni_tracer.models.base import ResponseStatus, get_uuid_column


class SurveyResponse(Base):
    """One respondent's attempt at one survey, addressed by an opaque token.

    ``user_id`` stays null for anonymous respondents until a registration
    survey binds the session to the account it created.
    """

    __tablename__ = "survey_responses"

    response_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    survey_id = get_uuid_column(ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    user_id = get_uuid_column(ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    response_token = Column(String(128), nullable=False, unique=True)

    status = Column(String(20), nullable=False, default=ResponseStatus.IN_PROGRESS.value)
    started_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    last_updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))

    # Snapshot taken at start; never rewritten afterwards
    respondent_email = Column(String(255), nullable=True)
    respondent_name = Column(String(255), nullable=True)
    respondent_student_id = Column(String(100), nullable=True)

    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)

    total_questions = Column(Integer, nullable=False, default=0)
    answered_questions = Column(Integer, nullable=False, default=0)
    completion_percentage = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))

    __table_args__ = (
        Index("ix_survey_responses_survey_status", "survey_id", "status"),
        Index("ix_survey_responses_user_survey", "user_id", "survey_id"),
        Index("ix_survey_responses_respondent_email", "respondent_email"),
    )

    def is_complete(self) -> bool:
        return self.status == ResponseStatus.COMPLETED.value

    def __repr__(self) -> str:
        return (f"<SurveyResponse(response_id={self.response_id}, survey_id={self.survey_id}, "
                f"status={self.status}, completion={self.completion_percentage})>")
