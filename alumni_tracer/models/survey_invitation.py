"""Survey invitation model."""
import uuid
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from alumni_tracer.database import Base
from alumni_tracer.models.base import InvitationStatus, get_uuid_column


class SurveyInvitation(Base):
    """An invitation addressed to one alumnus for one survey.

    The invitation token travels in the survey link; the respondent details
    stored here seed the response snapshot when the survey is started.
    """

    __tablename__ = "survey_invitations"

    invitation_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    survey_id = get_uuid_column(ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    batch_id = get_uuid_column(ForeignKey("batches.batch_id", ondelete="SET NULL"), nullable=True)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    student_id = Column(String(100), nullable=True)
    invitation_token = Column(String(128), nullable=False, unique=True)

    status = Column(String(20), nullable=False, default=InvitationStatus.PENDING.value)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    opened_at = Column(DateTime(timezone=True), nullable=True)
    clicked_at = Column(DateTime(timezone=True), nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    reminder_count = Column(Integer, nullable=False, default=0)
    last_reminder_sent = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_survey_invitations_survey_email", "survey_id", "email"),
    )

    def __repr__(self):
        return (f"<SurveyInvitation(invitation_id={self.invitation_id}, survey_id={self.survey_id}, "
                f"email={self.email}, status={self.status})>")
