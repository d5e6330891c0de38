"""Survey invitation tracking and reminder eligibility."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_tracer.config import Settings, get_settings
from alumni_tracer.models.base import InvitationStatus
from alumni_tracer.models.survey import Survey
from alumni_tracer.models.survey_invitation import SurveyInvitation
from alumni_tracer.utils.datetime_helpers import ensure_utc, utc_now

logger = logging.getLogger(__name__)

CLICKABLE_STATUSES = {InvitationStatus.SENT.value, InvitationStatus.OPENED.value}
OPENABLE_STATUSES = {InvitationStatus.PENDING.value, InvitationStatus.SENT.value}


@dataclass(frozen=True)
class ReminderPolicy:
    """How often, and how many times, an unanswered invitation may be chased."""

    interval_days: int = 7
    max_reminders: int = 3

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ReminderPolicy":
        settings = settings or get_settings()
        return cls(
            interval_days=settings.default_reminder_interval_days,
            max_reminders=settings.max_reminders,
        )

    def interval_for(self, survey: Survey) -> timedelta:
        days = survey.reminder_interval_days or self.interval_days
        return timedelta(days=days)


class InvitationService:
    """Status transitions for survey invitations.

    Methods only mutate rows in the session; the caller commits.
    """

    def __init__(self, db: AsyncSession, policy: ReminderPolicy | None = None):
        self.db = db
        self.policy = policy or ReminderPolicy.from_settings()

    async def find_for_survey(self, survey_id: UUID, invitation_token: str | None) -> SurveyInvitation | None:
        """Invitation with this token for this survey, or None."""
        if not invitation_token:
            return None
        result = await self.db.execute(
            select(SurveyInvitation).where(
                SurveyInvitation.invitation_token == invitation_token,
                SurveyInvitation.survey_id == survey_id,
            )
        )
        return result.scalar_one_or_none()

    def mark_opened(self, invitation: SurveyInvitation, now: datetime | None = None) -> bool:
        if invitation.status not in OPENABLE_STATUSES:
            return False
        invitation.status = InvitationStatus.OPENED.value
        invitation.opened_at = now or utc_now()
        return True

    def mark_clicked(self, invitation: SurveyInvitation, now: datetime | None = None) -> bool:
        """Record that the survey link was followed.

        Only sent or opened invitations move to ``clicked``; a responded
        invitation keeps its status.
        """
        if invitation.status not in CLICKABLE_STATUSES:
            return False
        invitation.status = InvitationStatus.CLICKED.value
        invitation.clicked_at = now or utc_now()
        logger.info(f"Invitation {invitation.invitation_id} clicked")
        return True

    def mark_responded(self, invitation: SurveyInvitation, now: datetime | None = None) -> None:
        invitation.status = InvitationStatus.RESPONDED.value
        invitation.responded_at = now or utc_now()

    async def mark_responded_for_email(
        self, survey_id: UUID, email: str | None, now: datetime | None = None
    ) -> SurveyInvitation | None:
        """Flag the respondent's invitation for this survey as responded, if any."""
        if not email:
            return None
        result = await self.db.execute(
            select(SurveyInvitation)
            .where(
                SurveyInvitation.survey_id == survey_id,
                SurveyInvitation.email == email,
            )
            .order_by(SurveyInvitation.created_at.desc())
            .limit(1)
        )
        invitation = result.scalar_one_or_none()
        if invitation is None:
            return None
        self.mark_responded(invitation, now)
        logger.info(f"Invitation {invitation.invitation_id} marked responded")
        return invitation

    def can_send_reminder(
        self, invitation: SurveyInvitation, survey: Survey, now: datetime | None = None
    ) -> bool:
        if invitation.status == InvitationStatus.RESPONDED.value:
            return False
        if not survey.send_reminder_emails:
            return False
        if (invitation.reminder_count or 0) >= self.policy.max_reminders:
            return False

        last_sent = ensure_utc(invitation.last_reminder_sent)
        if last_sent is None:
            return True
        now = ensure_utc(now) or utc_now()
        return last_sent + self.policy.interval_for(survey) < now

    def record_reminder(self, invitation: SurveyInvitation, now: datetime | None = None) -> None:
        invitation.reminder_count = (invitation.reminder_count or 0) + 1
        invitation.last_reminder_sent = now or utc_now()
