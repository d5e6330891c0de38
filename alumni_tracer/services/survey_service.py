"""Survey lookup and response statistics."""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_tracer.models.base import ResponseStatus
from alumni_tracer.models.survey import Survey
from alumni_tracer.models.survey_invitation import SurveyInvitation
from alumni_tracer.models.survey_question import SurveyQuestion
from alumni_tracer.models.survey_response import SurveyResponse
from alumni_tracer.services.progress_service import completion_percentage
from alumni_tracer.utils.exceptions import SurveyUnavailable

logger = logging.getLogger(__name__)


class SurveyService:
    """Read access to surveys and their active question sets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_survey(self, survey_id: UUID) -> Survey | None:
        return await self.db.get(Survey, survey_id)

    async def get_available_survey(self, survey_id: UUID, now: datetime | None = None) -> Survey:
        """Return the survey if it currently accepts respondents.

        Raises:
            SurveyUnavailable: Survey is missing, not active, or outside its window.
        """
        survey = await self.get_survey(survey_id)
        if survey is None or not survey.is_currently_active(now):
            logger.info(f"Survey {survey_id} is not available to respondents")
            raise SurveyUnavailable("Survey not available")
        return survey

    async def get_active_questions(self, survey_id: UUID) -> list[SurveyQuestion]:
        """Active questions by ``order``; ties fall back to insertion order."""
        result = await self.db.execute(
            select(SurveyQuestion)
            .where(
                SurveyQuestion.survey_id == survey_id,
                SurveyQuestion.is_active.is_(True),
            )
            .order_by(SurveyQuestion.order, SurveyQuestion.created_at, SurveyQuestion.question_id)
        )
        return list(result.scalars().all())

    async def refresh_response_stats(self, survey: Survey) -> Survey:
        """Recount invitations sent and completed responses for the survey.

        Runs inside the caller's transaction; nothing is committed here.
        """
        sent_result = await self.db.execute(
            select(func.count())
            .select_from(SurveyInvitation)
            .where(SurveyInvitation.survey_id == survey.survey_id)
        )
        total_sent = int(sent_result.scalar_one())

        completed_result = await self.db.execute(
            select(func.count())
            .select_from(SurveyResponse)
            .where(
                SurveyResponse.survey_id == survey.survey_id,
                SurveyResponse.status == ResponseStatus.COMPLETED.value,
            )
        )
        total_responses = int(completed_result.scalar_one())

        survey.total_sent = total_sent
        survey.total_responses = total_responses
        # Rate can exceed 100 when uninvited respondents complete the survey
        survey.response_rate = (
            min(completion_percentage(total_responses, total_sent), Decimal("999.99"))
            if total_sent
            else Decimal("0.00")
        )
        return survey
