"""Completion progress for response sessions."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from alumni_tracer.models.base import ResponseStatus
from alumni_tracer.models.survey_answer import SurveyAnswer
from alumni_tracer.models.survey_question import SurveyQuestion
from alumni_tracer.models.survey_response import SurveyResponse
from alumni_tracer.utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class ProgressSnapshot:
    total: int
    answered: int
    percentage: Decimal


def completion_percentage(answered: int, total: int) -> Decimal:
    """``round(100 * answered / total, 2)``, or 0 for a survey without questions."""
    if total <= 0:
        return Decimal("0.00")
    return (Decimal(100) * answered / total).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class ProgressService:
    """Derives answered/total counters for a response from the database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_active_questions(self, survey_id) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(SurveyQuestion)
            .where(
                SurveyQuestion.survey_id == survey_id,
                SurveyQuestion.is_active.is_(True),
            )
        )
        return int(result.scalar_one())

    async def count_answered_questions(self, response: SurveyResponse) -> int:
        """Answer rows of the response, skips included, for active questions only."""
        result = await self.db.execute(
            select(func.count())
            .select_from(SurveyAnswer)
            .join(SurveyQuestion, SurveyQuestion.question_id == SurveyAnswer.question_id)
            .where(
                SurveyAnswer.response_id == response.response_id,
                SurveyQuestion.survey_id == response.survey_id,
                SurveyQuestion.is_active.is_(True),
            )
        )
        return int(result.scalar_one())

    async def measure(self, response: SurveyResponse) -> ProgressSnapshot:
        total = await self.count_active_questions(response.survey_id)
        answered = min(await self.count_answered_questions(response), total)
        return ProgressSnapshot(
            total=total,
            answered=answered,
            percentage=completion_percentage(answered, total),
        )

    async def recompute(self, response: SurveyResponse, now: datetime | None = None) -> ProgressSnapshot:
        """Refresh the response's progress counters in the current transaction.

        The caller owns the commit. Running this twice without intervening
        writes yields the same snapshot.
        """
        snapshot = await self.measure(response)

        response.total_questions = snapshot.total
        response.answered_questions = snapshot.answered
        response.completion_percentage = snapshot.percentage
        response.last_updated_at = now or utc_now()

        logger.debug(
            f"Progress for response {response.response_id}: "
            f"{snapshot.answered}/{snapshot.total} ({snapshot.percentage}%)"
        )
        return snapshot

    async def recompute_if_open(
        self, response: SurveyResponse, now: datetime | None = None
    ) -> ProgressSnapshot | None:
        """Like :meth:`recompute`, but the write only lands while the session is in progress.

        Returns None when the row has left ``in_progress`` (a completion
        committed by another request, say); nothing is written then.
        """
        snapshot = await self.measure(response)
        values = {
            "total_questions": snapshot.total,
            "answered_questions": snapshot.answered,
            "completion_percentage": snapshot.percentage,
            "last_updated_at": now or utc_now(),
        }
        result = await self.db.execute(
            update(SurveyResponse)
            .where(
                SurveyResponse.response_id == response.response_id,
                SurveyResponse.status == ResponseStatus.IN_PROGRESS.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(f"Progress for response {response.response_id} not saved: session is no longer open")
            return None

        for key, value in values.items():
            set_committed_value(response, key, value)
        logger.debug(
            f"Progress for response {response.response_id}: "
            f"{snapshot.answered}/{snapshot.total} ({snapshot.percentage}%)"
        )
        return snapshot
